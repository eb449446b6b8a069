"""
Shared route declarations: imported by both server.py and client.py.
The server dispatches to these handlers; the client generates one method per name.
"""
from dataclasses import dataclass

from simplycall import ASSUME_TYPESAFE, Router

router = Router()


@dataclass
class Session:
    user: str | None


_store: dict[str, bytes] = {}


async def put(ctx: Session, name: str, data: bytes) -> dict:
    """Store a file, return its size."""
    _store[name] = data
    return {"name": name, "size": len(data), "owner": ctx.user}


async def get(ctx: Session, name: str) -> bytes:
    """Fetch a stored file."""
    return _store[name]


async def listing(ctx: Session) -> list[str]:
    return sorted(_store)


def parse_put(ctx: Session, *args):
    if ctx.user is None:
        raise PermissionError("login required")
    if len(args) != 2 or not isinstance(args[0], str) or not isinstance(args[1], bytes):
        raise TypeError("put(name: str, data: bytes)")
    return args


def parse_get(ctx: Session, *args):
    if len(args) != 1 or not isinstance(args[0], str):
        raise TypeError("get(name: str)")
    return args


files = (
    router.on("files")
    .with_handlers({"put": put, "get": get, "listing": listing})
    .conform_arguments_through({"put": parse_put, "get": parse_get, "listing": ASSUME_TYPESAFE})
)
