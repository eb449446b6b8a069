"""
Client: turns a route declaration into an object with one async method per route.
Methods are generated up front from the declared names; nothing is intercepted at call time.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from simplycall.core.registry import identifier
from simplycall.core.result import Call

if TYPE_CHECKING:
    from simplycall.rpc.protocol import Transport


@runtime_checkable
class RouteDeclaration(Protocol):
    """What a client needs to know about a scope: its name and its route names."""

    scope: str

    @property
    def names(self) -> tuple[str, ...]:
        ...


class RemoteScope:
    """One generated async method per declared route."""

    def __init__(self, scope: str, names: tuple[str, ...]) -> None:
        self._scope = scope
        self._names = names

    def __repr__(self) -> str:
        return f"RemoteScope({self._scope!r}, {list(self._names)!r})"

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._names))


def _make_remote_call(transport: Transport, route_id: str, ctx: Any, handler: Callable[..., Any] | None) -> Callable[..., Any]:
    async def remote_call(*args: Any) -> Any:
        return await transport.send(Call(ctx=ctx, route_id=route_id, args=args))

    name = route_id.rsplit(" ", 1)[-1]
    remote_call.__name__ = name
    remote_call.__qualname__ = name
    if handler is not None:
        remote_call.__doc__ = handler.__doc__
        remote_call.__wrapped__ = handler  # type: ignore[attr-defined]
    return remote_call


class Client:
    """
    Facade over a transport: client.on(group, ctx).route_name(*args).
    Every call is independent; results and errors come straight from transport.send().
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def on(self, routes: RouteDeclaration, ctx: Any = None) -> RemoteScope:
        """
        Build the callable interface for ``routes``.
        ``ctx`` rides along on every Call for the transport's local use; it is not inspected here.
        """
        handlers: Mapping[str, Any] = getattr(routes, "handlers", {}) or {}
        scope = RemoteScope(routes.scope, tuple(routes.names))
        for name in routes.names:
            setattr(
                scope,
                name,
                _make_remote_call(self._transport, identifier(routes.scope, name), ctx, handlers.get(name)),
            )
        return scope
