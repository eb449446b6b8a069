"""
HTTP endpoint for the routes in routes.py.
To run: uvicorn server:app --port 8000   (from examples/files)
"""
import logging
import sys
from pathlib import Path

# example lives in examples/files
sys.path.insert(0, str(Path(__file__).resolve().parent))

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from simplycall import Err
from simplycall.rpc import HttpReceiveTransport, error_body

from routes import Session, router

logging.basicConfig(level=logging.DEBUG)

receiver = HttpReceiveTransport(router)


async def rpc(request: Request) -> Response:
    ctx = Session(user=request.headers.get("x-user"))
    result = await receiver.on_request(request, ctx)
    if isinstance(result, Err):
        return Response(error_body(result), status_code=500, media_type="application/json")
    return Response(result.value.body, headers=result.value.headers)


app = Starlette(routes=[Route("/rpc", rpc, methods=["POST"])])
