from simplycall.rpc.protocol import CallRouter, Transport
from simplycall.rpc.codec import ARGTYPE_HEADER, BINARY, ID_HEADER, STRUCTURED
from simplycall.rpc.http_client import HttpSendTransport
from simplycall.rpc.http_server import HttpReceiveTransport, WireResponse, error_body

__all__ = [
    "ARGTYPE_HEADER",
    "BINARY",
    "CallRouter",
    "HttpReceiveTransport",
    "HttpSendTransport",
    "ID_HEADER",
    "STRUCTURED",
    "Transport",
    "WireResponse",
    "error_body",
]
