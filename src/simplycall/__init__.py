"""
simplycall: typed remote procedure calls over a pluggable transport.
Declare routes on a Router, call them through a Client; HTTP transport included.
"""
from simplycall.core import (
    ASSUME_TYPESAFE,
    Call,
    Client,
    CustomParser,
    Err,
    FailureKind,
    HttpTransportConfig,
    NoValidation,
    Ok,
    Result,
    RouteGroup,
    Router,
)
from simplycall.errors import DuplicateRouteError, RpcError, SimplycallError

__all__ = [
    "ASSUME_TYPESAFE",
    "Call",
    "Client",
    "CustomParser",
    "DuplicateRouteError",
    "Err",
    "FailureKind",
    "HttpTransportConfig",
    "NoValidation",
    "Ok",
    "Result",
    "RouteGroup",
    "Router",
    "RpcError",
    "SimplycallError",
]
