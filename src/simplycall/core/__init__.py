from simplycall.core.result import Call, Err, FailureKind, Ok, Result
from simplycall.core.registry import (
    ASSUME_TYPESAFE,
    CustomParser,
    NoValidation,
    RouteEntry,
    RouteRegistry,
    identifier,
)
from simplycall.core.dispatch import Dispatcher
from simplycall.core.router import RouteGroup, Router
from simplycall.core.client import Client, RemoteScope
from simplycall.core.config import HttpTransportConfig

__all__ = [
    "ASSUME_TYPESAFE",
    "Call",
    "Client",
    "CustomParser",
    "Dispatcher",
    "Err",
    "FailureKind",
    "HttpTransportConfig",
    "NoValidation",
    "Ok",
    "RemoteScope",
    "Result",
    "RouteEntry",
    "RouteGroup",
    "RouteRegistry",
    "Router",
    "identifier",
]
