"""Error types: declaration-time errors and client-side call failures."""
from __future__ import annotations

from typing import Any


class SimplycallError(Exception):
    """Base for all simplycall errors."""


class ConfigurationError(SimplycallError):
    """Invalid declaration or configuration. Raised at startup, never while serving."""


class DuplicateRouteError(SimplycallError):
    """Route identifier registered twice. Fatal: fix the declaration, do not retry."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Route [{identifier}] was declared twice and is not unique.")


class RpcError(SimplycallError):
    """Remote call failed. Raised by transports on the calling side."""

    code = "RPC_ERROR"

    def __init__(
        self,
        message: str,
        *,
        route_id: str | None = None,
        payload: Any = None,
        code: str | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message
        self.route_id = route_id
        self.payload = payload
        super().__init__(f"[{self.code}] {message}")


class ArgumentEncodeError(RpcError):
    """An argument could not be serialized for the wire."""

    code = "ENCODE_ERROR"


class TransportError(RpcError):
    """The HTTP round trip itself failed (connection, timeout, protocol)."""

    code = "TRANSPORT_ERROR"


class ResponseDecodeError(RpcError):
    """Response is untagged or its body does not decode."""

    code = "DECODE_ERROR"


class NoResponseError(RpcError):
    """Response carried no result part."""

    code = "NO_RESPONSE"
