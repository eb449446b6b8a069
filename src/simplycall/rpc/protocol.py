"""RPC protocols: a sending transport and a call router; wire format is the transport's choice."""
from typing import Any, Protocol, runtime_checkable

from simplycall.core.result import Call, Result


@runtime_checkable
class Transport(Protocol):
    """Sending side: deliver a Call, return the remote value or raise RpcError."""

    async def send(self, call: Call) -> Any:
        ...


@runtime_checkable
class CallRouter(Protocol):
    """Receiving side: route a Call; never raises (Router, Dispatcher)."""

    async def dispatch(self, call: Call) -> Result:
        ...
