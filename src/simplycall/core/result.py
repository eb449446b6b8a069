"""Call envelope and result values passed between transports and the router."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class FailureKind(StrEnum):
    """Why a call did not produce a value. Values are the wire-facing names."""

    # Router
    NON_EXISTENT_ROUTE = "non existent route"
    ARGUMENT_PARSING_FAILED = "argument parsing failed"
    HANDLER_ERRORED = "handler errored"

    # Receiving transport
    ID_NOT_PROVIDED = "id not provided"
    ARGUMENTS_UNTYPED = "function arguments are untyped"
    MALFORMED_BODY = "malformed body"
    UNKNOWN_ARGUMENT_TYPE = "unknown argument type"
    MISSING_ARGUMENT = "missing argument"
    UNEXPECTED_ARGUMENT = "unexpected argument"
    MALFORMED_ARGUMENT = "malformed argument"
    UNSERIALIZABLE_RESULT = "unserializable result"


@dataclass(frozen=True, slots=True)
class Call:
    """One invocation attempt: context, route identifier, positional arguments.

    ``ctx`` belongs to this call only; nothing in simplycall stores or shares it.
    """

    ctx: Any
    route_id: str
    args: Sequence[Any] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful call."""

    value: T

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.value}


@dataclass(frozen=True, slots=True)
class Err:
    """Failed call. ``payload`` is the offending value or exception, unmodified."""

    kind: FailureKind
    payload: Any = ""

    def to_dict(self) -> dict[str, Any]:
        return {"err": {str(self.kind): self.payload}}


Result = Ok[Any] | Err
