"""
Route registry: identifier -> (parser, handler).
Identifiers are "<scope> <name>" and are write-once; there is no unregister.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from simplycall.errors import ConfigurationError, DuplicateRouteError

logger = logging.getLogger("simplycall.router")

Handler = Callable[..., Any]


def identifier(scope: str, name: str) -> str:
    """Route identifier: scope and name joined by a single space."""
    return f"{scope} {name}"


@dataclass(frozen=True, slots=True)
class NoValidation:
    """Accept arguments unchanged. For callers whose argument shapes are already type-checked."""

    def __call__(self, ctx: Any, *args: Any) -> Sequence[Any]:
        return args


@dataclass(frozen=True, slots=True)
class CustomParser:
    """Validate raw arguments with ``fn(ctx, *args)``; it returns the arguments to call the handler with."""

    fn: Callable[..., Sequence[Any]]

    def __call__(self, ctx: Any, *args: Any) -> Sequence[Any]:
        return self.fn(ctx, *args)


Parser = NoValidation | CustomParser

ASSUME_TYPESAFE = NoValidation()


def as_parser(value: Parser | Callable[..., Sequence[Any]]) -> Parser:
    """Normalize a declared parser: plain callables become CustomParser."""
    if isinstance(value, (NoValidation, CustomParser)):
        return value
    if callable(value):
        return CustomParser(value)
    raise ConfigurationError(f"Parser must be ASSUME_TYPESAFE or a callable, got {value!r}")


@dataclass(frozen=True, slots=True)
class RouteEntry:
    parser: Parser
    handler: Handler


class RouteRegistry:
    """
    Routes by identifier. Register everything at startup, then serve.
    Not locked: registering while calls are being dispatched is the caller's problem.
    """

    def __init__(self) -> None:
        self._routes: dict[str, RouteEntry] = {}

    def register(self, scope: str, name: str, parser: Parser | Callable[..., Any], handler: Handler) -> RouteEntry:
        """Add one route. Raises DuplicateRouteError if the identifier is taken."""
        route_id = identifier(scope, name)
        if route_id in self._routes:
            raise DuplicateRouteError(route_id)
        if not callable(handler):
            raise ConfigurationError(f"Route [{route_id}] handler is not callable: {handler!r}")
        entry = RouteEntry(parser=as_parser(parser), handler=handler)
        self._routes[route_id] = entry
        logger.debug("registered route [%s]", route_id)
        return entry

    def register_many(
        self,
        scope: str,
        handlers: Mapping[str, Handler],
        parsers: Mapping[str, Parser | Callable[..., Any]],
    ) -> None:
        """
        Register a batch under one scope, in parser order.
        Stops at the first duplicate; routes registered before it are kept.
        """
        unparsed = [name for name in handlers if name not in parsers]
        if unparsed:
            raise ConfigurationError(
                f"Scope [{scope}] declares handlers without parsers: {', '.join(unparsed)}"
            )
        unhandled = [name for name in parsers if name not in handlers]
        if unhandled:
            raise ConfigurationError(
                f"Scope [{scope}] declares parsers without handlers: {', '.join(unhandled)}"
            )
        for name, parser in parsers.items():
            self.register(scope, name, parser, handlers[name])

    def lookup(self, route_id: str) -> RouteEntry | None:
        return self._routes.get(route_id)

    def identifiers(self) -> list[str]:
        return sorted(self._routes)

    def __contains__(self, route_id: object) -> bool:
        return route_id in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)
