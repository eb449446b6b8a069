"""
Router: declares scoped routes and dispatches calls to them.
Declare via router.on(scope).with_handlers({...}).conform_arguments_through({...}).
"""
from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

from simplycall.core.dispatch import Dispatcher
from simplycall.core.registry import Handler, Parser, RouteEntry, RouteRegistry
from simplycall.core.result import Call, Result


@dataclass(frozen=True)
class RouteGroup:
    """
    Routes declared together under one scope. Share it with clients:
    Client.on(group) generates one method per name.
    """

    scope: str
    handlers: Mapping[str, Handler]
    parsers: Mapping[str, Parser | Callable[..., Any]] = field(default_factory=dict)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.parsers or self.handlers)

    def bind(self, ctx: Any) -> SimpleNamespace:
        """Handlers with ``ctx`` applied, for in-process calls. Skips argument parsing."""
        bound = {}
        for name in self.names:
            handler = self.handlers[name]
            bound[name] = functools.update_wrapper(functools.partial(handler, ctx), handler)
        return SimpleNamespace(**bound)


class HandlerSet:
    """Second step: handlers are known, parsers are not yet."""

    def __init__(self, router: Router, scope: str, handlers: Mapping[str, Handler]) -> None:
        self._router = router
        self._scope = scope
        self._handlers = dict(handlers)

    def conform_arguments_through(self, parsers: Mapping[str, Parser | Callable[..., Any]]) -> RouteGroup:
        """
        Give every handler a parser and register the routes.
        Use ASSUME_TYPESAFE to skip validation; a parser must raise on bad input.
        Duplicate identifiers raise immediately.
        """
        self._router.registry.register_many(self._scope, self._handlers, parsers)
        return RouteGroup(scope=self._scope, handlers=self._handlers, parsers=dict(parsers))


class ScopeBuilder:
    """First step: the scope. Scopes may be reused as long as names do not collide."""

    def __init__(self, router: Router, scope: str) -> None:
        self._router = router
        self.scope = scope

    def with_handlers(self, handlers: Mapping[str, Handler]) -> HandlerSet:
        """Handlers take the call context first: ``async def name(ctx, *args)``."""
        return HandlerSet(self._router, self.scope, handlers)


class Router:
    """
    Registry plus dispatcher. Declare routes at startup, then hand
    the router to a receiving transport.
    """

    def __init__(self) -> None:
        self._registry = RouteRegistry()
        self._dispatcher = Dispatcher(self._registry)

    @property
    def registry(self) -> RouteRegistry:
        return self._registry

    @property
    def routes(self) -> list[str]:
        """Registered identifiers, sorted."""
        return self._registry.identifiers()

    def on(self, scope: str) -> ScopeBuilder:
        """Start declaring routes under ``scope`` (e.g. "auth", "/auth/public")."""
        return ScopeBuilder(self, scope)

    def lookup(self, route_id: str) -> RouteEntry | None:
        return self._registry.lookup(route_id)

    async def dispatch(self, call: Call) -> Result:
        """Route a call. Never raises; see Dispatcher."""
        return await self._dispatcher.dispatch(call)
