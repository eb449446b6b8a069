"""Dispatcher: route a Call to its handler and fold every outcome into a Result."""
from __future__ import annotations

import logging

from simplycall.core.registry import RouteRegistry
from simplycall.core.result import Call, Err, FailureKind, Ok, Result

logger = logging.getLogger("simplycall.router")


class Dispatcher:
    """
    Looks up the route, parses arguments, runs the handler.
    dispatch() never raises: missing route, parser failure and handler failure
    each come back as Err carrying the original message or exception.
    """

    def __init__(self, registry: RouteRegistry) -> None:
        self._registry = registry

    async def dispatch(self, call: Call) -> Result:
        route = self._registry.lookup(call.route_id)
        if route is None:
            logger.debug("no route [%s]", call.route_id)
            return Err(FailureKind.NON_EXISTENT_ROUTE, f"Route [{call.route_id}] does not exist!")

        try:
            args = tuple(route.parser(call.ctx, *call.args))
        except Exception as e:
            logger.debug("route [%s] rejected arguments: %r", call.route_id, e)
            return Err(FailureKind.ARGUMENT_PARSING_FAILED, e)

        try:
            result = route.handler(call.ctx, *args)
            if hasattr(result, "__await__"):
                result = await result
        except Exception as e:
            logger.error("route [%s] handler errored", call.route_id, exc_info=e)
            return Err(FailureKind.HANDLER_ERRORED, e)

        logger.debug("route [%s] ok", call.route_id)
        return Ok(result)
