"""
Receiving side of the HTTP transport: starlette Request -> Call -> Result.
Turning an Err into an HTTP status is left to the endpoint that calls on_request().
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from starlette.datastructures import UploadFile
from starlette.requests import Request

from simplycall.core.result import Call, Err, FailureKind, Ok, Result
from simplycall.rpc.codec import (
    ARGTYPE_HEADER,
    ID_HEADER,
    TAGS,
    decode_value,
    encode_form,
    encode_value,
)
from simplycall.rpc.protocol import CallRouter

logger = logging.getLogger("simplycall.http")

# starlette defaults to 1 MiB per plain field; structured arguments are plain fields.
DEFAULT_MAX_PART_SIZE = 64 * 1024 * 1024
DEFAULT_MAX_FIELDS = 1000


@dataclass(frozen=True, slots=True)
class WireResponse:
    """Ready-to-send success response: multipart body and its headers."""

    body: bytes
    headers: dict[str, str]


class HttpReceiveTransport:
    """
    Decodes tagged multipart arguments, dispatches, encodes the result.
    on_request() never raises: transport failures use the same Err shape as router failures.
    """

    def __init__(
        self,
        router: CallRouter,
        *,
        max_part_size: int = DEFAULT_MAX_PART_SIZE,
        max_fields: int = DEFAULT_MAX_FIELDS,
    ) -> None:
        """
        max_part_size bounds each structured (JSON) argument; binary arguments are
        file parts and spool to disk without that limit. max_fields bounds the
        number of structured arguments per call.
        """
        self._router = router
        self._max_part_size = max_part_size
        self._max_fields = max_fields

    async def on_request(self, request: Request, ctx: Any = None) -> Result:
        """ctx comes from the server's own request handling (session, auth); it is not read from the wire."""
        route_id = request.headers.get(ID_HEADER)
        argtype = request.headers.get(ARGTYPE_HEADER)
        if route_id is None:
            return Err(FailureKind.ID_NOT_PROVIDED, "")
        if argtype is None:
            return Err(FailureKind.ARGUMENTS_UNTYPED, "")

        try:
            async with request.form(max_fields=self._max_fields, max_part_size=self._max_part_size) as form:
                decoded = await self._decode_arguments(route_id, argtype, form)
        except Exception as e:
            logger.debug("route [%s] sent an unreadable body: %r", route_id, e)
            return Err(FailureKind.MALFORMED_BODY, e)
        if isinstance(decoded, Err):
            logger.debug("route [%s] rejected at transport: %s", route_id, decoded.kind)
            return decoded

        result = await self._router.dispatch(Call(ctx=ctx, route_id=route_id, args=decoded))
        if isinstance(result, Err):
            return result
        return self._encode_result(route_id, result.value)

    @staticmethod
    async def _decode_arguments(route_id: str, argtype: str, form: Any) -> list[Any] | Err:
        args: list[Any] = []
        for i, tag in enumerate(argtype):
            if tag not in TAGS:
                return Err(
                    FailureKind.UNKNOWN_ARGUMENT_TYPE,
                    f"Route [{route_id}] called with unknown argument type of [{argtype}].",
                )
            part = form.get(str(i))
            if part is None:
                return Err(
                    FailureKind.MISSING_ARGUMENT,
                    f"Route [{route_id}] is missing [{tag}] type argument at position [{i}].",
                )
            raw = await part.read() if isinstance(part, UploadFile) else part
            try:
                args.append(decode_value(tag, raw))
            except ValueError as e:
                return Err(
                    FailureKind.MALFORMED_ARGUMENT,
                    f"Route [{route_id}] has a malformed [{tag}] argument at position [{i}]: {e}",
                )

        extra = sorted(key for key in form.keys() if key not in {str(i) for i in range(len(argtype))})
        if extra:
            return Err(
                FailureKind.UNEXPECTED_ARGUMENT,
                f"Route [{route_id}] declared [{len(argtype)}] arguments but received extra parts {extra}.",
            )
        return args

    @staticmethod
    def _encode_result(route_id: str, value: Any) -> Result:
        try:
            tag, part = encode_value(value)
        except (TypeError, ValueError) as e:
            logger.error("route [%s] returned an unserializable value: %r", route_id, e)
            return Err(FailureKind.UNSERIALIZABLE_RESULT, f"Route [{route_id}] returned a value that cannot be sent: {e}")
        body, content_type = encode_form({"0": part})
        return Ok(WireResponse(body=body, headers={ARGTYPE_HEADER: tag, "Content-Type": content_type}))


def error_body(result: Err) -> bytes:
    """JSON rendering of a failure for endpoints that answer with an error status."""
    kind, payload = str(result.kind), result.payload
    if isinstance(payload, BaseException):
        payload = f"{type(payload).__name__}: {payload}"
    return json.dumps({"err": {kind: payload}}, default=str).encode()
