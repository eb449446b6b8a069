"""Sending side of the HTTP transport: Call -> multipart POST -> decoded value."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from simplycall.core.config import HttpTransportConfig
from simplycall.core.result import Call
from simplycall.errors import (
    ArgumentEncodeError,
    NoResponseError,
    ResponseDecodeError,
    TransportError,
)
from simplycall.rpc.codec import (
    ARGTYPE_HEADER,
    ID_HEADER,
    TAGS,
    FilePart,
    decode_form,
    decode_value,
    encode_arguments,
)

logger = logging.getLogger("simplycall.http")


class HttpSendTransport:
    """
    Posts each call to one URL. Raises RpcError subclasses on any failure;
    the server's failure kind is only visible in the error payload.

    client: optional httpx.AsyncClient (shared pool, ASGI app in tests). Without it,
    a client is opened per call. call.ctx is never sent.
    """

    def __init__(
        self,
        url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._url = url
        self._client = client
        self._timeout = timeout
        self._headers = dict(headers or {})

    @classmethod
    def from_config(cls, config: HttpTransportConfig, **kwargs: Any) -> HttpSendTransport:
        return cls(config.url, timeout=config.timeout, **kwargs)

    @property
    def url(self) -> str:
        return self._url

    async def send(self, call: Call) -> Any:
        files, argtype = self._encode(call)
        headers = {**self._headers, ID_HEADER: call.route_id, ARGTYPE_HEADER: argtype}
        logger.debug("POST %s [%s] argtype=%r", self._url, call.route_id, argtype)
        try:
            if self._client is not None:
                response = await self._post(self._client, headers, files)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._post(client, headers, files)
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__, route_id=call.route_id, payload=e) from e
        return self._decode(call.route_id, response)

    async def _post(
        self, client: httpx.AsyncClient, headers: dict[str, str], files: dict[str, FilePart]
    ) -> httpx.Response:
        return await client.post(
            self._url,
            headers=headers,
            files=files or None,
            timeout=self._timeout if self._timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )

    @staticmethod
    def _encode(call: Call) -> tuple[dict[str, FilePart], str]:
        try:
            return encode_arguments(call.args)
        except ValueError as e:
            raise ArgumentEncodeError(f"{e} Route [{call.route_id}].", route_id=call.route_id, payload=list(call.args)) from e

    @staticmethod
    def _decode(route_id: str, response: httpx.Response) -> Any:
        argtype = response.headers.get(ARGTYPE_HEADER)
        if argtype not in TAGS:
            raise ResponseDecodeError(
                f"Unable to parse response type [{argtype}] for [{route_id}] (HTTP {response.status_code}).",
                route_id=route_id,
                payload=_error_payload(response),
            )
        try:
            parts = decode_form(response.content, response.headers.get("content-type", ""))
        except ValueError as e:
            raise ResponseDecodeError(
                f"Malformed response body for [{route_id}]: {e}", route_id=route_id, payload=response.text
            ) from e
        raw = parts.get("0")
        if raw is None:
            raise NoResponseError(f"No response received for [{route_id}].", route_id=route_id)
        try:
            return decode_value(argtype, raw)
        except ValueError as e:
            raise ResponseDecodeError(
                f"Malformed [{argtype}] response for [{route_id}]: {e}", route_id=route_id, payload=raw
            ) from e


def _error_payload(response: httpx.Response) -> Any:
    """Body of an untagged response: JSON if it parses, else text."""
    try:
        return json.loads(response.content)
    except ValueError:
        return response.text
