"""End-to-end tests for the HTTP transport: client -> starlette app -> router and back."""

from typing import Any

import httpx
import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from simplycall import ASSUME_TYPESAFE, Client, Err, HttpTransportConfig, Router
from simplycall.errors import (
    ArgumentEncodeError,
    NoResponseError,
    ResponseDecodeError,
    TransportError,
)
from simplycall.rpc import HttpReceiveTransport, HttpSendTransport, error_body
from simplycall.rpc.codec import encode_form

BASE_URL = "http://testserver"


async def _echo(ctx, *args: Any) -> list[Any]:
    return list(args)


async def _blob(ctx, data: bytes) -> bytes:
    return data


async def _size(ctx, data: bytes, label: str) -> dict:
    return {"label": label, "size": len(data)}


async def _whoami(ctx) -> Any:
    return ctx


async def _broken(ctx) -> None:
    raise ValueError("boom")


async def _opaque(ctx) -> object:
    return object()


def _router() -> tuple[Router, Any]:
    router = Router()
    handlers = {
        "echo": _echo,
        "blob": _blob,
        "size": _size,
        "whoami": _whoami,
        "broken": _broken,
        "opaque": _opaque,
    }
    group = router.on("test").with_handlers(handlers).conform_arguments_through(
        {name: ASSUME_TYPESAFE for name in handlers}
    )
    return router, group


def _app(router: Router, **receiver_options: Any) -> Starlette:
    receiver = HttpReceiveTransport(router, **receiver_options)

    async def rpc(request: Request) -> Response:
        result = await receiver.on_request(request, {"user": request.headers.get("x-user")})
        if isinstance(result, Err):
            return Response(error_body(result), status_code=500, media_type="application/json")
        return Response(result.value.body, headers=result.value.headers)

    return Starlette(routes=[Route("/rpc", rpc, methods=["POST"])])


def _http_client(router: Router, receiver_options: dict | None = None, **kwargs: Any) -> httpx.AsyncClient:
    app = _app(router, **(receiver_options or {}))
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL, **kwargs)


class TestRoundTrip:
    async def test_structured_arguments(self) -> None:
        router, group = _router()
        values = ["text", 7, 2.5, True, None, [1, [2, 3]], {"k": {"n": [None, False]}}]
        async with _http_client(router) as http:
            remote = Client(HttpSendTransport(f"{BASE_URL}/rpc", client=http)).on(group)
            assert await remote.echo(*values) == values

    async def test_no_arguments(self) -> None:
        router, group = _router()
        async with _http_client(router) as http:
            remote = Client(HttpSendTransport(f"{BASE_URL}/rpc", client=http)).on(group)
            assert await remote.echo() == []

    async def test_binary_argument_and_result(self) -> None:
        router, group = _router()
        blob = bytes(range(256)) * 16
        async with _http_client(router) as http:
            remote = Client(HttpSendTransport(f"{BASE_URL}/rpc", client=http)).on(group)
            assert await remote.blob(blob) == blob

    async def test_mixed_arguments(self) -> None:
        router, group = _router()
        async with _http_client(router) as http:
            remote = Client(HttpSendTransport(f"{BASE_URL}/rpc", client=http)).on(group)
            assert await remote.size(b"\x00" * 10, "zeros") == {"label": "zeros", "size": 10}

    async def test_structured_argument_over_one_megabyte(self) -> None:
        router, group = _router()
        text = "x" * (1024 * 1024 + 10)
        async with _http_client(router) as http:
            remote = Client(HttpSendTransport(f"{BASE_URL}/rpc", client=http)).on(group)
            assert await remote.echo(text) == [text]

    async def test_result_tag_header(self) -> None:
        router, _ = _router()
        async with _http_client(router) as http:
            response = await http.post(
                "/rpc",
                headers={"x-simplycall-id": "test blob", "x-simplycall-argtype": "b"},
                files={"0": ("blob", b"abc", "application/octet-stream")},
            )
        assert response.status_code == 200
        assert response.headers["x-simplycall-argtype"] == "b"
        assert response.headers["content-type"].startswith("multipart/form-data; boundary=")


class TestContext:
    async def test_server_context_comes_from_server_request(self) -> None:
        router, group = _router()
        sent_headers: list[httpx.Headers] = []

        async def record(request: httpx.Request) -> None:
            sent_headers.append(request.headers)

        async with _http_client(router, event_hooks={"request": [record]}) as http:
            transport = HttpSendTransport(f"{BASE_URL}/rpc", client=http, headers={"x-user": "alice"})
            remote = Client(transport).on(group, "client-secret")
            assert await remote.whoami() == {"user": "alice"}

        assert all("client-secret" not in value for value in sent_headers[0].values())


class TestServerFailures:
    async def _post(self, headers: dict[str, str], files: dict | None = None) -> httpx.Response:
        router, _ = _router()
        async with _http_client(router) as http:
            return await http.post("/rpc", headers=headers, files=files)

    async def test_missing_id(self) -> None:
        response = await self._post({"x-simplycall-argtype": ""})
        assert response.status_code == 500
        assert response.json() == {"err": {"id not provided": ""}}

    async def test_missing_argtype(self) -> None:
        response = await self._post({"x-simplycall-id": "test echo"})
        assert response.json() == {"err": {"function arguments are untyped": ""}}

    async def test_unknown_argument_type(self) -> None:
        response = await self._post(
            {"x-simplycall-id": "test echo", "x-simplycall-argtype": "jx"},
            {"0": (None, b"1", "application/json"), "1": (None, b"2", "application/json")},
        )
        assert response.json() == {
            "err": {"unknown argument type": "Route [test echo] called with unknown argument type of [jx]."}
        }

    async def test_missing_argument(self) -> None:
        response = await self._post(
            {"x-simplycall-id": "test echo", "x-simplycall-argtype": "jb"},
            {"0": (None, b"1", "application/json")},
        )
        assert response.json() == {
            "err": {"missing argument": "Route [test echo] is missing [b] type argument at position [1]."}
        }

    async def test_extra_parts_rejected(self) -> None:
        response = await self._post(
            {"x-simplycall-id": "test echo", "x-simplycall-argtype": "j"},
            {"0": (None, b"1", "application/json"), "1": (None, b"2", "application/json")},
        )
        assert "unexpected argument" in response.json()["err"]

    async def test_multipart_without_boundary(self) -> None:
        router, _ = _router()
        async with _http_client(router) as http:
            response = await http.post(
                "/rpc",
                headers={
                    "x-simplycall-id": "test echo",
                    "x-simplycall-argtype": "j",
                    "content-type": "multipart/form-data",
                },
                content=b"--x\r\nContent-Disposition: form-data; name=\"0\"\r\n\r\n1\r\n--x--\r\n",
            )
        assert response.status_code == 500
        assert list(response.json()["err"]) == ["malformed body"]

    async def test_structured_argument_over_part_limit(self) -> None:
        router, _ = _router()
        async with _http_client(router, receiver_options={"max_part_size": 16}) as http:
            response = await http.post(
                "/rpc",
                headers={"x-simplycall-id": "test echo", "x-simplycall-argtype": "j"},
                files={"0": (None, b'"' + b"y" * 64 + b'"', "application/json")},
            )
        assert list(response.json()["err"]) == ["malformed body"]

    async def test_malformed_json_argument(self) -> None:
        response = await self._post(
            {"x-simplycall-id": "test echo", "x-simplycall-argtype": "j"},
            {"0": (None, b"{oops", "application/json")},
        )
        assert "malformed argument" in response.json()["err"]

    async def test_non_existent_route(self) -> None:
        response = await self._post({"x-simplycall-id": "test nope", "x-simplycall-argtype": ""})
        assert response.json() == {"err": {"non existent route": "Route [test nope] does not exist!"}}

    async def test_handler_error(self) -> None:
        response = await self._post({"x-simplycall-id": "test broken", "x-simplycall-argtype": ""})
        assert response.json() == {"err": {"handler errored": "ValueError: boom"}}

    async def test_unserializable_result(self) -> None:
        response = await self._post({"x-simplycall-id": "test opaque", "x-simplycall-argtype": ""})
        assert "unserializable result" in response.json()["err"]


class TestClientFailures:
    async def test_server_failure_raises_with_payload(self) -> None:
        router, group = _router()
        async with _http_client(router) as http:
            remote = Client(HttpSendTransport(f"{BASE_URL}/rpc", client=http)).on(group)
            with pytest.raises(ResponseDecodeError) as exc_info:
                await remote.broken()
        assert exc_info.value.route_id == "test broken"
        assert exc_info.value.payload == {"err": {"handler errored": "ValueError: boom"}}
        assert "HTTP 500" in exc_info.value.message

    async def test_missing_result_part(self) -> None:
        body, content_type = encode_form({"1": (None, b"1", "application/json")})

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, content=body, headers={"x-simplycall-argtype": "j", "content-type": content_type}
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            transport = HttpSendTransport(f"{BASE_URL}/rpc", client=http)
            with pytest.raises(NoResponseError, match=r"No response received for \[test echo\]"):
                await Client(transport).on(_router()[1]).echo()

    async def test_unknown_response_tag(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"", headers={"x-simplycall-argtype": "z"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            transport = HttpSendTransport(f"{BASE_URL}/rpc", client=http)
            with pytest.raises(ResponseDecodeError, match=r"response type \[z\] for \[test echo\]"):
                await Client(transport).on(_router()[1]).echo()

    async def test_connection_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            transport = HttpSendTransport(f"{BASE_URL}/rpc", client=http)
            with pytest.raises(TransportError) as exc_info:
                await Client(transport).on(_router()[1]).echo()
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_unserializable_argument(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(500)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            transport = HttpSendTransport(f"{BASE_URL}/rpc", client=http)
            with pytest.raises(ArgumentEncodeError, match=r"position \[0\]"):
                await Client(transport).on(_router()[1]).echo({1, 2})
        assert requests == []

    async def test_request_headers(self) -> None:
        seen: list[httpx.Request] = []
        body, content_type = encode_form({"0": (None, b"null", "application/json")})

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=body, headers={"x-simplycall-argtype": "j", "content-type": content_type})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            transport = HttpSendTransport(f"{BASE_URL}/rpc", client=http)
            assert await Client(transport).on(_router()[1]).size(b"xx", "label") is None

        request = seen[0]
        assert request.method == "POST"
        assert request.headers["x-simplycall-id"] == "test size"
        assert request.headers["x-simplycall-argtype"] == "bj"
        assert request.headers["content-type"].startswith("multipart/form-data")


class TestFromConfig:
    def test_url_and_timeout(self) -> None:
        transport = HttpSendTransport.from_config(HttpTransportConfig(url="http://rpc.local/rpc", timeout=3.0))
        assert transport.url == "http://rpc.local/rpc"
