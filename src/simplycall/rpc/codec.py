"""Argument codec for the HTTP transport.

Every argument (and the single result) travels as one ``multipart/form-data``
part keyed by its position: ``"0"``, ``"1"``, ... A tag string carries one
character per position:

- ``b``, binary: ``bytes``-like values, passed through untouched;
- ``j``, structured: anything else, as JSON text.

The tag at a position alone decides how the part at that position decodes.
Encoding uses the ``httpx`` multipart encoder; decoding responses uses
``python-multipart`` (request bodies are decoded by starlette, which uses the
same parser).
"""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from python_multipart.multipart import MultipartParser, parse_options_header

BINARY = "b"
STRUCTURED = "j"
TAGS = frozenset({BINARY, STRUCTURED})

ID_HEADER = "x-simplycall-id"
ARGTYPE_HEADER = "x-simplycall-argtype"

BINARY_TYPES = (bytes, bytearray, memoryview)

# httpx "files" entry: (filename, content, content type). No filename -> plain form field.
FilePart = tuple[str | None, bytes, str]


def is_binary(value: Any) -> bool:
    return isinstance(value, BINARY_TYPES)


def tag_of(value: Any) -> str:
    return BINARY if is_binary(value) else STRUCTURED


def encode_value(value: Any) -> tuple[str, FilePart]:
    """Tag and part for one value. Raises TypeError/ValueError if it is not JSON-serializable."""
    if is_binary(value):
        return BINARY, ("blob", bytes(value), "application/octet-stream")
    return STRUCTURED, (None, json.dumps(value).encode("utf-8"), "application/json")


def encode_arguments(args: Sequence[Any]) -> tuple[dict[str, FilePart], str]:
    """Positional parts and the tag string. Raises ValueError naming the first unserializable position."""
    files: dict[str, FilePart] = {}
    tags: list[str] = []
    for i, arg in enumerate(args):
        try:
            tag, part = encode_value(arg)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Argument at position [{i}] is not serializable: {e}.") from e
        files[str(i)] = part
        tags.append(tag)
    return files, "".join(tags)


def decode_value(tag: str, raw: bytes | str) -> Any:
    """Decode one part according to its tag. Raises ValueError on unknown tag or bad JSON."""
    if tag == BINARY:
        return raw if isinstance(raw, bytes) else raw.encode("utf-8")
    if tag == STRUCTURED:
        return json.loads(raw)
    raise ValueError(f"Unknown argument type [{tag}]")


def encode_form(files: Mapping[str, FilePart]) -> tuple[bytes, str]:
    """Materialize a multipart body. Returns (body, Content-Type with boundary)."""
    request = httpx.Request("POST", "http://simplycall.invalid/", files=dict(files))
    return request.read(), request.headers["Content-Type"]


def decode_form(body: bytes, content_type: str) -> dict[str, bytes]:
    """Parse a multipart body into field name -> raw bytes. Raises ValueError if it is not multipart."""
    mimetype, options = parse_options_header(content_type)
    if mimetype != b"multipart/form-data":
        raise ValueError(f"Expected multipart/form-data, got {content_type!r}")
    boundary = options.get(b"boundary")
    if not boundary:
        raise ValueError("Multipart body is missing its boundary parameter")

    parts: dict[str, bytes] = {}
    header_field = bytearray()
    header_value = bytearray()
    name: str | None = None
    data = bytearray()

    def on_part_begin() -> None:
        nonlocal name, data
        name = None
        data = bytearray()

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        data.extend(chunk[start:end])

    def on_part_end() -> None:
        if name is not None:
            parts[name] = bytes(data)

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        header_field.extend(chunk[start:end])

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        header_value.extend(chunk[start:end])

    def on_header_end() -> None:
        nonlocal name
        if bytes(header_field).lower() == b"content-disposition":
            _, params = parse_options_header(bytes(header_value))
            field_name = params.get(b"name")
            if field_name is not None:
                name = field_name.decode("utf-8")
        header_field.clear()
        header_value.clear()

    parser = MultipartParser(
        boundary,
        {
            "on_part_begin": on_part_begin,
            "on_part_data": on_part_data,
            "on_part_end": on_part_end,
            "on_header_field": on_header_field,
            "on_header_value": on_header_value,
            "on_header_end": on_header_end,
        },
    )
    parser.write(body)
    parser.finalize()
    return parts
