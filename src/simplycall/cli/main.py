"""
CLI for poking at routes: list what a router declares, call a remote route over HTTP.
"""

import asyncio
import importlib
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import typer

from simplycall.core.config import HttpTransportConfig
from simplycall.core.result import Call
from simplycall.core.router import Router
from simplycall.errors import ConfigurationError, RpcError
from simplycall.rpc.http_client import HttpSendTransport

app = typer.Typer(help="simplycall CLI: inspect routers and call remote routes.")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _load_router(target: str) -> Router:
    """'package.module:attr' -> the Router instance at attr."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter(f"Expected MODULE:ATTR, got {target!r}")
    cwd = str(Path.cwd())
    added = cwd not in sys.path
    if added:
        sys.path.insert(0, cwd)
    try:
        module = importlib.import_module(module_name)
    finally:
        if added:
            sys.path.remove(cwd)
    router = getattr(module, attr, None)
    if not isinstance(router, Router):
        raise typer.BadParameter(f"{target} is not a simplycall Router")
    return router


def _parse_argument(text: str) -> Any:
    """'@path' -> file bytes (binary argument); anything else is JSON."""
    if text.startswith("@"):
        path = Path(text[1:])
        if not path.is_file():
            raise typer.BadParameter(f"File not found: {path}")
        return path.read_bytes()
    try:
        return json.loads(text)
    except ValueError:
        raise typer.BadParameter(f"Not valid JSON: {text!r} (quote strings, e.g. '\"text\"')") from None


@app.command()
def routes(
    target: str = typer.Argument(..., help="Router location, e.g. myapp.rpc:router"),
) -> None:
    """List route identifiers registered on a router."""
    router = _load_router(target)
    for route_id in router.routes:
        typer.echo(route_id)


@app.command()
def call(
    route_id: str = typer.Argument(..., help='Route identifier: "<scope> <name>"'),
    args: Optional[list[str]] = typer.Argument(None, help="Arguments: JSON text, or @file for binary"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Endpoint URL (default: $SIMPLYCALL_URL)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Seconds to wait for the response"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write a binary result to this file"),
) -> None:
    """Call a remote route over HTTP and print its result as JSON."""
    try:
        config = HttpTransportConfig(url=url) if url else HttpTransportConfig.from_env()
    except ConfigurationError as e:
        typer.echo(f"{e}. Pass --url.", err=True)
        raise typer.Exit(2)
    if timeout is not None:
        config = replace(config, timeout=timeout)

    values = [_parse_argument(a) for a in args or []]
    transport = HttpSendTransport.from_config(config)
    try:
        result = asyncio.run(transport.send(Call(ctx=None, route_id=route_id, args=values)))
    except RpcError as e:
        typer.echo(str(e), err=True)
        if e.payload is not None:
            typer.echo(json.dumps(e.payload, default=str), err=True)
        raise typer.Exit(1)

    if isinstance(result, bytes):
        if output is not None:
            output.write_bytes(result)
            typer.echo(f"{len(result)} bytes written to {output}")
        else:
            typer.echo(f"<{len(result)} bytes>")
        return
    typer.echo(json.dumps(result, indent=2))


def main() -> None:
    """Entry point for the simplycall console command."""
    app()


if __name__ == "__main__":
    main()
