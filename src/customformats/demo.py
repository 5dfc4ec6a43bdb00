"""Example application serving device-specific formats.

Registers ``iphone`` and ``android`` formats chosen from the
User-Agent header, plus a ``foo`` format that can only be requested
explicitly, and exposes routes in several custom formats scopes. Each
route answers with the resolved format, e.g. ``:iphone``.

Usage:
    From the CLI (preferred):

    >>> customformats serve --port 8080

    Programmatic:

    >>> from customformats.demo import start_server
    >>> start_server(host="127.0.0.1", port=8080)
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from rich.console import Console

from customformats.formats import CustomFormats
from customformats.routing import custom_formats, get_format, get_registry, install

console = Console()

_IPHONE_UA = re.compile(r"iPhone", re.IGNORECASE)
_ANDROID_UA = re.compile(r"Android", re.IGNORECASE)


def is_iphone(request: Request, params: Mapping[str, Any]) -> re.Match[str] | None:
    """Match requests from an iPhone browser."""
    return _IPHONE_UA.search(request.headers.get("user-agent", ""))


def is_android(request: Request, params: Mapping[str, Any]) -> re.Match[str] | None:
    """Match requests from an Android browser."""
    return _ANDROID_UA.search(request.headers.get("user-agent", ""))


def build_registry() -> CustomFormats:
    """Create a registry with the demo formats.

    Returns:
        Registry holding ``iphone``, ``android`` and ``foo``.
    """
    formats = CustomFormats()
    formats.add(
        "iphone",
        lambda f: f.mime_types("application/x-iphone")
        .headers({"Vary": "User-Agent"})
        .selector(is_iphone),
    )
    formats.add(
        "android",
        lambda f: f.mime_types("application/x-android")
        .headers({"Vary": "User-Agent"})
        .selector(is_android),
    )
    formats.add("foo", mime_types="application/x-foo")
    return formats


def _format_response(request: Request) -> PlainTextResponse:
    fmt = get_format(request)
    headers = get_registry(request).mime_registry.response_headers_for(fmt)
    return PlainTextResponse(f":{fmt}", headers=headers)


def create_app(registry: CustomFormats | None = None) -> FastAPI:
    """Create the demo application.

    Routes:
        ``/foo`` and ``/foo.{format}``: all formats with a selector.
        ``/foo_for_iphone``: ``iphone`` only.
        ``/force_all`` and ``/force_all.{format}``: all formats, forced.
        ``/force_iphone`` and ``/force_iphone.{format}``: ``iphone`` only, forced.
        ``/foo_with_no_custom_formats``: no selection.

    Args:
        registry: Registry to use. Defaults to :func:`build_registry`.

    Returns:
        Configured FastAPI application.
    """
    registry = registry if registry is not None else build_registry()
    app = FastAPI(
        title="customformats demo",
        description="Device-specific formats chosen by custom selectors",
    )
    install(app, registry)

    all_formats = custom_formats(registry)
    iphone_only = custom_formats(registry, "iphone")
    force_all = custom_formats(registry, force=True)
    force_iphone = custom_formats(registry, "iphone", force=True)

    @all_formats.get("/foo")
    @all_formats.get("/foo.{format}")
    async def foo(request: Request) -> PlainTextResponse:
        return _format_response(request)

    @iphone_only.get("/foo_for_iphone")
    async def foo_for_iphone(request: Request) -> PlainTextResponse:
        return _format_response(request)

    @force_all.get("/force_all")
    @force_all.get("/force_all.{format}")
    async def force_all_formats(request: Request) -> PlainTextResponse:
        return _format_response(request)

    @force_iphone.get("/force_iphone")
    @force_iphone.get("/force_iphone.{format}")
    async def force_iphone_format(request: Request) -> PlainTextResponse:
        return _format_response(request)

    for router in (all_formats, iphone_only, force_all, force_iphone):
        app.include_router(router)

    @app.get("/foo_with_no_custom_formats")
    async def foo_with_no_custom_formats(request: Request) -> PlainTextResponse:
        return _format_response(request)

    @app.get("/health")
    async def health() -> dict:
        """Return server health status."""
        return {"status": "ok"}

    return app


def start_server(host: str = "127.0.0.1", port: int = 8080) -> None:
    """Start the demo server.

    Runs uvicorn in the foreground until interrupted with Ctrl+C.

    Args:
        host: Network interface to bind (default ``"127.0.0.1"``).
        port: TCP port to listen on (default ``8080``).
    """
    console.print(f"[bold green]Starting customformats demo on {host}:{port}[/bold green]")
    console.print(f"   Try: [blue]curl -A iPhone http://localhost:{port}/foo[/blue]")
    console.print("   Press [bold]Ctrl+C[/bold] to stop\n")

    uvicorn.run(
        create_app(),
        host=host,
        port=port,
        log_level="warning",
    )
