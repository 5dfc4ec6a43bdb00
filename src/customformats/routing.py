"""FastAPI integration for custom formats.

Wrap a group of routes in a custom formats scope and the registered
selectors run before each of those routes is dispatched. Routes outside
the scope are left alone.

Usage:
    Build the registry at startup and hand it to the scoped routers::

        formats = CustomFormats()
        formats.add("iphone", mime_types="application/xhtml+xml", selector=is_iphone)

        app = FastAPI()
        install(app, formats)

        mobile = custom_formats(formats)

        @mobile.get("/foo")
        @mobile.get("/foo.{format}")
        async def foo(fmt: str = Depends(get_format)) -> PlainTextResponse:
            return PlainTextResponse(f":{fmt}")

        app.include_router(mobile)

    A scope may be restricted to some formats and may force the
    selectors to run even when the path already names a format::

        iphone_only = custom_formats(formats, "iphone", force=True)
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, ClassVar

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.routing import APIRoute

from customformats.formats import CustomFormats
from customformats.selection import FORMAT_PARAM, select_format

DEFAULT_FORMAT = "html"
"""Format used when neither the path nor a selector names one."""

_STATE_KEY = "custom_formats"


def apply_custom_formats(
    request: Request,
    registry: CustomFormats,
    only: tuple[str, ...] = (),
    force: bool = False,
) -> str | None:
    """Run format selection for a request and record the result.

    The path parameters of the request are replaced by the updated
    parameters and the selected format is stored on ``request.state``.

    Args:
        request: The incoming request.
        registry: Registry holding the selectors.
        only: Formats this scope may select. Empty means all.
        force: Run the selectors even if the path names a format.

    Returns:
        The format after selection, or None if none was set.
    """
    params = dict(request.path_params)
    select_format(request, params, registry.selectors_snapshot(), only, force)
    request.scope["path_params"] = params
    request.state.format = params.get(FORMAT_PARAM)
    return request.state.format


class CustomFormatRoute(APIRoute):
    """API route that runs the custom format selectors before dispatch.

    Use :func:`custom_formats` to get a router whose routes are bound to
    a registry; this class has no registry of its own.
    """

    registry: ClassVar[CustomFormats | None] = None
    formats: ClassVar[tuple[str, ...]] = ()
    force: ClassVar[bool] = False

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_route_handler = super().get_route_handler()
        registry, only, force = self.registry, self.formats, self.force

        async def custom_route_handler(request: Request) -> Response:
            if registry is not None:
                apply_custom_formats(request, registry, only, force)
            return await original_route_handler(request)

        return custom_route_handler


def custom_formats(
    registry: CustomFormats,
    *formats: str,
    force: bool = False,
    **router_kwargs: Any,
) -> APIRouter:
    """Create a router whose routes run custom format selection.

    Args:
        registry: Registry holding the selectors.
        *formats: Formats the routes may select. None means every
            format with a selector.
        force: Run the selectors even when the path names a format.
        **router_kwargs: Passed through to :class:`fastapi.APIRouter`.

    Returns:
        A router to declare the scoped routes on.
    """
    route_class = type(
        "CustomFormatRoute",
        (CustomFormatRoute,),
        {"registry": registry, "formats": tuple(formats), "force": force},
    )
    return APIRouter(route_class=route_class, **router_kwargs)


def install(app: FastAPI, registry: CustomFormats) -> CustomFormats:
    """Attach a registry to an application.

    Args:
        app: FastAPI application.
        registry: Registry to attach.

    Returns:
        The registry, for chaining.
    """
    setattr(app.state, _STATE_KEY, registry)
    return registry


def get_registry(request: Request) -> CustomFormats:
    """Return the registry attached with :func:`install`.

    Raises:
        RuntimeError: If no registry was installed on the application.
    """
    registry = getattr(request.app.state, _STATE_KEY, None)
    if registry is None:
        raise RuntimeError("No custom formats registry installed on this application")
    return registry


def get_format(request: Request) -> str:
    """Return the format of a request.

    Usable as a FastAPI dependency. Falls back to the ``format`` path
    parameter and then to :data:`DEFAULT_FORMAT`.

    Args:
        request: The incoming request.

    Returns:
        Format name.
    """
    return (
        getattr(request.state, "format", None)
        or request.path_params.get(FORMAT_PARAM)
        or DEFAULT_FORMAT
    )
