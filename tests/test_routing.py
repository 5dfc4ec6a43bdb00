"""Tests for the FastAPI custom formats scope."""

from __future__ import annotations

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from customformats.demo import create_app
from customformats.formats import CustomFormats
from customformats.routing import (
    CustomFormatRoute,
    custom_formats,
    get_format,
    get_registry,
    install,
)


@pytest.fixture
def client(device_registry: CustomFormats) -> TestClient:
    return TestClient(create_app(device_registry))


class TestAllFormatsScope:
    def test_checks_all_formats_with_selectors(
        self, client: TestClient, captures: list[str]
    ) -> None:
        response = client.get("/foo")
        assert response.status_code == 200
        assert "iphone" in captures
        assert "android" in captures
        assert "foo" not in captures

    def test_defaults_to_html_without_match(self, client: TestClient) -> None:
        response = client.get("/foo")
        assert response.text == ":html"
        assert response.headers["content-type"].startswith("text/html")

    def test_sets_iphone_format(self, client: TestClient, iphone_ua: str) -> None:
        response = client.get("/foo", headers={"User-Agent": iphone_ua})
        assert response.text == ":iphone"

    def test_sets_android_format(self, client: TestClient, android_ua: str) -> None:
        response = client.get("/foo", headers={"User-Agent": android_ua})
        assert response.text == ":android"

    def test_iphone_match_skips_android(
        self, client: TestClient, captures: list[str], iphone_ua: str
    ) -> None:
        client.get("/foo", headers={"User-Agent": iphone_ua})
        assert captures == ["iphone"]

    def test_explicit_extension_skips_selectors(
        self, client: TestClient, captures: list[str], iphone_ua: str
    ) -> None:
        response = client.get("/foo.yaml", headers={"User-Agent": iphone_ua})
        assert response.text == ":yaml"
        assert response.headers["content-type"].startswith("application/x-yaml")
        assert captures == []


class TestRestrictedScope:
    def test_does_not_run_android_selector(self, client: TestClient, captures: list[str]) -> None:
        client.get("/foo_for_iphone")
        assert "iphone" in captures
        assert "android" not in captures

    def test_sets_iphone_format(self, client: TestClient, iphone_ua: str) -> None:
        response = client.get("/foo_for_iphone", headers={"User-Agent": iphone_ua})
        assert response.text == ":iphone"

    def test_android_ua_falls_back_to_html(self, client: TestClient, android_ua: str) -> None:
        response = client.get("/foo_for_iphone", headers={"User-Agent": android_ua})
        assert response.text == ":html"


class TestUnscopedRoute:
    def test_no_selectors_run(
        self, client: TestClient, captures: list[str], iphone_ua: str
    ) -> None:
        response = client.get("/foo_with_no_custom_formats", headers={"User-Agent": iphone_ua})
        assert response.text == ":html"
        assert captures == []


class TestForcedScope:
    def test_force_all_runs_selectors_with_extension(
        self, client: TestClient, captures: list[str]
    ) -> None:
        response = client.get("/force_all.xml")
        assert response.text == ":xml"
        assert "iphone" in captures
        assert "android" in captures

    def test_force_all_overrides_extension_on_match(
        self, client: TestClient, android_ua: str
    ) -> None:
        response = client.get("/force_all.xml", headers={"User-Agent": android_ua})
        assert response.text == ":android"

    def test_force_iphone_only_runs_iphone(
        self, client: TestClient, captures: list[str]
    ) -> None:
        response = client.get("/force_iphone.xml")
        assert response.text == ":xml"
        assert "iphone" in captures
        assert "android" not in captures

    def test_force_iphone_without_extension(self, client: TestClient, iphone_ua: str) -> None:
        response = client.get("/force_iphone", headers={"User-Agent": iphone_ua})
        assert response.text == ":iphone"


class TestRouterFactory:
    def test_route_class_is_bound(self, registry: CustomFormats) -> None:
        router = custom_formats(registry, "iphone", force=True, prefix="/m")
        assert issubclass(router.route_class, CustomFormatRoute)
        assert router.route_class.registry is registry
        assert router.route_class.formats == ("iphone",)
        assert router.route_class.force is True
        assert router.prefix == "/m"

    def test_scopes_do_not_share_options(self, registry: CustomFormats) -> None:
        first = custom_formats(registry, "iphone")
        second = custom_formats(registry)
        assert first.route_class.formats == ("iphone",)
        assert second.route_class.formats == ()

    def test_dependency_and_path_param(
        self, device_registry: CustomFormats, android_ua: str
    ) -> None:
        app = FastAPI()
        install(app, device_registry)
        router = custom_formats(device_registry, prefix="/items")

        @router.get("/{item_id}")
        @router.get("/{item_id}.{format}")
        async def item(item_id: int, fmt: str = Depends(get_format)) -> dict:
            return {"id": item_id, "format": fmt}

        app.include_router(router)
        client = TestClient(app)

        assert client.get("/items/3", headers={"User-Agent": android_ua}).json() == {
            "id": 3,
            "format": "android",
        }
        assert client.get("/items/3.json").json() == {"id": 3, "format": "json"}
        assert client.get("/items/3").json() == {"id": 3, "format": "html"}

    def test_selected_format_visible_as_path_param(
        self, device_registry: CustomFormats, iphone_ua: str
    ) -> None:
        app = FastAPI()
        router = custom_formats(device_registry)

        @router.get("/raw")
        async def raw(request: Request) -> dict:
            return dict(request.path_params)

        app.include_router(router)
        response = TestClient(app).get("/raw", headers={"User-Agent": iphone_ua})
        assert response.json() == {"format": "iphone"}

    def test_selector_error_fails_request(self, registry: CustomFormats) -> None:
        def broken(request, params):
            raise RuntimeError("selector failed")

        registry.add("broken", mime_types="broken", selector=broken)
        app = FastAPI()
        router = custom_formats(registry)

        @router.get("/boom")
        async def boom() -> dict:
            return {}

        app.include_router(router)
        response = TestClient(app, raise_server_exceptions=False).get("/boom")
        assert response.status_code == 500


class TestRegistryAccess:
    def test_get_registry_returns_installed(self, registry: CustomFormats) -> None:
        app = FastAPI()
        assert install(app, registry) is registry

        @app.get("/count")
        async def count(request: Request) -> dict:
            return {"formats": len(get_registry(request))}

        registry.add("fmt", mime_types="x")
        assert TestClient(app).get("/count").json() == {"formats": 1}

    def test_get_registry_without_install(self) -> None:
        app = FastAPI()

        @app.get("/count")
        async def count(request: Request) -> dict:
            return {"formats": len(get_registry(request))}

        with pytest.raises(RuntimeError, match="No custom formats registry"):
            TestClient(app).get("/count")

    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"status": "ok"}
