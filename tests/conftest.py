"""Shared fixtures for customformats tests."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from customformats.formats import CustomFormats
from customformats.mime import MimeRegistry

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; U; CPU iPhone OS 2_1 like Mac OS X; en-us) AppleWebKit/525.18.1 "
    "(KHTML, like Gecko) Version/3.1.1 Mobile/5F136 Safari/525.20"
)
ANDROID_UA = (
    "Mozilla/5.0 (Linux; U; Android 0.5; en-us) AppleWebKit/522+ "
    "(KHTML, like Gecko) Safari/419.3"
)


@pytest.fixture
def iphone_ua() -> str:
    return IPHONE_UA


@pytest.fixture
def android_ua() -> str:
    return ANDROID_UA


@pytest.fixture
def mime_registry() -> MimeRegistry:
    return MimeRegistry()


@pytest.fixture
def registry(mime_registry: MimeRegistry) -> CustomFormats:
    return CustomFormats(mime_registry)


@pytest.fixture
def captures() -> list[str]:
    """Names of the selectors invoked, in call order."""
    return []


@pytest.fixture
def tracing_selector(captures: list[str]) -> Callable[[str, str], Callable[..., bool]]:
    """Build a selector that records its call and matches a User-Agent substring."""

    def make(name: str, ua_fragment: str) -> Callable[..., bool]:
        def selector(request: Any, params: Mapping[str, Any]) -> bool:
            captures.append(name)
            return ua_fragment.lower() in request.headers.get("user-agent", "").lower()

        return selector

    return make


@pytest.fixture
def device_registry(
    registry: CustomFormats, tracing_selector: Callable[[str, str], Callable[..., bool]]
) -> CustomFormats:
    """Registry with traced iphone and android selectors and a plain foo format."""
    registry.add("iphone", mime_types="iphone", selector=tracing_selector("iphone", "iPhone"))
    registry.add("android", mime_types="android", selector=tracing_selector("android", "Android"))
    registry.add("foo", mime_types="foo")
    return registry
