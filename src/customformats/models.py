"""Core data models for customformats."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request

Selector = Callable[[Request, Mapping[str, Any]], object]
"""Predicate deciding whether a format applies to a request.

Called with the request and the route parameters. Any truthy return
value counts as a match.
"""


@dataclass
class FormatDefinition:
    """A custom response format.

    Args:
        name: Unique format key (e.g., "iphone").
        mime_types: Accepted content types. The first is used as the
            response ``Content-Type``.
        transform_method: Serialization method name (e.g., "to_iphone").
        headers: Default response headers.
        quality: Ranking weight for content negotiation.
        selector: Optional predicate choosing this format at runtime.
            None means the format is only used when requested explicitly.
    """

    name: str
    mime_types: list[str]
    transform_method: str
    headers: dict[str, str] = field(default_factory=dict)
    quality: float = 1
    selector: Selector | None = None
