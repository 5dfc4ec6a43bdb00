"""MIME type registry for response formats.

Maps a format name (``html``, ``json``, ``iphone``) to the content types
it accepts, the transform (serialization) method used to render it, its
default response headers, and its default quality. FastAPI has no such
registry of its own, so this module provides one, pre-populated with
the common built-in formats.

Typical usage:
    >>> from customformats.mime import MimeRegistry
    >>> mimes = MimeRegistry()
    >>> mimes.add_mime_type("csv", "to_csv", ["text/csv"])
    >>> mimes.content_type_for("csv")
    'text/csv'
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_QUALITY: float = 1
"""Quality assigned to a MIME type when none is given."""

PROTECTED_FORMATS = frozenset({"all"})
"""Formats that can never be removed from a registry."""


class MimeType(BaseModel):
    """A registered response format.

    Attributes:
        accepts: Content types accepted for this format. The first entry
            is used as the response ``Content-Type``.
        transform_method: Name of the method that serializes an object
            into this format (e.g., ``"to_json"``).
        response_headers: Default headers sent with responses.
        default_quality: Weight used when ranking formats.
    """

    accepts: list[str]
    transform_method: str
    response_headers: dict[str, str] = Field(default_factory=dict)
    default_quality: float = DEFAULT_QUALITY

    @property
    def content_type(self) -> str:
        """Canonical content type for responses in this format."""
        return self.accepts[0]


_BUILTIN_MIME_TYPES: dict[str, MimeType] = {
    "all": MimeType(accepts=["*/*"], transform_method="to_s"),
    "yaml": MimeType(accepts=["application/x-yaml", "text/yaml"], transform_method="to_yaml"),
    "text": MimeType(accepts=["text/plain"], transform_method="to_text"),
    "html": MimeType(accepts=["text/html", "application/xhtml+xml"], transform_method="to_html"),
    "xml": MimeType(
        accepts=["application/xml", "text/xml", "application/x-xml"],
        transform_method="to_xml",
        default_quality=0.9999,
    ),
    "js": MimeType(
        accepts=["text/javascript", "application/javascript", "application/x-javascript"],
        transform_method="to_json",
    ),
    "json": MimeType(accepts=["application/json", "text/x-json"], transform_method="to_json"),
}


class MimeRegistry:
    """Registry of response formats keyed by format name.

    Args:
        builtins: Seed the registry with the built-in formats
            (``all``, ``yaml``, ``text``, ``html``, ``xml``, ``js``, ``json``).
    """

    def __init__(self, builtins: bool = True) -> None:
        self._types: dict[str, MimeType] = {}
        if builtins:
            for name, mime in _BUILTIN_MIME_TYPES.items():
                self._types[name] = mime.model_copy(deep=True)

    def add_mime_type(
        self,
        name: str,
        transform_method: str,
        accepts: Iterable[str],
        response_headers: Mapping[str, str] | None = None,
        default_quality: float = DEFAULT_QUALITY,
    ) -> MimeType:
        """Register (or replace) a format.

        Args:
            name: Format name.
            transform_method: Serialization method name.
            accepts: Accepted content types; the first is canonical.
            response_headers: Default response headers.
            default_quality: Ranking weight.

        Returns:
            The stored MimeType.
        """
        mime = MimeType(
            accepts=list(accepts),
            transform_method=transform_method,
            response_headers=dict(response_headers or {}),
            default_quality=default_quality,
        )
        if name in self._types:
            logger.debug("Replacing MIME type %r", name)
        self._types[name] = mime
        return mime

    def remove_mime_type(self, name: str) -> bool:
        """Remove a format.

        Args:
            name: Format name.

        Returns:
            True if the format was removed, False if it was missing or
            protected.
        """
        if name in PROTECTED_FORMATS:
            return False
        return self._types.pop(name, None) is not None

    @property
    def available_mime_types(self) -> Mapping[str, MimeType]:
        """Read-only view of all registered formats."""
        return MappingProxyType(self._types)

    def mime_type_for(self, name: str) -> MimeType | None:
        """Look up a format by name."""
        return self._types.get(name)

    def content_type_for(self, name: str) -> str | None:
        """Return the canonical content type of a format, or None."""
        mime = self._types.get(name)
        return mime.content_type if mime else None

    def response_headers_for(self, name: str) -> dict[str, str]:
        """Return default response headers for a format.

        The headers include ``Content-Type`` unless the format's own
        headers already set it.

        Args:
            name: Format name.

        Returns:
            Header mapping, empty for an unknown format.
        """
        mime = self._types.get(name)
        if mime is None:
            return {}
        headers = {"Content-Type": mime.content_type}
        headers.update(mime.response_headers)
        return headers

    def format_for_content_type(self, content_type: str) -> str | None:
        """Find the format that accepts a content type.

        Parameters such as ``; charset=utf-8`` are ignored.

        Args:
            content_type: A content type string.

        Returns:
            The first format (in registration order) accepting it, or None.
        """
        bare = content_type.split(";", 1)[0].strip().lower()
        for name, mime in self._types.items():
            if bare in (a.lower() for a in mime.accepts):
                return name
        return None

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)
