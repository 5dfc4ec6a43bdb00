"""Custom format registry.

Declares additional response formats and the selectors that pick them
at request time. Each format is written through to a
:class:`~customformats.mime.MimeRegistry` so it can be rendered like any
built-in format.

The registry is an ordinary object, built while the application is
configured and handed to the routers that need it. It is not
synchronized: populate it at startup and treat it as read-only while
requests are served.

Typical usage:
    >>> def is_iphone(request, params):
    ...     return "iphone" in request.headers.get("user-agent", "").lower()
    >>> formats = CustomFormats()
    >>> formats.add(
    ...     "iphone",
    ...     lambda f: f.mime_types("application/xhtml+xml", "text/xml")
    ...     .transform_method("to_iphone_data")
    ...     .headers({"X-Device": "iphone"})
    ...     .quality(0.45)
    ...     .selector(is_iphone),
    ... )
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from customformats.exceptions import ConfigurationError
from customformats.mime import DEFAULT_QUALITY, MimeRegistry
from customformats.models import FormatDefinition, Selector

logger = logging.getLogger(__name__)


def _flatten(types: Iterable[Any]) -> list[str]:
    flat: list[str] = []
    for t in types:
        if isinstance(t, str):
            flat.append(t)
        else:
            flat.extend(_flatten(t))
    return flat


class FormatBuilder:
    """Collects the settings of one custom format.

    Every setter returns the builder so calls can be chained. MIME types
    accumulate across calls; the other settings keep the first value
    they are given and ignore later calls.

    Args:
        name: The format being defined.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._mime_types: list[str] = []
        self._transform_method: str | None = None
        self._headers: dict[str, str] | None = None
        self._quality: float | None = None
        self._selector: Selector | None = None

    def mime_types(self, *types: str | Iterable[str]) -> FormatBuilder:
        """Append accepted content types. Nested lists are flattened."""
        self._mime_types.extend(_flatten(types))
        return self

    mime_type = mime_types

    def transform_method(self, name: str) -> FormatBuilder:
        """Set the serialization method name (default ``to_<format>``)."""
        if self._transform_method is None and name:
            self._transform_method = name
        return self

    def headers(self, headers: Mapping[str, str]) -> FormatBuilder:
        """Set default response headers. Empty mappings are ignored."""
        if self._headers is None and headers:
            self._headers = dict(headers)
        return self

    def quality(self, quality: float) -> FormatBuilder:
        """Set the ranking weight (default 1)."""
        if self._quality is None and quality is not None:
            self._quality = quality
        return self

    def selector(self, selector: Selector) -> FormatBuilder:
        """Set the predicate that picks this format at request time."""
        if self._selector is None and selector is not None:
            self._selector = selector
        return self

    def build(self) -> FormatDefinition:
        """Resolve defaults and return the finished definition.

        Returns:
            The format definition.

        Raises:
            ConfigurationError: If no MIME types were declared.
        """
        if not self._mime_types:
            raise ConfigurationError(
                f"You must specify mime_types for your custom format {self.name!r}",
                format_name=self.name,
            )
        return FormatDefinition(
            name=self.name,
            mime_types=list(self._mime_types),
            transform_method=self._transform_method or f"to_{self.name}",
            headers=dict(self._headers or {}),
            quality=DEFAULT_QUALITY if self._quality is None else self._quality,
            selector=self._selector,
        )


class CustomFormats:
    """Registry of custom formats and their selectors.

    Args:
        mime_registry: MIME registry the formats are written to. A new
            one with the built-in formats is created when omitted.
    """

    def __init__(self, mime_registry: MimeRegistry | None = None) -> None:
        self.mime_registry = mime_registry if mime_registry is not None else MimeRegistry()
        self.registered_formats: list[str] = []
        self._selectors: dict[str, Selector] = {}

    def add(
        self,
        name: str,
        configure: Callable[[FormatBuilder], object] | None = None,
        *,
        mime_types: str | Iterable[str] | None = None,
        transform_method: str | None = None,
        headers: Mapping[str, str] | None = None,
        quality: float | None = None,
        selector: Selector | None = None,
    ) -> FormatDefinition:
        """Register a custom format.

        Keyword options are applied first, then ``configure`` is called
        with the builder. Since set-once settings keep their first value,
        keyword options take precedence over the same setting made in
        ``configure``.

        Adding a name twice is not deduplicated: the name is recorded
        again and its selector replaced.

        Args:
            name: Format name.
            configure: Callback receiving a :class:`FormatBuilder`.
            mime_types: Accepted content types.
            transform_method: Serialization method name.
            headers: Default response headers.
            quality: Ranking weight.
            selector: Runtime predicate choosing this format.

        Returns:
            The registered format definition.

        Raises:
            ConfigurationError: If no MIME types were declared or the MIME
                registry rejects the definition. Nothing is registered in
                that case.
        """
        builder = FormatBuilder(name)
        if mime_types is not None:
            builder.mime_types(mime_types)
        if transform_method is not None:
            builder.transform_method(transform_method)
        if headers is not None:
            builder.headers(headers)
        if quality is not None:
            builder.quality(quality)
        if selector is not None:
            builder.selector(selector)
        if configure is not None:
            configure(builder)

        definition = builder.build()

        try:
            self.mime_registry.add_mime_type(
                name,
                definition.transform_method,
                definition.mime_types,
                definition.headers,
                definition.quality,
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid definition for custom format {name!r}: {e}",
                format_name=name,
            ) from e

        self.registered_formats.append(name)
        if definition.selector is not None:
            self._selectors[name] = definition.selector
        logger.debug(
            "Registered custom format %r (%s, selector=%s)",
            name,
            ", ".join(definition.mime_types),
            definition.selector is not None,
        )
        return definition

    def selector_for(
        self, name: str, **options: Any
    ) -> Callable[[Selector], Selector]:
        """Decorator form of :meth:`add` that uses the function as selector.

        Example:
            >>> @formats.selector_for("android", mime_types="text/html")
            ... def is_android(request, params):
            ...     return "android" in request.headers.get("user-agent", "").lower()

        Args:
            name: Format name.
            **options: Keyword options accepted by :meth:`add`.

        Returns:
            Decorator that registers the format and returns the function.
        """

        def decorator(func: Selector) -> Selector:
            self.add(name, selector=func, **options)
            return func

        return decorator

    def clear_all(self) -> None:
        """Remove every custom format, including from the MIME registry."""
        for name in self.registered_formats:
            self.mime_registry.remove_mime_type(name)
        if self.registered_formats:
            logger.info("Cleared %d custom format(s)", len(self.registered_formats))
        self._selectors.clear()
        self.registered_formats.clear()

    def selectors_snapshot(self) -> Mapping[str, Selector]:
        """Return a read-only copy of the selectors, in registration order."""
        return MappingProxyType(dict(self._selectors))

    def get_selector(self, name: str) -> Selector | None:
        """Look up the selector of a format.

        Args:
            name: Format name.

        Returns:
            The selector, or None if the format has none.
        """
        return self._selectors.get(name)

    def is_registered(self, name: str) -> bool:
        """Return True if the format was added through this registry."""
        return name in self.registered_formats

    def __contains__(self, name: object) -> bool:
        return name in self.registered_formats

    def __len__(self) -> int:
        return len(self.registered_formats)
