"""customformats -- declarative custom response formats for FastAPI.

Register extra formats with their MIME types and an optional selector
that picks the format from the request, then wrap routes in a
custom formats scope to have the selectors run before dispatch.
"""

from customformats.exceptions import ConfigurationError, CustomFormatsError
from customformats.formats import CustomFormats, FormatBuilder
from customformats.mime import MimeRegistry, MimeType
from customformats.models import FormatDefinition, Selector
from customformats.routing import (
    DEFAULT_FORMAT,
    CustomFormatRoute,
    custom_formats,
    get_format,
    get_registry,
    install,
)
from customformats.selection import FORMAT_PARAM, select_format

__all__ = [
    "DEFAULT_FORMAT",
    "FORMAT_PARAM",
    "ConfigurationError",
    "CustomFormatRoute",
    "CustomFormats",
    "CustomFormatsError",
    "FormatBuilder",
    "FormatDefinition",
    "MimeRegistry",
    "MimeType",
    "Selector",
    "custom_formats",
    "get_format",
    "get_registry",
    "install",
    "select_format",
]
