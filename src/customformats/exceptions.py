"""Exception classes for customformats."""

from __future__ import annotations

from typing import Any


class CustomFormatsError(Exception):
    """Base exception for all customformats errors.

    Args:
        message: Human-readable error message.
        code: Optional error code for programmatic handling.
        details: Optional dictionary with additional error context.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary.

        Returns:
            Dictionary with error code, message, and details.
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CustomFormatsError):
    """Raised when a format definition is incomplete.

    A format must declare at least one MIME type. Registration is
    aborted entirely when this is raised.

    Args:
        message: Description of the configuration problem.
        format_name: The format being registered, if known.
    """

    def __init__(self, message: str, format_name: str | None = None) -> None:
        details = {"format": format_name} if format_name else {}
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)
        self.format_name = format_name
