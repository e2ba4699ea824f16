"""
Error types for the MCP Lite engine.

This module defines the ToolError base class and subclasses for domain errors
raised by the registry and by tool/resource handlers. Domain errors should be
expressed using ToolError (or subclasses) instead of building JSON-RPC error
objects directly; the dispatcher maps them to protocol errors when a method
handler lets one escape.

Error codes:
- "invalid_argument": bad input (maps to JSON-RPC Invalid params)
- "already_exists": duplicate registration
- "not_found": unknown tool/resource
"""

from __future__ import annotations

from typing import Any


class ToolError(Exception):
    """
    Base exception class for MCP domain errors.

    Attributes:
        error_code: Internal error code string (e.g., "invalid_argument",
            "already_exists", "not_found", "internal").
        message: Human-readable error message.
        details: Optional structured details (e.g., offending names).

    Example:
        >>> raise ToolError(
        ...     error_code="invalid_argument",
        ...     message="Tool name is required",
        ...     details={"field": "name"},
        ... )
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize a ToolError.

        Args:
            error_code: Internal error code string identifying the error category.
            message: Human-readable error message.
            details: Optional dictionary with structured error details.
        """
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for serialization.

        Returns:
            Dictionary with error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgumentError(ToolError):
    """
    Error raised when a caller supplies invalid input.

    Used by the registry for descriptors missing a name, handler or URI
    template, and by handlers for argument problems.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InvalidArgumentError."""
        super().__init__(
            error_code="invalid_argument", message=message, details=details
        )


class AlreadyExistsError(ToolError):
    """Error raised when a tool or resource name is already registered."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an AlreadyExistsError."""
        super().__init__(error_code="already_exists", message=message, details=details)


class NotFoundError(ToolError):
    """Error raised when a named tool or resource is not registered."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a NotFoundError."""
        super().__init__(error_code="not_found", message=message, details=details)
