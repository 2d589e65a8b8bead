"""
Exception hierarchy for the grid diagram service.

Provides layered exception structure for pipeline errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class GridVizException(Exception):
    """Base exception for all grid diagram service errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(GridVizException):
    """Raised when an identifier or path is null or empty."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFoundError(GridVizException):
    """Raised when an artifact, network element or expected file is missing."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            resource: Kind of thing that is missing (e.g. "Diagram", "SVG file")
            identifier: Id, name or path of the missing thing
            details: Additional context
        """
        self.resource = resource
        self.identifier = identifier
        details = details or {}
        details["resource"] = resource
        super().__init__(f"{resource} not found: {identifier}", details)


class MissingGeoDataError(GridVizException):
    """Raised when a geo-profile network carries no positioned elements."""

    pass


class PipelineIOError(GridVizException):
    """Raised on filesystem or toolkit failures not otherwise classified."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize pipeline IO error.

        Args:
            message: Error message
            operation: Operation that failed (load, draw, store, modify)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
