"""Pagination exceptions.

Every failure of a page fetch surfaces as one of these typed errors. None of
them is recovered inside the engine: a call either returns a fully valid
slice or raises.
"""
from __future__ import annotations

from typing import Any


class PaginationError(Exception):
    """Base exception for pagination operations.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize pagination error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidRequestError(PaginationError):
    """The page request itself is not acceptable.

    Raised when sorting is requested on a field outside the sortable
    allow-list. Token problems are reported through the ``TokenError``
    subclasses so callers can map the whole family to a 400-like response.
    """


class TokenError(InvalidRequestError):
    """Continuation token could not be decoded.

    The token is corrupt, truncated, or was produced with a different key.
    """


class FingerprintMismatchError(TokenError):
    """Continuation token belongs to a different filter or sort."""

    def __init__(self, expected: str, actual: str):
        """Initialize fingerprint mismatch error.

        Args:
            expected: Fingerprint of the current filter/sort
            actual: Fingerprint carried by the token
        """
        self.expected = expected
        self.actual = actual
        super().__init__("Can't modify search filter when using a continuation token")


class MalformedTokenError(TokenError):
    """Decoded token payload has an unexpected shape or value."""

    def __init__(self, message: str, parts: int | None = None):
        """Initialize malformed token error.

        Args:
            message: Error description
            parts: Number of payload parts found, when relevant
        """
        self.parts = parts
        details = {"parts": parts} if parts is not None else {}
        super().__init__(message, details=details)


class SchemaError(PaginationError):
    """A configured field has no accessor on the entity type.

    This is a configuration bug, not a user error.
    """

    def __init__(self, message: str, field_name: str | None = None):
        """Initialize schema error.

        Args:
            message: Error description
            field_name: Name of the field that could not be resolved
        """
        self.field_name = field_name
        details = {"field": field_name} if field_name else {}
        super().__init__(message, details=details)


class InvalidSortValueError(PaginationError):
    """Boundary row value is null or cannot be resolved.

    Pagination cannot safely continue past such a row.
    """

    def __init__(self, message: str, field_name: str):
        """Initialize invalid sort value error.

        Args:
            message: Error description
            field_name: Field whose value could not be used
        """
        self.field_name = field_name
        super().__init__(message, details={"field": field_name})


class QueryExecutionError(PaginationError):
    """Backing store raised an error while reading a page.

    The original exception is chained as ``__cause__``.
    """


__all__ = [
    "FingerprintMismatchError",
    "InvalidRequestError",
    "InvalidSortValueError",
    "MalformedTokenError",
    "PaginationError",
    "QueryExecutionError",
    "SchemaError",
    "TokenError",
]
