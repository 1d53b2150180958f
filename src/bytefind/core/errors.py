from __future__ import annotations


class SearchError(Exception):
    """Base class for errors raised by a search call."""


class UsageError(SearchError, TypeError):
    """Raised for malformed calls: wrong argument count or mismatched value kinds."""

    def __init__(self, detail: str | None = None) -> None:
        message = "malformed call" if not detail else f"malformed call: {detail}"
        super().__init__(message)
        self.detail = detail


class MalformedText(SearchError, ValueError):
    """Raised when haystack or needle text fails to decode."""

    def __init__(self, encoding: str) -> None:
        super().__init__(f"malformed {encoding.upper()} text")
        self.encoding = encoding


class AllocationError(SearchError, MemoryError):
    """Raised when an argument could not be materialized as a buffer."""


class InvalidOffset(ValueError):
    """Raised when an invalid (e.g., non-positive) position is provided."""
