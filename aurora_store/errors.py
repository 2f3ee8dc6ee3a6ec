from __future__ import annotations

from typing import Any, Dict, Optional


class StoreError(Exception):
    """Base class for errors raised by the store itself.

    Failures coming back from the statement executor are never wrapped in
    this type; they propagate exactly as the executor raised them.
    """

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class InvalidIdentifier(StoreError, ValueError):
    """Raised when a table, column or index name cannot be used as a SQL identifier."""


class UnsupportedComparator(StoreError, ValueError):
    """Raised when a query uses a comparator the filtered field does not expose."""


class InvalidFilter(StoreError, ValueError):
    """Raised when a filter value on a declared field has the wrong shape."""


class MalformedRecord(StoreError):
    """Raised when a result row does not carry the field shape the store expects."""


__all__ = [
    "InvalidFilter",
    "InvalidIdentifier",
    "MalformedRecord",
    "StoreError",
    "UnsupportedComparator",
]
