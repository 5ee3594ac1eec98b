"""
Error kinds raised by catalog discovery.

Every failure aborts the whole discovery run; callers never receive a
partial graph. Driver errors raised by the query gateway are not wrapped.
"""

from __future__ import annotations

from typing import Any, Optional


class CatalogGraphError(Exception):
    """Base class for all catalog_graph errors."""


class NotFoundError(CatalogGraphError, LookupError):
    """A target database or a referenced owner entity does not exist."""

    def __init__(self, message: str, key: Optional[Any] = None):
        super().__init__(message)
        self.key = key


class InconsistentError(CatalogGraphError):
    """Catalog rows violate an invariant of the assembled graph."""


class UnsupportedTypeError(CatalogGraphError, ValueError):
    """A vendor store type has no portable mapping."""

    def __init__(self, store_type: str, context: Optional[str] = None):
        message = f"Unsupported store type | store_type = {store_type!r}"
        if context:
            message = f"{message} | column = {context}"
        super().__init__(message)
        self.store_type = store_type
        self.context = context


class ValidationError(CatalogGraphError, ValueError):
    """Caller-supplied configuration is missing or malformed."""


class DiscoveryCancelled(CatalogGraphError):
    """The discovery run was cancelled between passes."""
