"""
Error types raised by the catalog.

``NotFoundError`` and ``InvalidBookDataError`` are domain outcomes the
caller is expected to handle.  ``PersistenceError`` wraps failures
reported by the database.  The caches never raise any of these.
"""

from typing import Any, Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""


class NotFoundError(CatalogError):
    """Requested entity is absent from both the cache and the store."""

    entity = "entity"

    def __init__(self, entity_id: Any) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.entity.capitalize()} with id {entity_id} not found")


class BookNotFoundError(NotFoundError):
    entity = "book"


class UserNotFoundError(NotFoundError):
    entity = "user"


class CommentNotFoundError(NotFoundError):
    entity = "comment"


class InvalidBookDataError(CatalogError):
    """A book candidate in a bulk call failed validation.

    ``field`` names the offending attribute and ``index`` the position
    of the candidate in the submitted list (``None`` for single-book
    operations).
    """

    def __init__(self, field: str, message: str, index: Optional[int] = None) -> None:
        self.field = field
        self.message = message
        self.index = index
        prefix = f"Book #{index}: " if index is not None else ""
        super().__init__(f"{prefix}{field}: {message}")


class PersistenceError(CatalogError):
    """The store could not complete an operation (constraint, I/O, ...)."""
