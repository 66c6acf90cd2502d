"""
Store contracts used by the cache and the bulk merger.

Any persistence layer can back the catalog as long as it provides these
operations per entity kind.  ``save`` assigns the identifier on first
save and returns the persisted entity; ``delete`` is a no-op for an
unknown id.  Failures surface as ``PersistenceError``.
"""

from typing import Optional, Protocol, TypeVar

from ..models import Book, BookStatus

E = TypeVar("E")


class EntityStore(Protocol[E]):
    def find_by_id(self, entity_id: int) -> Optional[E]:
        ...

    def save(self, entity: E) -> E:
        ...

    def delete(self, entity_id: int) -> None:
        ...

    def exists_by_id(self, entity_id: int) -> bool:
        ...


class BookStore(EntityStore[Book], Protocol):
    def find_by_natural_key(
        self, title: str, count_chapters: int, public_year: int, status: BookStatus
    ) -> Optional[Book]:
        ...
