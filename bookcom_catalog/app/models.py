"""
Domain entities of the catalog.

Entities are plain dataclasses.  Relationships are kept by identifier
on the owning side of each link so that no reference cycles appear:
a ``Book`` knows the ids of its authors and comments, a ``User`` holds
the ``Book`` values it authored (needed by the bulk merger to compare
natural keys without extra round trips) and the ids of its comments.

Identifiers are assigned by the store on first save and are ``None``
before that.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Set, Tuple


class BookStatus(str, Enum):
    """Publication status of a book."""

    ANNOUNCED = "ANNOUNCED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    FROZEN = "FROZEN"


# (title, count_chapters, public_year, status)
NaturalKey = Tuple[str, int, int, BookStatus]


@dataclass
class Book:
    title: str
    count_chapters: int
    public_year: int
    status: BookStatus
    id: Optional[int] = None
    author_ids: Set[int] = field(default_factory=set)
    comment_ids: List[int] = field(default_factory=list)

    @property
    def natural_key(self) -> NaturalKey:
        """Identity of the book independent of its store identifier."""
        return (self.title, self.count_chapters, self.public_year, self.status)


@dataclass
class User:
    name: str
    email: str
    password: str
    id: Optional[int] = None
    books: List[Book] = field(default_factory=list)
    comment_ids: List[int] = field(default_factory=list)

    def has_book(self, book_id: Optional[int]) -> bool:
        return book_id is not None and any(book.id == book_id for book in self.books)

    def add_book(self, book: Book) -> None:
        """Link ``book`` to this user on both sides; idempotent."""
        if self.id is not None:
            book.author_ids.add(self.id)
        if book.id is None or not self.has_book(book.id):
            self.books.append(book)

    def remove_book(self, book: Book) -> None:
        if self.id is not None:
            book.author_ids.discard(self.id)
        self.books = [b for b in self.books if b.id != book.id]


@dataclass
class Comment:
    text: str
    book_id: int
    user_id: int
    id: Optional[int] = None
    created_at: Optional[datetime] = None
