"""
Business logic for books.

Single-book reads go through the book cache (read-through); creates and
updates write through it and deletes invalidate it.  Listing and search
operations query the store directly and never touch the cache.
"""

import logging
from typing import List

from ..cache.accessor import CacheAsideAccessor
from ..core.exceptions import BookNotFoundError, UserNotFoundError
from ..core.logging_config import log_calls
from ..models import Book, BookStatus, Comment, User
from ..schemas.book import BookCreate, BookRead, BookUpdate
from .mappers import to_book_read

logger = logging.getLogger(__name__)


class BookService:
    """Сервис для работы с книгами."""

    def __init__(
        self,
        books: CacheAsideAccessor[Book],
        users: CacheAsideAccessor[User],
        comments: CacheAsideAccessor[Comment],
    ) -> None:
        self._books = books
        self._users = users
        self._comments = comments

    @log_calls
    def list_books(self) -> List[BookRead]:
        return [to_book_read(book) for book in self._books.store.find_all()]

    @log_calls
    def get_book(self, book_id: int) -> BookRead:
        book = self._books.find_by_id(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        return to_book_read(book)

    @log_calls
    def create_book(self, data: BookCreate) -> BookRead:
        book = Book(
            title=data.title,
            count_chapters=data.count_chapters,
            public_year=data.public_year,
            status=data.status,
        )
        saved = self._books.save(book)
        logger.info("Book %s saved and cached", saved.id)
        return to_book_read(saved)

    @log_calls
    def update_book(self, book_id: int, data: BookUpdate) -> BookRead:
        """Update the provided fields of a book.

        When ``author_ids`` is present every id must name an existing
        user, otherwise ``UserNotFoundError`` is raised and nothing is
        written.
        """
        book = self._books.store.find_by_id(book_id)
        if book is None:
            raise BookNotFoundError(book_id)

        changes = data.model_dump(exclude_unset=True, exclude={"author_ids"})
        for name, value in changes.items():
            if value is not None:
                setattr(book, name, value)

        if data.author_ids is not None:
            for author_id in data.author_ids:
                if not self._users.exists(author_id):
                    raise UserNotFoundError(author_id)
            previous = set(book.author_ids)
            book.author_ids = set(data.author_ids)
            # Cached users carry their book lists
            for author_id in previous ^ book.author_ids:
                self._users.invalidate(author_id)

        saved = self._books.save(book)
        logger.info("Book %s updated and cached", book_id)
        return to_book_read(saved)

    @log_calls
    def delete_book(self, book_id: int) -> None:
        """Delete a book; its comments and authorship links go with it."""
        book = self._books.store.find_by_id(book_id)
        self._books.delete(book_id)
        if book is not None:
            for comment_id in book.comment_ids:
                self._comments.invalidate(comment_id)
            for author_id in book.author_ids:
                self._users.invalidate(author_id)
        logger.info("Book %s deleted from store and cache", book_id)

    @log_calls
    def find_books_by_title(self, title: str) -> List[BookRead]:
        return [to_book_read(book) for book in self._books.store.find_by_title(title)]

    @log_calls
    def find_books_by_status(self, status: BookStatus) -> List[BookRead]:
        return [to_book_read(book) for book in self._books.store.find_by_status(status)]

    @log_calls
    def find_books_by_public_year(self, public_year: int) -> List[BookRead]:
        return [
            to_book_read(book) for book in self._books.store.find_by_public_year(public_year)
        ]

    @log_calls
    def find_books_by_author(self, user_id: int) -> List[BookRead]:
        return [to_book_read(book) for book in self._books.store.find_by_author(user_id)]

    @log_calls
    def create_book_with_author(self, author_id: int, data: BookCreate) -> BookRead:
        if not self._users.exists(author_id):
            raise UserNotFoundError(author_id)
        book = Book(
            title=data.title,
            count_chapters=data.count_chapters,
            public_year=data.public_year,
            status=data.status,
            author_ids={author_id},
        )
        saved = self._books.save(book)
        self._users.invalidate(author_id)
        logger.info("Book %s created for author %s and cached", saved.id, author_id)
        return to_book_read(saved)

    def is_cached_or_exists(self, book_id: int) -> bool:
        return self._books.exists(book_id)
