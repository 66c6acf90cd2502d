"""
Business logic for users.

Besides the cache-aside CRUD operations this service implements the
authorship operations: linking single books, the bulk merge (delegated
to ``BulkAuthorshipMerger``) and the cascade that runs when a user is
deleted.
"""

import logging
from typing import Iterable, List, Optional

from ..cache.accessor import CacheAsideAccessor
from ..core.exceptions import BookNotFoundError, UserNotFoundError
from ..core.logging_config import log_calls
from ..core.security import hash_password
from ..models import Book, Comment, User
from ..schemas.book import BookCreate, BookRead
from ..schemas.user import UserCreate, UserRead, UserUpdate
from .bulk_merge import BulkAuthorshipMerger, Candidate
from .mappers import to_book_read, to_user_read

logger = logging.getLogger(__name__)


class UserService:
    """Сервис для работы с пользователями и их авторством."""

    def __init__(
        self,
        users: CacheAsideAccessor[User],
        books: CacheAsideAccessor[Book],
        comments: CacheAsideAccessor[Comment],
        merger: BulkAuthorshipMerger,
    ) -> None:
        self._users = users
        self._books = books
        self._comments = comments
        self._merger = merger

    @log_calls
    def list_users(self) -> List[UserRead]:
        return [to_user_read(user) for user in self._users.store.find_all()]

    @log_calls
    def get_user(self, user_id: int) -> UserRead:
        return to_user_read(self._require_cached(user_id))

    @log_calls
    def create_user(self, data: UserCreate) -> UserRead:
        user = User(name=data.name, email=data.email, password=hash_password(data.password))
        saved = self._users.save(user)
        logger.info("Registered user %s", saved.id)
        return to_user_read(saved)

    @log_calls
    def update_user(self, user_id: int, data: UserUpdate) -> UserRead:
        user = self._require_stored(user_id)
        if data.name is not None:
            user.name = data.name
        if data.email is not None:
            user.email = data.email
        if data.password is not None:
            user.password = hash_password(data.password)
        updated = self._users.save(user)
        logger.info("Updated user %s", user_id)
        return to_user_read(updated)

    @log_calls
    def delete_user(self, user_id: int) -> None:
        """Delete a user together with everything that depends on them.

        The user's comments are deleted, the user is removed from the
        authors of each of their books and books left without authors
        are deleted as well.  Cache entries of the books and co-authors
        that referenced the user are invalidated.
        """
        user = self._require_stored(user_id)

        for comment_id in user.comment_ids:
            comment = self._comments.store.find_by_id(comment_id)
            self._comments.delete(comment_id)
            if comment is not None:
                # Cached books list their comment ids
                self._books.invalidate(comment.book_id)

        for book in user.books:
            book.author_ids.discard(user_id)
            if book.author_ids:
                self._books.save(book)
                # Cached co-authors hold this book with the old author set
                for author_id in book.author_ids:
                    self._users.invalidate(author_id)
            else:
                commenters = {c.user_id for c in self._comments.store.find_by_book(book.id)}
                self._books.delete(book.id)
                for comment_id in book.comment_ids:
                    self._comments.invalidate(comment_id)
                for commenter_id in commenters:
                    self._users.invalidate(commenter_id)
                logger.info("Deleted book %s left without authors", book.id)

        self._users.delete(user_id)
        logger.info("Deleted user %s", user_id)

    @log_calls
    def find_users_by_name(self, name: str) -> List[UserRead]:
        return [to_user_read(user) for user in self._users.store.find_by_name_containing(name)]

    @log_calls
    def find_user_by_email(self, email: str) -> Optional[UserRead]:
        user = self._users.store.find_by_email(email)
        return to_user_read(user) if user is not None else None

    @log_calls
    def add_book_to_user(self, user_id: int, data: BookCreate) -> UserRead:
        """Create a new book authored by the user."""
        user = self._require_stored(user_id)
        book = Book(
            title=data.title,
            count_chapters=data.count_chapters,
            public_year=data.public_year,
            status=data.status,
        )
        user.add_book(book)
        updated = self._users.save(user)
        return to_user_read(updated)

    @log_calls
    def remove_book_from_user(self, user_id: int, book_id: int) -> UserRead:
        user = self._require_stored(user_id)
        book = self._books.store.find_by_id(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        user.remove_book(book)
        updated = self._users.save(user)
        # The cached book still lists the user as author
        self._books.invalidate(book_id)
        return to_user_read(updated)

    @log_calls
    def add_books_bulk(
        self, user_id: int, candidates: Optional[Iterable[Candidate]]
    ) -> List[BookRead]:
        """Attach many books to a user at once, skipping duplicates.

        See ``BulkAuthorshipMerger`` for the classification rules.
        """
        report = self._merger.merge(user_id, candidates)
        return [to_book_read(book) for book in report.books]

    def _require_cached(self, user_id: int) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _require_stored(self, user_id: int) -> User:
        # Mutations start from the store copy, never from a cached value
        user = self._users.store.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user
