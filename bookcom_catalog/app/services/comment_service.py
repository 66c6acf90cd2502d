"""Business logic for comments."""

import logging
from typing import List

from ..cache.accessor import CacheAsideAccessor
from ..core.exceptions import BookNotFoundError, CommentNotFoundError, UserNotFoundError
from ..core.logging_config import log_calls
from ..models import Book, Comment, User
from ..schemas.comment import CommentCreate, CommentRead, CommentUpdate
from .mappers import to_comment_read

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(
        self,
        comments: CacheAsideAccessor[Comment],
        books: CacheAsideAccessor[Book],
        users: CacheAsideAccessor[User],
    ) -> None:
        self._comments = comments
        self._books = books
        self._users = users

    @log_calls
    def create_comment(self, data: CommentCreate) -> CommentRead:
        if not self._books.exists(data.book_id):
            raise BookNotFoundError(data.book_id)
        if not self._users.exists(data.user_id):
            raise UserNotFoundError(data.user_id)
        comment = Comment(text=data.text, book_id=data.book_id, user_id=data.user_id)
        saved = self._comments.save(comment)
        # Both owners list their comment ids
        self._books.invalidate(data.book_id)
        self._users.invalidate(data.user_id)
        logger.debug("Created comment %s", saved.id)
        return to_comment_read(saved)

    @log_calls
    def get_comment(self, comment_id: int) -> CommentRead:
        comment = self._comments.find_by_id(comment_id)
        if comment is None:
            raise CommentNotFoundError(comment_id)
        return to_comment_read(comment)

    @log_calls
    def comments_by_book(self, book_id: int) -> List[CommentRead]:
        comments = self._comments.store.find_by_book(book_id)
        logger.debug("Found %d comments for book %s", len(comments), book_id)
        return [to_comment_read(comment) for comment in comments]

    @log_calls
    def comments_by_user(self, user_id: int) -> List[CommentRead]:
        comments = self._comments.store.find_by_user(user_id)
        logger.debug("Found %d comments of user %s", len(comments), user_id)
        return [to_comment_read(comment) for comment in comments]

    @log_calls
    def update_comment(self, comment_id: int, data: CommentUpdate) -> CommentRead:
        comment = self._comments.store.find_by_id(comment_id)
        if comment is None:
            raise CommentNotFoundError(comment_id)
        comment.text = data.text
        updated = self._comments.save(comment)
        logger.debug("Updated comment %s", comment_id)
        return to_comment_read(updated)

    @log_calls
    def delete_comment(self, comment_id: int) -> None:
        comment = self._comments.store.find_by_id(comment_id)
        if comment is None:
            raise CommentNotFoundError(comment_id)
        self._comments.delete(comment_id)
        self._books.invalidate(comment.book_id)
        self._users.invalidate(comment.user_id)
        logger.debug("Deleted comment %s", comment_id)
