"""
Per-entity cache holder.

``CacheContainer`` owns one ``BoundedEntityCache`` per entity kind.
The caches are independent: each has its own capacity and lock, and a
write to one never invalidates another.  The container is built once
per process by ``create_catalog`` and passed to whoever needs it.
"""

import logging
from typing import Callable, Dict, Optional

from ..core.config import Settings
from ..models import Book, Comment, User
from .bounded import BoundedEntityCache

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 3


def _log_put(kind: str) -> Callable[[int], None]:
    def on_put(key: int) -> None:
        logger.info("Cached %s %s", kind, key)

    return on_put


def _log_evict(kind: str) -> Callable[[int], None]:
    def on_evict(key: int) -> None:
        logger.info("Evicted %s %s from cache", kind, key)

    return on_evict


class CacheContainer:
    """Контейнер кэшей: книги, пользователи и комментарии."""

    def __init__(
        self,
        book_capacity: int = DEFAULT_CAPACITY,
        user_capacity: int = DEFAULT_CAPACITY,
        comment_capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self._books: BoundedEntityCache[int, Book] = BoundedEntityCache(
            book_capacity, "book", on_put=_log_put("book"), on_evict=_log_evict("book")
        )
        self._users: BoundedEntityCache[int, User] = BoundedEntityCache(
            user_capacity, "user", on_put=_log_put("user"), on_evict=_log_evict("user")
        )
        self._comments: BoundedEntityCache[int, Comment] = BoundedEntityCache(
            comment_capacity,
            "comment",
            on_put=_log_put("comment"),
            on_evict=_log_evict("comment"),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CacheContainer":
        if settings is None:
            from ..core.config import settings as default_settings

            settings = default_settings
        return cls(
            book_capacity=settings.book_cache_size,
            user_capacity=settings.user_cache_size,
            comment_capacity=settings.comment_cache_size,
        )

    @property
    def books(self) -> BoundedEntityCache[int, Book]:
        return self._books

    @property
    def users(self) -> BoundedEntityCache[int, User]:
        return self._users

    @property
    def comments(self) -> BoundedEntityCache[int, Comment]:
        return self._comments

    def clear(self) -> None:
        for cache in (self._books, self._users, self._comments):
            cache.clear()

    def stats(self) -> Dict[str, Dict[str, int]]:
        return {
            "book": self._books.stats(),
            "user": self._users.stats(),
            "comment": self._comments.stats(),
        }
