"""Tests for the per-entity cache container."""

from bookcom_catalog.app.cache.container import CacheContainer
from bookcom_catalog.app.core.config import Settings


def test_caches_are_independent():
    caches = CacheContainer(book_capacity=1, user_capacity=2, comment_capacity=3)
    caches.books.put(1, "book")
    caches.users.put(1, "user")
    caches.comments.put(1, "comment")

    caches.books.put(2, "another book")

    assert caches.books.keys() == [2]
    assert caches.users.get(1) == "user"
    assert caches.comments.get(1) == "comment"

    caches.users.remove(1)
    assert caches.comments.get(1) == "comment"


def test_default_capacity_is_three():
    caches = CacheContainer()
    assert caches.books.capacity == 3
    assert caches.users.capacity == 3
    assert caches.comments.capacity == 3


def test_from_settings():
    settings = Settings(book_cache_size=5, user_cache_size=1, comment_cache_size=2)
    caches = CacheContainer.from_settings(settings)

    assert caches.stats()["book"]["capacity"] == 5
    assert caches.stats()["user"]["capacity"] == 1
    assert caches.stats()["comment"]["capacity"] == 2


def test_clear_empties_all_caches():
    caches = CacheContainer()
    caches.books.put(1, "b")
    caches.users.put(1, "u")
    caches.clear()

    assert caches.books.size() == 0
    assert caches.users.size() == 0


def test_eviction_is_logged(caplog):
    caches = CacheContainer(book_capacity=1)
    with caplog.at_level("INFO", logger="bookcom_catalog.app.cache.container"):
        caches.books.put(1, "a")
        caches.books.put(2, "b")

    assert "Evicted book 1 from cache" in caplog.text
