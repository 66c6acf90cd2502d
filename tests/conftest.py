"""
Shared pytest fixtures.

``FakeStore`` / ``FakeBookStore`` are in-memory stores that count every
call so tests can assert exactly which store operations happened.
Setting ``fail_on`` makes the named operation raise ``PersistenceError``.
SQLite-backed tests get a fresh migrated database per test.
"""

from collections import Counter

import pytest

from bookcom_catalog.app.cache.accessor import CacheAsideAccessor
from bookcom_catalog.app.cache.container import CacheContainer
from bookcom_catalog.app.core.config import Settings
from bookcom_catalog.app.core.db import init_db
from bookcom_catalog.app.core.exceptions import PersistenceError
from bookcom_catalog.app.main import create_catalog
from bookcom_catalog.app.services.bulk_merge import BulkAuthorshipMerger


class FakeStore:
    def __init__(self):
        self.rows = {}
        self.calls = Counter()
        self.fail_on = set()
        self._next_id = 1

    def seed(self, entity):
        """Insert without counting a call."""
        if entity.id is None:
            entity.id = self._next_id
        self._next_id = max(self._next_id, entity.id) + 1
        self.rows[entity.id] = entity
        return entity

    def _record(self, op):
        self.calls[op] += 1
        if op in self.fail_on:
            raise PersistenceError(f"{op} failed")

    def find_by_id(self, entity_id):
        self._record("find_by_id")
        return self.rows.get(entity_id)

    def save(self, entity):
        self._record("save")
        return self.seed(entity)

    def delete(self, entity_id):
        self._record("delete")
        self.rows.pop(entity_id, None)

    def exists_by_id(self, entity_id):
        self._record("exists_by_id")
        return entity_id in self.rows


class FakeBookStore(FakeStore):
    def find_by_natural_key(self, title, count_chapters, public_year, status):
        self._record("find_by_natural_key")
        key = (title, count_chapters, public_year, status)
        for book in self.rows.values():
            if book.natural_key == key:
                return book
        return None


@pytest.fixture
def caches():
    return CacheContainer()


@pytest.fixture
def book_store():
    return FakeBookStore()


@pytest.fixture
def user_store():
    return FakeStore()


@pytest.fixture
def user_accessor(user_store, caches):
    return CacheAsideAccessor(user_store, caches.users)


@pytest.fixture
def merger(book_store, user_accessor):
    return BulkAuthorshipMerger(book_store, user_accessor)


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "catalog.db")
    init_db(path)
    return path


@pytest.fixture
def catalog(tmp_path):
    return create_catalog(settings=Settings(), database_path=str(tmp_path / "catalog.db"))
