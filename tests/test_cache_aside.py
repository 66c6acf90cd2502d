"""Tests for read-through, write-through and invalidation."""

import pytest

from bookcom_catalog.app.cache.accessor import CacheAsideAccessor
from bookcom_catalog.app.cache.bounded import BoundedEntityCache
from bookcom_catalog.app.core.exceptions import PersistenceError
from bookcom_catalog.app.models import User


def make_user(name="Ann", user_id=None):
    return User(name=name, email=f"{name.lower()}@example.com", password="x", id=user_id)


@pytest.fixture
def cache():
    return BoundedEntityCache(3, name="user")


@pytest.fixture
def accessor(user_store, cache):
    return CacheAsideAccessor(user_store, cache)


class TestFindById:
    def test_miss_reads_store_and_populates_cache(self, accessor, user_store, cache):
        user = user_store.seed(make_user())

        assert accessor.find_by_id(user.id) is user
        assert user_store.calls["find_by_id"] == 1
        assert cache.get(user.id) is user

    def test_hit_does_not_touch_store(self, accessor, user_store, cache):
        user = make_user(user_id=10)
        cache.put(10, user)

        assert accessor.find_by_id(10) is user
        assert user_store.calls["find_by_id"] == 0

    def test_absent_entity_is_not_cached(self, accessor, user_store, cache):
        assert accessor.find_by_id(99) is None
        assert 99 not in cache
        assert user_store.calls["find_by_id"] == 1

    def test_store_failure_propagates(self, accessor, user_store, cache):
        user_store.fail_on.add("find_by_id")
        with pytest.raises(PersistenceError):
            accessor.find_by_id(1)
        assert cache.size() == 0


class TestSave:
    def test_save_then_find_hits_cache(self, accessor, user_store):
        saved = accessor.save(make_user())
        found = accessor.find_by_id(saved.id)

        assert found is saved
        assert user_store.calls["find_by_id"] == 0

    def test_save_overwrites_stale_entry(self, accessor, user_store, cache):
        user = user_store.seed(make_user())
        cache.put(user.id, make_user("Stale", user_id=user.id))

        user.name = "Fresh"
        accessor.save(user)

        assert cache.get(user.id).name == "Fresh"

    def test_failed_save_leaves_cache_untouched(self, accessor, user_store, cache):
        old = make_user(user_id=5)
        cache.put(5, old)
        user_store.fail_on.add("save")

        with pytest.raises(PersistenceError):
            accessor.save(make_user("New", user_id=5))

        assert cache.get(5) is old


class TestDelete:
    def test_delete_then_find_is_not_stale(self, accessor, user_store):
        saved = accessor.save(make_user())
        accessor.delete(saved.id)

        assert accessor.find_by_id(saved.id) is None
        assert user_store.calls["find_by_id"] == 1

    def test_delete_of_missing_row_still_clears_cache(self, accessor, cache):
        cache.put(7, make_user(user_id=7))
        accessor.delete(7)

        assert 7 not in cache

    def test_failed_delete_keeps_cache_entry(self, accessor, user_store, cache):
        user = accessor.save(make_user())
        user_store.fail_on.add("delete")

        with pytest.raises(PersistenceError):
            accessor.delete(user.id)

        assert cache.get(user.id) is user


def test_exists_checks_cache_before_store(accessor, user_store, cache):
    cache.put(3, make_user(user_id=3))

    assert accessor.exists(3)
    assert user_store.calls["exists_by_id"] == 0
    assert not accessor.exists(4)
    assert user_store.calls["exists_by_id"] == 1


def test_invalidate_does_not_touch_store(accessor, user_store, cache):
    cache.put(3, make_user(user_id=3))
    accessor.invalidate(3)

    assert 3 not in cache
    assert sum(user_store.calls.values()) == 0


def test_refresh_caches_without_store_write(accessor, user_store, cache):
    user = make_user(user_id=4)
    accessor.refresh(user)

    assert cache.get(4) is user
    assert sum(user_store.calls.values()) == 0


def test_find_returns_the_cached_object_itself(accessor, user_store, cache):
    saved = accessor.save(make_user())

    assert accessor.find_by_id(saved.id) is saved
    assert cache.get_entry(saved.id).value is saved
