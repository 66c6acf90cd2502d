"""Tests for the FIFO bounded cache."""

import random
import threading

import pytest

from bookcom_catalog.app.cache.bounded import BoundedEntityCache
from bookcom_catalog.app.cache.entry import CacheEntry


class TestBoundedEntityCache:
    def test_overflow_evicts_oldest_inserted(self):
        evicted = []
        cache = BoundedEntityCache(3, on_evict=evicted.append)
        cache.put(1, "a")
        cache.put(2, "b")
        cache.put(3, "c")
        cache.put(4, "d")

        assert cache.keys() == [2, 3, 4]
        assert cache.get(1) is None
        assert evicted == [1]

    def test_get_does_not_change_eviction_order(self):
        cache = BoundedEntityCache(3)
        for key in (1, 2, 3):
            cache.put(key, str(key))
        # Reading the oldest key must not protect it (FIFO, not LRU)
        assert cache.get(1) == "1"
        assert cache.get(1) == "1"
        cache.put(4, "4")

        assert 1 not in cache
        assert cache.keys() == [2, 3, 4]

    def test_replacing_value_keeps_position_and_does_not_evict(self):
        evicted = []
        cache = BoundedEntityCache(3, on_evict=evicted.append)
        for key in (1, 2, 3):
            cache.put(key, str(key))
        cache.put(1, "updated")

        assert cache.size() == 3
        assert evicted == []
        assert cache.get(1) == "updated"

        cache.put(4, "4")
        assert evicted == [1]

    def test_replacement_creates_new_entry(self):
        cache = BoundedEntityCache(2)
        cache.put(1, "old")
        first = cache.get_entry(1)
        cache.put(1, "new")
        second = cache.get_entry(1)

        assert first is not second
        assert first.value == "old"
        assert second.value == "new"

    def test_entry_is_immutable(self):
        entry = CacheEntry("value")
        with pytest.raises(AttributeError):
            entry.value = "other"

    def test_remove(self):
        cache = BoundedEntityCache(3)
        cache.put(1, "a")
        cache.remove(1)
        cache.remove(42)

        assert cache.size() == 0
        assert cache.get(1) is None

    def test_slot_freed_by_remove_is_reused_without_eviction(self):
        evicted = []
        cache = BoundedEntityCache(2, on_evict=evicted.append)
        cache.put(1, "a")
        cache.put(2, "b")
        cache.remove(1)
        cache.put(3, "c")

        assert evicted == []
        assert cache.keys() == [2, 3]

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_capacity_must_be_positive(self, capacity):
        with pytest.raises(ValueError):
            BoundedEntityCache(capacity)

    def test_put_callback_sees_every_put(self):
        puts = []
        cache = BoundedEntityCache(1, on_put=puts.append)
        cache.put(1, "a")
        cache.put(1, "b")
        cache.put(2, "c")

        assert puts == [1, 1, 2]

    def test_failing_callback_does_not_break_cache(self):
        def boom(key):
            raise RuntimeError("instrumentation down")

        cache = BoundedEntityCache(1, on_put=boom, on_evict=boom)
        cache.put(1, "a")
        cache.put(2, "b")

        assert cache.keys() == [2]

    def test_holds_most_recently_inserted_keys(self):
        rng = random.Random(1234)
        capacity = 5
        cache = BoundedEntityCache(capacity)
        expected = []
        for _ in range(200):
            key = rng.randint(0, 20)
            if key not in expected:
                expected.append(key)
                if len(expected) > capacity:
                    expected.pop(0)
            cache.put(key, key)

            assert cache.keys() == expected

    def test_stats(self):
        cache = BoundedEntityCache(1, name="book")
        cache.put(1, "a")
        cache.get(1)
        cache.get(2)
        cache.put(2, "b")

        assert cache.stats() == {
            "size": 1,
            "capacity": 1,
            "hits": 1,
            "misses": 1,
            "puts": 2,
            "evictions": 1,
        }

    def test_concurrent_puts_respect_capacity(self):
        cache = BoundedEntityCache(3)

        def worker(offset):
            for i in range(500):
                cache.put(offset * 1000 + i, i)
                assert cache.size() <= 3

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = cache.stats()
        assert stats["size"] == 3
        assert stats["puts"] == 8 * 500
        assert stats["evictions"] == 8 * 500 - 3
