"""
Fixed-capacity, insertion-ordered cache with FIFO eviction.

``BoundedEntityCache`` keeps at most ``capacity`` entries.  When a new
key pushes the size over the limit, the entry that was inserted first
is dropped.  Reads never change that order (this is FIFO, not LRU) and
replacing the value of a present key keeps the key where it was.

Every instance owns one lock; ``get``, ``put`` (including its eviction
check) and ``remove`` are atomic with respect to each other.  The
``on_put`` and ``on_evict`` callbacks are instrumentation only.  They
run after the lock has been released and an exception raised by a
callback is logged, never propagated.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, Dict, Generic, Hashable, List, Optional, TypeVar

from .entry import CacheEntry

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = logging.getLogger(__name__)


class BoundedEntityCache(Generic[K, V]):
    """Thread-safe bounded key/value cache with FIFO-on-overflow eviction."""

    def __init__(
        self,
        capacity: int,
        name: str = "cache",
        on_put: Optional[Callable[[K], None]] = None,
        on_evict: Optional[Callable[[K], None]] = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._name = name
        self._on_put = on_put
        self._on_evict = on_evict
        self._entries: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._puts = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def name(self) -> str:
        return self._name

    def get(self, key: K) -> Optional[V]:
        """Return the cached value for ``key`` or ``None``."""
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def get_entry(self, key: K) -> Optional[CacheEntry[V]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
            else:
                self._hits += 1
            return entry

    def put(self, key: K, value: V) -> None:
        """Insert or replace ``key``; evict the oldest entry on overflow."""
        evicted: Optional[K] = None
        with self._lock:
            is_new = key not in self._entries
            # Assigning to an existing key keeps its position in the OrderedDict
            self._entries[key] = CacheEntry(value)
            self._puts += 1
            if is_new and len(self._entries) > self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
        self._notify(self._on_put, key)
        if evicted is not None:
            self._notify(self._on_evict, evicted)

    def remove(self, key: K) -> None:
        """Drop ``key`` if present; no-op otherwise."""
        with self._lock:
            self._entries.pop(key, None)

    def contains(self, key: K) -> bool:
        with self._lock:
            return key in self._entries

    def __contains__(self, key: object) -> bool:
        return self.contains(key)  # type: ignore[arg-type]

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def keys(self) -> List[K]:
        """Snapshot of present keys, oldest-inserted first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "size": len(self._entries),
                "capacity": self._capacity,
                "hits": self._hits,
                "misses": self._misses,
                "puts": self._puts,
                "evictions": self._evictions,
            }

    def _notify(self, callback: Optional[Callable[[K], None]], key: K) -> None:
        if callback is None:
            return
        try:
            callback(key)
        except Exception:
            logger.exception("Cache callback failed for %s key %r", self._name, key)

    def __repr__(self) -> str:
        return f"BoundedEntityCache(name={self._name!r}, capacity={self._capacity}, size={self.size()})"
