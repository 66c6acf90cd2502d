"""Immutable cache entry."""

import time
from dataclasses import dataclass, field
from typing import Generic, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value paired with the moment it was inserted.

    Entries are never mutated: updating a key replaces its entry.
    ``inserted_at`` is a wall-clock timestamp in seconds and is kept for
    diagnostics only; eviction order is the insertion order of keys.
    """

    value: V
    inserted_at: float = field(default_factory=time.time)
