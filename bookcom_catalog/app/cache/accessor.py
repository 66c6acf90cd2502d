"""
Cache-aside access to one entity kind.

``CacheAsideAccessor`` combines a store with the cache of the same
entity kind:

* ``find_by_id`` reads through: a hit is returned as is, a miss goes to
  the store and populates the cache only when the entity exists;
* ``save`` writes through: the cache is overwritten with the persisted
  entity after the store confirmed the write;
* ``delete`` deletes from the store, then invalidates the cache entry.

Store calls never run under the cache lock.  If the store raises, the
error propagates unchanged and the cache is left untouched.

Cached values are shared, not copied: ``find_by_id`` returns the very
object held by the cache and ``save`` caches the object the store
returned.  Callers must treat entities obtained here as read-only and
mutate a fresh store copy (``accessor.store.find_by_id``) before saving.
"""

import logging
from typing import Generic, Optional, TypeVar

from ..store.base import EntityStore
from .bounded import BoundedEntityCache

E = TypeVar("E")

logger = logging.getLogger(__name__)


class CacheAsideAccessor(Generic[E]):
    def __init__(self, store: EntityStore[E], cache: BoundedEntityCache[int, E]) -> None:
        self._store = store
        self._cache = cache

    @property
    def store(self) -> EntityStore[E]:
        return self._store

    @property
    def cache(self) -> BoundedEntityCache[int, E]:
        return self._cache

    def find_by_id(self, entity_id: int) -> Optional[E]:
        cached = self._cache.get(entity_id)
        if cached is not None:
            logger.debug("%s %s found in cache", self._cache.name, entity_id)
            return cached
        entity = self._store.find_by_id(entity_id)
        if entity is not None:
            self._cache.put(entity_id, entity)
        return entity

    def save(self, entity: E) -> E:
        saved = self._store.save(entity)
        entity_id = saved.id  # type: ignore[attr-defined]
        self._cache.put(entity_id, saved)
        logger.debug("%s %s saved and cached", self._cache.name, entity_id)
        return saved

    def delete(self, entity_id: int) -> None:
        self._store.delete(entity_id)
        self._cache.remove(entity_id)
        logger.debug("%s %s deleted from store and cache", self._cache.name, entity_id)

    def refresh(self, entity: E) -> None:
        """Put an entity that is already persisted into the cache."""
        self._cache.put(entity.id, entity)  # type: ignore[attr-defined]

    def invalidate(self, entity_id: int) -> None:
        """Drop a cache entry without touching the store."""
        self._cache.remove(entity_id)

    def exists(self, entity_id: int) -> bool:
        """Cheap existence check: cache first, then the store."""
        return entity_id in self._cache or self._store.exists_by_id(entity_id)
