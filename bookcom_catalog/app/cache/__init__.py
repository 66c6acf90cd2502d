"""
In-memory caching in front of the stores.

``BoundedEntityCache`` is a fixed-capacity FIFO cache,
``CacheContainer`` holds one per entity kind and ``CacheAsideAccessor``
layers read-through, write-through and invalidation over a store.
"""

from .accessor import CacheAsideAccessor  # noqa: F401
from .bounded import BoundedEntityCache  # noqa: F401
from .container import CacheContainer  # noqa: F401
from .entry import CacheEntry  # noqa: F401
