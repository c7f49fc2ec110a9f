"""In-memory TTL caching.

Entries expire after a per-entry TTL; expired entries are evicted lazily on
read and by a periodic sweep. Whole datasets are invalidated by key prefix,
so callers never enumerate exact parameter combinations.
"""

from cotador.services.cache.base import BaseCacheOperations, CacheEntry
from cotador.services.cache.constants import (
    KEY_PREFIX_CATALOG,
    KEY_PREFIX_USER,
    TTL_CATALOG,
    TTL_DEFAULT,
    TTL_USER_DATA,
)
from cotador.services.cache.service import CacheService

__all__ = [
    # TTL constants
    "TTL_DEFAULT",
    "TTL_CATALOG",
    "TTL_USER_DATA",
    # Key prefix constants
    "KEY_PREFIX_CATALOG",
    "KEY_PREFIX_USER",
    # Service
    "BaseCacheOperations",
    "CacheEntry",
    "CacheService",
]
