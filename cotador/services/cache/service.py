"""Main CacheService combining all cache operations."""

from cotador.services.cache.user import UserCacheMixin


class CacheService(UserCacheMixin):
    """In-memory TTL cache shared by the catalog optimizer and auth.

    Combines cache operations through inheritance:
    - BaseCacheOperations: TTL primitives, pattern invalidation, sweeping
    - UserCacheMixin: vendor record caching
    """
