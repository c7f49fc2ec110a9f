"""Base cache operations - in-memory TTL primitives."""

import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from cotador.core.logging import get_logger
from cotador.services.cache.constants import TTL_DEFAULT

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and its lifetime."""

    value: T
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class BaseCacheOperations:
    """Key/value store where every entry expires after its TTL.

    Memory is bounded by TTL alone: there is no size limit or LRU eviction.
    Expired entries are dropped lazily on read and actively by ``cleanup``.
    """

    def __init__(
        self,
        default_ttl: float = TTL_DEFAULT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._default_ttl = default_ttl
        self._clock = clock

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def make_key(self, name: str, params: dict[str, Any] | None = None) -> str:
        """Build a cache key from a logical name and query parameters.

        Parameters are serialized with sorted keys, so equal parameter sets
        always produce the same key whatever their insertion order.
        """
        serialized = json.dumps(params or {}, sort_keys=True, default=str)
        return f"{name}:{serialized}"

    # ========== Primitive operations ==========

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value, replacing any existing entry for ``key``."""
        now = self._clock()
        self._entries[key] = CacheEntry(
            value=value,
            created_at=now,
            expires_at=now + (ttl if ttl is not None else self._default_ttl),
        )

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None

        return entry.value

    def has(self, key: str) -> bool:
        """Check whether a live entry exists for ``key``."""
        return self.get(key) is not None

    def invalidate(self, key: str) -> None:
        """Drop a single entry."""
        self._entries.pop(key, None)

    def invalidate_pattern(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.debug("Cache entries invalidated", prefix=prefix, count=len(keys))
        return len(keys)

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def cleanup(self) -> int:
        """Remove all expired entries and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Cache cleanup", removed=len(expired))
        return len(expired)

    def stats(self) -> dict[str, int]:
        """Count total, live and expired entries."""
        now = self._clock()
        expired = sum(1 for entry in self._entries.values() if entry.is_expired(now))
        return {
            "total": len(self._entries),
            "valid": len(self._entries) - expired,
            "expired": expired,
        }

    # ========== Read-through helper ==========

    async def cached(
        self,
        fetch: Callable[[], Awaitable[T]],
        name: str,
        params: dict[str, Any] | None = None,
        ttl: float | None = None,
    ) -> T:
        """Return the cached result for ``name``/``params`` or fetch and store it."""
        key = self.make_key(name, params)
        hit = self.get(key)
        if hit is not None:
            logger.debug("Cache hit", key=key)
            return hit  # type: ignore[no-any-return]

        logger.debug("Cache miss", key=key)
        result = await fetch()
        self.set(key, result, ttl)
        return result
