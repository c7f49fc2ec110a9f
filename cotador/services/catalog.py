"""Catalog optimizer: cached crane projection with capacity/model indexes.

The catalog is loaded in bulk from the backing store, kept in the TTL cache
and indexed by the capacity and model parsed from each crane's descriptive
name (e.g. "Guindaste GSI 6.5 3h1m" -> model "GSI 6.5", capacity "6.5").
Indexes live in the same immutable projection as the items they index, so a
reader can never pair fresh items with stale indexes.
"""

import re
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Protocol

from cotador.core.logging import get_logger
from cotador.db.models import CatalogItem, CatalogPage
from cotador.services.cache import KEY_PREFIX_CATALOG, TTL_CATALOG, BaseCacheOperations

logger = get_logger(__name__)

MAX_CAPACITIES = 20

_LEADING_PREFIX = re.compile(r"^(?:guindaste\b\s*)+", re.IGNORECASE)
_NUMBER = re.compile(r"\d+(?:\.\d+)?")


class CatalogSource(Protocol):
    async def fetch_catalog(
        self, page: int = 1, page_size: int = 24, *, no_pagination: bool = False
    ) -> CatalogPage: ...


class EmptyCatalogError(Exception):
    """The backing store returned no cranes."""


# ========== Name parsing ==========


def reduce_name(name: str | None) -> str | None:
    """Strip leading "Guindaste" tokens and keep the first two words.

    Limiting the search to two words keeps numbers that appear later in the
    description (chart codes, boom lengths) from being read as capacity.
    """
    if not name:
        return None
    tokens = _LEADING_PREFIX.sub("", name.strip()).split()
    return " ".join(tokens[:2]) or None


def extract_capacity(name: str | None) -> str | None:
    """Capacity token of a descriptive name, or None when there is no number."""
    reduced = reduce_name(name)
    if reduced is None:
        return None
    match = _NUMBER.search(reduced)
    return match.group(0) if match else None


def extract_model(name: str | None) -> str | None:
    """Model key of a descriptive name: its two-word reduction."""
    return reduce_name(name)


# ========== Projection ==========


@dataclass(frozen=True)
class CatalogSnapshot:
    """Result of a catalog load."""

    items: tuple[CatalogItem, ...] = ()
    capacity_index: Mapping[str, tuple[CatalogItem, ...]] = field(default_factory=dict)
    model_index: Mapping[str, tuple[CatalogItem, ...]] = field(default_factory=dict)
    unindexed_ids: tuple[int, ...] = ()
    from_cache: bool = False
    load_time_ms: float | None = None
    error: str | None = None


def build_snapshot(items: list[CatalogItem]) -> CatalogSnapshot:
    """Derive capacity and model indexes from a list of cranes.

    Cranes whose reduced name carries no number go in neither index and are
    reported in ``unindexed_ids``.
    """
    by_capacity: dict[str, list[CatalogItem]] = {}
    by_model: dict[str, list[CatalogItem]] = {}
    unindexed: list[int] = []

    for item in items:
        capacity = extract_capacity(item.name)
        model = extract_model(item.name)
        if capacity is None or model is None:
            unindexed.append(item.id)
            continue
        by_capacity.setdefault(capacity, []).append(item)
        by_model.setdefault(model, []).append(item)

    if unindexed:
        logger.warning(
            "Catalog items without capacity in name",
            count=len(unindexed),
            item_ids=unindexed,
        )

    return CatalogSnapshot(
        items=tuple(items),
        capacity_index={k: tuple(v) for k, v in by_capacity.items()},
        model_index={k: tuple(v) for k, v in by_model.items()},
        unindexed_ids=tuple(unindexed),
    )


class CatalogOptimizer:
    """Read-through cache of the crane catalog and its derived indexes."""

    def __init__(
        self,
        source: CatalogSource,
        cache: BaseCacheOperations,
        *,
        ttl: float = TTL_CATALOG,
        page_size: int = 200,
    ) -> None:
        self._source = source
        self._cache = cache
        self._ttl = ttl
        self._page_size = page_size
        self._cache_key = cache.make_key(
            KEY_PREFIX_CATALOG,
            {"page": 1, "page_size": page_size, "no_pagination": True},
        )
        # Last good projection, kept past its TTL for the failure fallback
        self._last: CatalogSnapshot | None = None

    async def load(self, force_refresh: bool = False) -> CatalogSnapshot:
        """Return the catalog, from cache when possible.

        A failed fetch falls back to the last projection held in memory, even
        an expired one, with ``error`` set. Nothing is raised.
        """
        if not force_refresh:
            cached = self._cache.get(self._cache_key)
            if isinstance(cached, CatalogSnapshot):
                logger.debug("Catalog served from cache", items=len(cached.items))
                self._last = cached
                return _with(cached, from_cache=True)

        self._cache.invalidate_pattern(f"{KEY_PREFIX_CATALOG}:")
        started = time.perf_counter()

        try:
            page = await self._source.fetch_catalog(
                page=1, page_size=self._page_size, no_pagination=True
            )
            if not page.data:
                raise EmptyCatalogError("No cranes found")
        except Exception as e:
            logger.error("Catalog load failed", error=str(e))
            if self._last is not None:
                logger.warning("Serving stale catalog after load failure")
                return _with(self._last, from_cache=True, error=str(e))
            return CatalogSnapshot(error=str(e))

        snapshot = build_snapshot(page.data)
        self._cache.set(self._cache_key, snapshot, self._ttl)
        self._last = snapshot

        load_time_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "Catalog loaded",
            items=len(snapshot.items),
            capacities=len(snapshot.capacity_index),
            models=len(snapshot.model_index),
            load_time_ms=load_time_ms,
        )
        return _with(snapshot, from_cache=False, load_time_ms=load_time_ms)

    async def preload(self) -> CatalogSnapshot:
        """Warm the cache; used at application startup."""
        return await self.load()

    # ========== Lookups on the last projection ==========

    def get_by_capacity(self, capacity: str) -> list[CatalogItem]:
        if self._last is None:
            return []
        return list(self._last.capacity_index.get(capacity, ()))

    def get_by_model(self, model: str) -> list[CatalogItem]:
        if self._last is None:
            return []
        return list(self._last.model_index.get(model, ()))

    def get_capacities(self) -> list[str]:
        """Distinct capacities in ascending numeric order."""
        if self._last is None:
            return []
        return sorted(self._last.capacity_index, key=float)[:MAX_CAPACITIES]

    def get_models_by_capacity(self, capacity: str) -> list[CatalogItem]:
        """One representative crane per model of the given capacity."""
        if self._last is None:
            return []
        return [
            items[0]
            for model, items in sorted(self._last.model_index.items())
            if extract_capacity(model) == capacity
        ]

    def get_by_id(self, item_id: int) -> CatalogItem | None:
        if self._last is None:
            return None
        return next((item for item in self._last.items if item.id == item_id), None)

    def search(self, term: str) -> list[CatalogItem]:
        """Case-insensitive match on name, model and reference code."""
        if self._last is None:
            return []
        needle = term.strip().lower()
        if not needle:
            return list(self._last.items)
        return [
            item
            for item in self._last.items
            if any(
                needle in value.lower()
                for value in (item.name, item.model, item.reference_code)
                if value
            )
        ]

    def clear(self) -> None:
        """Drop the cached and in-memory projections."""
        self._cache.invalidate_pattern(f"{KEY_PREFIX_CATALOG}:")
        self._last = None
        logger.info("Catalog cache cleared")

    def stats(self) -> dict[str, object]:
        last = self._last
        return {
            "loaded": last is not None,
            "valid": self._cache.has(self._cache_key),
            "items": len(last.items) if last else 0,
            "capacities": len(last.capacity_index) if last else 0,
            "models": len(last.model_index) if last else 0,
            "unindexed": len(last.unindexed_ids) if last else 0,
        }


def _with(snapshot: CatalogSnapshot, **changes: object) -> CatalogSnapshot:
    """Copy of a snapshot with load metadata replaced."""
    metadata: dict[str, object] = {"from_cache": False, "load_time_ms": None, "error": None}
    metadata.update(changes)
    return replace(snapshot, **metadata)  # type: ignore[arg-type]
