"""Services module exports."""

from cotador.services.cache import CacheService
from cotador.services.cart import CartItem, CartManager, CartRegistry
from cotador.services.catalog import CatalogOptimizer, CatalogSnapshot
from cotador.services.rate_limit import RateLimitConfig, RateLimitResult, RateLimitService
from cotador.services.regions import PricingRegion, normalize_region

__all__ = [
    # Cache
    "CacheService",
    # Cart
    "CartItem",
    "CartManager",
    "CartRegistry",
    # Catalog
    "CatalogOptimizer",
    "CatalogSnapshot",
    # Rate Limiting
    "RateLimitConfig",
    "RateLimitResult",
    "RateLimitService",
    # Regions
    "PricingRegion",
    "normalize_region",
]
