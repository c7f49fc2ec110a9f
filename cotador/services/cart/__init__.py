"""Quote cart with region-aware re-pricing."""

from cotador.services.cart.manager import (
    CART_STORAGE_KEY,
    CartManager,
    CartRegistry,
    PriceLookup,
)
from cotador.services.cart.models import CartItem, ItemKind
from cotador.services.cart.storage import CartStorage, InMemoryCartStorage, JsonFileCartStorage

__all__ = [
    "CART_STORAGE_KEY",
    "CartItem",
    "CartManager",
    "CartRegistry",
    "CartStorage",
    "InMemoryCartStorage",
    "ItemKind",
    "JsonFileCartStorage",
    "PriceLookup",
]
