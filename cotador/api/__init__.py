"""API module exports."""

from cotador.api.deps import Cart, CurrentUser
from cotador.api.routes import (
    auth_router,
    cart_router,
    catalog_router,
    health_router,
    regions_router,
)

__all__ = [
    # Routers
    "auth_router",
    "cart_router",
    "catalog_router",
    "health_router",
    "regions_router",
    # Dependencies
    "Cart",
    "CurrentUser",
]
