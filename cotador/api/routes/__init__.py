"""Routes module exports."""

from cotador.api.routes.auth import router as auth_router
from cotador.api.routes.cart import router as cart_router
from cotador.api.routes.catalog import router as catalog_router
from cotador.api.routes.health import router as health_router
from cotador.api.routes.regions import router as regions_router

__all__ = [
    "auth_router",
    "cart_router",
    "catalog_router",
    "health_router",
    "regions_router",
]
