"""FastAPI application entry point."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.gzip import GZipMiddleware

from cotador.api import (
    auth_router,
    cart_router,
    catalog_router,
    health_router,
    regions_router,
)
from cotador.core.config import Settings, get_settings
from cotador.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)
from cotador.core.logging import get_logger, setup_logging
from cotador.core.tasks import create_background_task, run_periodically
from cotador.db import BackingStoreClient
from cotador.services.cache import CacheService
from cotador.services.cart import CartRegistry, CartStorage, JsonFileCartStorage
from cotador.services.catalog import CatalogOptimizer
from cotador.services.rate_limit import RateLimitService

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events.

    Startup:
    - Start the periodic cache and rate-limit sweepers
    - Optionally preload the crane catalog

    Shutdown:
    - Stop the sweepers
    - Close the backing store HTTP client
    """
    settings: Settings = app.state.settings

    logger.info(
        "Starting application",
        app_name=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        backing_store=settings.backing_store_available,
    )

    cache: CacheService = app.state.cache
    sweeper = create_background_task(
        run_periodically(
            cache.cleanup,
            settings.cache_cleanup_interval_seconds,
            name="cache-cleanup",
        ),
        name="cache-cleanup",
    )
    limiter: RateLimitService = app.state.rate_limiter
    limiter_sweeper = create_background_task(
        run_periodically(
            limiter.cleanup,
            settings.cache_cleanup_interval_seconds,
            name="rate-limit-cleanup",
        ),
        name="rate-limit-cleanup",
    )

    if settings.catalog_preload:
        snapshot = await app.state.catalog.preload()
        logger.info("Catalog preloaded", items=len(snapshot.items), error=snapshot.error)

    yield

    logger.info("Shutting down application")

    for task in (sweeper, limiter_sweeper):
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    await app.state.store.close()
    logger.info("Backing store connections closed")


def create_app(
    settings: Settings | None = None,
    *,
    store: BackingStoreClient | None = None,
    cart_storage: CartStorage | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Every stateful service is built here and attached to ``app.state``;
    tests pass their own settings, store and cart storage.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Crane quoting API with cached catalog and regional pricing",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    store = store or BackingStoreClient.from_settings(settings)
    cache = CacheService(default_ttl=settings.cache_default_ttl_seconds)

    app.state.settings = settings
    app.state.store = store
    app.state.cache = cache
    app.state.rate_limiter = RateLimitService.from_settings(settings)
    app.state.catalog = CatalogOptimizer(
        store,
        cache,
        ttl=settings.catalog_ttl_seconds,
        page_size=settings.catalog_page_size,
    )
    app.state.carts = CartRegistry(
        store, cart_storage or JsonFileCartStorage(settings.cart_storage_dir)
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["Retry-After"],
    )

    class SecurityHeadersMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Any, call_next: Any) -> Any:
            response = await call_next(request)
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            if not settings.debug:
                response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
            return response

    app.add_middleware(SecurityHeadersMiddleware)

    # GZip compression for responses (the catalog payload is large)
    app.add_middleware(GZipMiddleware, minimum_size=500)

    # Register exception handlers
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(catalog_router, prefix="/api/v1")
    app.include_router(cart_router, prefix="/api/v1")
    app.include_router(regions_router, prefix="/api/v1")

    return app


# Create application instance
app = create_app()
