"""API dependencies for FastAPI routes.

Service instances are created by ``create_app`` and stored on ``app.state``;
these dependencies hand them to route handlers.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cotador.core.logging import bind_vendor_context
from cotador.core.security import decode_access_token
from cotador.db import BackingStoreClient, VendorRecord
from cotador.services.cache import CacheService
from cotador.services.cart import CartManager, CartRegistry
from cotador.services.catalog import CatalogOptimizer
from cotador.services.rate_limit import RateLimitService

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache


def get_store(request: Request) -> BackingStoreClient:
    return request.app.state.store


def get_rate_limiter(request: Request) -> RateLimitService:
    return request.app.state.rate_limiter


def get_catalog(request: Request) -> CatalogOptimizer:
    return request.app.state.catalog


def get_cart_registry(request: Request) -> CartRegistry:
    return request.app.state.carts


def get_client_ip(request: Request) -> str:
    """Client address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[BackingStoreClient, Depends(get_store)],
    cache: Annotated[CacheService, Depends(get_cache)],
) -> VendorRecord:
    """Get the current vendor from the JWT token.

    Uses the cache-aside pattern to reduce backing store lookups.

    Raises:
        HTTPException: If authentication fails
    """
    if not credentials:
        raise _unauthorized("Authentication required")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    user_id_str = payload.get("sub")
    if not user_id_str:
        raise _unauthorized("Invalid token payload")

    try:
        user_id = int(user_id_str)
    except (ValueError, TypeError):
        raise _unauthorized("Invalid user identifier")

    bind_vendor_context(user_id)

    cached_user = cache.get_user_data(user_id)
    if cached_user:
        return VendorRecord.model_validate(cached_user)

    user = await store.get_user(user_id)
    if not user:
        raise _unauthorized("User not found")

    cache.set_user_data(user_id, user.model_dump())
    return user


def get_cart(
    user: Annotated[VendorRecord, Depends(get_current_user)],
    carts: Annotated[CartRegistry, Depends(get_cart_registry)],
) -> CartManager:
    """Cart of the authenticated vendor."""
    return carts.get(user)


# Type aliases for cleaner route signatures
CurrentUser = Annotated[VendorRecord, Depends(get_current_user)]
Cache = Annotated[CacheService, Depends(get_cache)]
Store = Annotated[BackingStoreClient, Depends(get_store)]
RateLimiter = Annotated[RateLimitService, Depends(get_rate_limiter)]
Catalog = Annotated[CatalogOptimizer, Depends(get_catalog)]
Cart = Annotated[CartManager, Depends(get_cart)]
ClientIP = Annotated[str, Depends(get_client_ip)]
