"""Authentication API endpoints."""

from fastapi import APIRouter, HTTPException, status

from cotador.api.deps import Cache, ClientIP, CurrentUser, RateLimiter, Store
from cotador.api.schemas import TokenResponse, UserLogin, UserResponse
from cotador.core.config import get_settings
from cotador.core.exceptions import RateLimitError
from cotador.core.logging import get_logger
from cotador.core.security import create_access_token, verify_password
from cotador.db import VendorRecord
from cotador.services.regions import normalize_region

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _user_response(user: VendorRecord) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        region=user.region,
        pricing_region=normalize_region(user.region).value,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    responses={
        401: {"description": "Invalid credentials"},
        429: {"description": "Too many failed attempts"},
    },
)
async def login(
    credentials: UserLogin,
    store: Store,
    cache: Cache,
    rate_limiter: RateLimiter,
    client_ip: ClientIP,
) -> TokenResponse:
    """
    Authenticate a vendor and return a JWT token.

    - **email**: Registered email address
    - **password**: Vendor password

    Failed attempts are counted per client IP and email; reaching the limit
    blocks further attempts for a while.
    """
    settings = get_settings()

    limit = rate_limiter.check_login_limit(client_ip, credentials.email)
    if not limit.allowed:
        logger.warning(
            "Login blocked",
            email=credentials.email,
            ip=client_ip,
            reason=limit.reason,
        )
        raise RateLimitError(retry_after=rate_limiter.retry_after(limit), reason=limit.reason)

    user = await store.get_user_by_email(credentials.email)
    valid = bool(
        user
        and user.password_hash
        and await verify_password(credentials.password, user.password_hash)
    )
    rate_limiter.record_login_attempt(client_ip, credentials.email, success=valid)

    if not valid or user is None:
        logger.info("Login failed", email=credentials.email, ip=client_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Vendor logged in", user_id=user.id, region=user.region)
    cache.set_user_data(user.id, user.model_dump())

    access_token = create_access_token(data={"sub": str(user.id)})
    expires_in = settings.jwt_access_token_expire_days * 24 * 60 * 60

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=_user_response(user),
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current vendor info",
)
async def get_current_user_info(current_user: CurrentUser) -> UserResponse:
    """Get the currently authenticated vendor's information."""
    return _user_response(current_user)
