"""Core module exports."""

from cotador.core.config import Settings, get_settings
from cotador.core.exceptions import (
    AppException,
    AuthenticationError,
    BackingStoreError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from cotador.core.logging import get_logger, setup_logging
from cotador.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "setup_logging",
    # Security
    "create_access_token",
    "decode_access_token",
    "get_password_hash",
    "verify_password",
    # Exceptions
    "AppException",
    "AuthenticationError",
    "BackingStoreError",
    "NotFoundError",
    "RateLimitError",
    "ValidationError",
]
