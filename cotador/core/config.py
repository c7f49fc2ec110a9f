"""Application configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults for development.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_JWT_SECRET = "CHANGE-THIS-IN-PRODUCTION-USE-SECRETS-TOKEN"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========== Backing store (Supabase REST) ==========
    backing_store_url: str = Field(default="", description="Supabase project URL")
    backing_store_key: str = Field(default="", description="Supabase API key")
    backing_store_timeout: float = Field(default=10.0, gt=0, le=60)

    # ========== Authentication ==========
    jwt_secret_key: str = Field(
        default=PLACEHOLDER_JWT_SECRET,
        min_length=32,
        description="JWT signing secret key",
    )
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    jwt_access_token_expire_days: int = Field(default=1, ge=1, le=30)

    # ========== In-memory cache ==========
    cache_default_ttl_seconds: float = Field(default=300, gt=0)
    cache_cleanup_interval_seconds: float = Field(default=120, gt=0)
    catalog_ttl_seconds: float = Field(default=300, gt=0)
    catalog_page_size: int = Field(default=200, ge=1, le=1000)
    catalog_preload: bool = Field(default=False, description="Load the catalog on startup")

    # ========== Login rate limiting ==========
    login_rate_limit_enabled: bool = Field(default=True)
    login_max_attempts: int = Field(default=5, ge=1)
    login_window_seconds: float = Field(default=15 * 60, gt=0)
    login_block_seconds: float = Field(default=15 * 60, gt=0)

    # ========== Cart storage ==========
    cart_storage_dir: str = Field(default=".carts", description="Directory for persisted carts")

    # ========== CORS ==========
    cors_origins_str: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        alias="CORS_ORIGINS",
        description="Comma-separated CORS origins",
    )

    # ========== Application ==========
    app_name: str = "Cotador Guindastes"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @model_validator(mode="after")
    def _reject_placeholder_secret(self) -> "Settings":
        if self.environment == "production" and self.jwt_secret_key == PLACEHOLDER_JWT_SECRET:
            raise ValueError("jwt_secret_key must be changed in production")
        return self

    # ========== Computed Properties ==========
    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @computed_field
    @property
    def backing_store_available(self) -> bool:
        """Check if backing store credentials are configured."""
        return bool(self.backing_store_url and self.backing_store_key)

    @computed_field
    @property
    def rest_url(self) -> str:
        """Base URL of the PostgREST endpoint."""
        return f"{self.backing_store_url.rstrip('/')}/rest/v1"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
