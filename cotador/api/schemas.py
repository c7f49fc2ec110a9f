"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from cotador.db.models import CatalogItem
from cotador.services.cart import CartItem, ItemKind


# ============================================================
# Authentication Schemas
# ============================================================

class UserLogin(BaseModel):
    """Schema for vendor login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Schema for vendor data in responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    role: str | None = None
    region: str | None = None
    pricing_region: str


class TokenResponse(BaseModel):
    """Schema for authentication token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token expiration time in seconds")
    user: UserResponse


# ============================================================
# Catalog Schemas
# ============================================================

class CatalogResponse(BaseModel):
    """Full catalog projection."""

    items: list[CatalogItem]
    capacities: list[str]
    models: list[str]
    unindexed_ids: list[int] = []
    from_cache: bool
    load_time_ms: float | None = None
    error: str | None = None


class CatalogItemsResponse(BaseModel):
    items: list[CatalogItem]
    count: int


class CapacitiesResponse(BaseModel):
    capacities: list[str]


# ============================================================
# Cart Schemas
# ============================================================

class CartItemCreate(BaseModel):
    """Schema for adding a cart line; extra fields are stored with the item."""

    model_config = ConfigDict(extra="allow")

    id: int
    kind: ItemKind
    name: str | None = None
    unit_price: Decimal | None = None
    quantity: int = Field(default=1, ge=1)


class QuantityUpdate(BaseModel):
    quantity: int = Field(..., description="Zero or less removes the line")


class TaxRegistrationUpdate(BaseModel):
    customer_has_tax_registration: bool
    current_step: int = Field(default=1, ge=1)


class RecalculateRequest(BaseModel):
    current_step: int = Field(default=1, ge=1)
    payment_context: dict[str, Any] | None = None


class CartResponse(BaseModel):
    """Cart contents with derived totals."""

    items: list[CartItem]
    total: Decimal
    item_count: int
    has_equipment: bool
    customer_has_tax_registration: bool
    pricing_region: str


class RecalculateResponse(CartResponse):
    updated: bool


# ============================================================
# Region Schemas
# ============================================================

class RegionPrice(BaseModel):
    region: str
    label: str
    price: Decimal


class CranePricesResponse(BaseModel):
    item_id: int
    prices: list[RegionPrice]


class RegionInfo(BaseModel):
    code: str
    label: str
    states: list[str]


class NormalizedRegion(BaseModel):
    label: str | None
    has_tax_registration: bool
    region: str
    region_label: str
    dual_tax: bool


# ============================================================
# Health Schemas
# ============================================================

class ServiceHealth(BaseModel):
    """Schema for individual service health."""

    status: str
    latency_ms: float | None = None
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Schema for health check response."""

    status: str
    timestamp: datetime
    version: str
    services: dict[str, ServiceHealth]
