"""Test configuration and fixtures.

Provides isolated test fixtures for:
- A manual clock driving cache and rate limiter time
- A fake backing store with canned catalog, prices and vendors
- HTTP client over a freshly built application
- Authenticated vendor fixtures
"""

import asyncio
from collections.abc import AsyncGenerator
from decimal import Decimal

import bcrypt
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from cotador.core.config import Settings
from cotador.core.exceptions import BackingStoreError
from cotador.db.models import CatalogItem, CatalogPage, VendorRecord
from cotador.main import create_app
from cotador.services.cache import CacheService
from cotador.services.cart import InMemoryCartStorage

VENDOR_PASSWORD = "senha-do-vendedor"
# Hashed once; bcrypt is slow on purpose
_VENDOR_HASH = bcrypt.hashpw(VENDOR_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()


# =============================================================================
# Test doubles
# =============================================================================

class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def crane(item_id: int, name: str, **extra: object) -> CatalogItem:
    return CatalogItem.model_validate({"id": item_id, "subgrupo": name, **extra})


def vendor_row(
    user_id: int = 1,
    email: str = "vendedor@example.com",
    region: str | None = "Rio Grande do Sul",
) -> dict[str, object]:
    return {
        "id": user_id,
        "nome": f"Vendedor {user_id}",
        "email": email,
        "tipo": "vendedor",
        "regiao": region,
        "senha": _VENDOR_HASH,
    }


class FakeBackingStore:
    """In-memory stand-in for BackingStoreClient.

    ``fail_catalog`` and ``failing_price_ids`` make the corresponding calls
    raise BackingStoreError. ``price_gate``, when set, holds every price
    lookup until the event fires.
    """

    def __init__(self) -> None:
        self.items: list[CatalogItem] = []
        self.prices: dict[tuple[int, str], Decimal] = {}
        self.users: dict[int, VendorRecord] = {}
        self.fail_catalog = False
        self.failing_price_ids: set[int] = set()
        self.price_gate: asyncio.Event | None = None
        self.healthy = True
        self.fetch_calls = 0
        self.price_calls: list[tuple[int, str]] = []
        self.user_calls = 0
        self.closed = False

    def add_user(self, row: dict[str, object]) -> VendorRecord:
        user = VendorRecord.model_validate(row)
        self.users[user.id] = user
        return user

    async def fetch_catalog(
        self, page: int = 1, page_size: int = 24, *, no_pagination: bool = False, **_: object
    ) -> CatalogPage:
        self.fetch_calls += 1
        if self.fail_catalog:
            raise BackingStoreError("connection refused", operation="fetch_catalog")
        return CatalogPage(data=list(self.items), count=len(self.items))

    async def get_region_price(self, item_id: int, region: str) -> Decimal | None:
        self.price_calls.append((item_id, region))
        if self.price_gate is not None:
            await self.price_gate.wait()
        if item_id in self.failing_price_ids:
            raise BackingStoreError("timeout", operation="get_region_price")
        return self.prices.get((item_id, region))

    async def get_region_prices(self, item_id: int) -> dict[str, Decimal]:
        return {region: price for (id_, region), price in self.prices.items() if id_ == item_id}

    async def get_user_by_email(self, email: str) -> VendorRecord | None:
        self.user_calls += 1
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_user(self, user_id: int) -> VendorRecord | None:
        self.user_calls += 1
        return self.users.get(user_id)

    async def check_health(self, timeout: float = 5.0) -> bool:
        return self.healthy

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# Unit fixtures
# =============================================================================

@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> CacheService:
    return CacheService(default_ttl=300, clock=clock)


@pytest.fixture
def fake_store() -> FakeBackingStore:
    store = FakeBackingStore()
    store.items = [
        crane(1, "Guindaste GSI 6.5 3h1m", modelo="GSI 6.5"),
        crane(2, "Guindaste GSE 8.0 4h2m", modelo="GSE 8.0"),
        crane(3, "Guindaste GSI 6.5 2h1m", modelo="GSI 6.5"),
    ]
    store.prices = {
        (1, "rs-com-ie"): Decimal("100"),
        (1, "rs-sem-ie"): Decimal("120"),
        (1, "sul-sudeste"): Decimal("95"),
        (2, "rs-com-ie"): Decimal("200"),
        (2, "rs-sem-ie"): Decimal("230"),
    }
    return store


@pytest.fixture
def cart_storage() -> InMemoryCartStorage:
    return InMemoryCartStorage()


# =============================================================================
# HTTP Client Fixtures
# =============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with safe defaults."""
    return Settings(
        backing_store_url="https://store.test",
        backing_store_key="test-key",
        jwt_secret_key="test-secret-key-for-testing-only-min-32-chars",
        debug=True,
        login_max_attempts=3,
        cart_storage_dir="unused",
    )


@pytest.fixture
def app(
    test_settings: Settings,
    fake_store: FakeBackingStore,
    cart_storage: InMemoryCartStorage,
) -> FastAPI:
    return create_app(test_settings, store=fake_store, cart_storage=cart_storage)  # type: ignore[arg-type]


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client bound to the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# =============================================================================
# Authentication Fixtures
# =============================================================================

@pytest.fixture
def rs_vendor(fake_store: FakeBackingStore) -> VendorRecord:
    """Vendor based in Rio Grande do Sul."""
    return fake_store.add_user(vendor_row())


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient, rs_vendor: VendorRecord) -> dict[str, str]:
    """Get auth headers for the Rio Grande do Sul vendor."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": rs_vendor.email, "password": VENDOR_PASSWORD},
    )

    assert response.status_code == 200, f"Login failed: {response.text}"
    token = response.json()["access_token"]

    return {"Authorization": f"Bearer {token}"}
