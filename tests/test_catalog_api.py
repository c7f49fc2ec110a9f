"""Catalog API endpoint tests."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from tests.conftest import FakeBackingStore

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/catalog"


@pytest.mark.parametrize("endpoint", [
    BASE,
    f"{BASE}/capacities",
    f"{BASE}/capacities/6.5",
    f"{BASE}/models/GSI 6.5",
    f"{BASE}/search?q=gsi",
    f"{BASE}/items/1",
    f"{BASE}/items/1/prices",
])
async def test_catalog_requires_auth(client: AsyncClient, endpoint: str):
    resp = await client.get(endpoint)
    assert resp.status_code == 401


async def test_full_catalog(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(BASE, headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["items"]) == 3
    assert data["items"][0]["subgrupo"] == "Guindaste GSI 6.5 3h1m"
    assert data["capacities"] == ["6.5", "8.0"]
    assert data["models"] == ["GSE 8.0", "GSI 6.5"]
    assert data["from_cache"] is False
    assert data["error"] is None


async def test_second_request_served_from_cache(
    client: AsyncClient, auth_headers: dict[str, str], fake_store: FakeBackingStore
):
    await client.get(BASE, headers=auth_headers)
    resp = await client.get(BASE, headers=auth_headers)
    assert resp.json()["from_cache"] is True
    assert fake_store.fetch_calls == 1


async def test_refresh_refetches(
    client: AsyncClient, auth_headers: dict[str, str], fake_store: FakeBackingStore
):
    await client.get(BASE, headers=auth_headers)
    resp = await client.post(f"{BASE}/refresh", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["from_cache"] is False
    assert fake_store.fetch_calls == 2


async def test_store_failure_returns_error_field(
    client: AsyncClient, auth_headers: dict[str, str], fake_store: FakeBackingStore
):
    fake_store.fail_catalog = True
    resp = await client.get(BASE, headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["items"] == []
    assert "connection refused" in data["error"]


async def test_capacities(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/capacities", headers=auth_headers)
    assert resp.json() == {"capacities": ["6.5", "8.0"]}


async def test_by_capacity(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/capacities/6.5", headers=auth_headers)
    data = resp.json()
    assert data["count"] == 2
    assert [i["id"] for i in data["items"]] == [1, 3]


async def test_by_capacity_one_per_model(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/capacities/6.5?one_per_model=true", headers=auth_headers)
    assert [i["id"] for i in resp.json()["items"]] == [1]


async def test_by_model(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/models/GSE 8.0", headers=auth_headers)
    assert [i["id"] for i in resp.json()["items"]] == [2]


async def test_search(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/search", params={"q": "gse"}, headers=auth_headers)
    assert resp.json()["count"] == 1


async def test_item_detail(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/items/2", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["modelo"] == "GSE 8.0"


async def test_item_not_found(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/items/99", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Crane not found"


async def test_crane_prices_by_region(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/items/1/prices", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["item_id"] == 1
    assert [(p["region"], Decimal(p["price"])) for p in data["prices"]] == [
        ("sul-sudeste", Decimal("95")),
        ("rs-com-ie", Decimal("100")),
        ("rs-sem-ie", Decimal("120")),
    ]
    assert data["prices"][2]["label"] == "Rio Grande do Sul (Sem IE)"


async def test_crane_prices_unknown_crane(client: AsyncClient, auth_headers: dict[str, str]):
    resp = await client.get(f"{BASE}/items/99/prices", headers=auth_headers)
    assert resp.status_code == 404
