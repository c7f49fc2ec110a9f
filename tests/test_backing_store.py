"""Tests for the backing store REST client, using httpx.MockTransport."""

from decimal import Decimal

import httpx
import pytest

from cotador.core.config import Settings
from cotador.core.exceptions import BackingStoreError
from cotador.db.client import BackingStoreClient

CRANE_ROW = {
    "id": 1,
    "subgrupo": "Guindaste GSI 6.5 3h1m",
    "modelo": "GSI 6.5",
    "peso_kg": 1250,
    "configuração": "3h1m",
    "tem_contr": True,
    "imagens_adicionais": ["a.png"],
}


def _client(handler) -> tuple[BackingStoreClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = BackingStoreClient(
        "https://store.test/rest/v1",
        "anon-key",
        transport=httpx.MockTransport(_record),
    )
    return client, seen


class TestFetchCatalog:
    async def test_paginated_request(self):
        client, seen = _client(lambda r: httpx.Response(
            200, json=[CRANE_ROW], headers={"Content-Range": "24-47/350"}
        ))

        page = await client.fetch_catalog(page=2, page_size=24)

        request = seen[0]
        assert request.url.path == "/rest/v1/guindastes"
        assert request.url.params["order"] == "subgrupo"
        assert request.headers["Range"] == "24-47"
        assert request.headers["Prefer"] == "count=exact"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"
        assert page.count == 350
        assert page.data[0].name == "Guindaste GSI 6.5 3h1m"
        assert page.data[0].weight_kg == "1250"
        assert page.data[0].configuration == "3h1m"

    async def test_no_pagination_counts_rows(self):
        client, seen = _client(lambda r: httpx.Response(200, json=[CRANE_ROW, {**CRANE_ROW, "id": 2}]))

        page = await client.fetch_catalog(no_pagination=True)

        assert "Range" not in seen[0].headers
        assert page.count == 2

    async def test_missing_content_range_falls_back_to_row_count(self):
        client, _ = _client(lambda r: httpx.Response(200, json=[CRANE_ROW]))
        page = await client.fetch_catalog()
        assert page.count == 1

    async def test_query_selects_full_rows_ordered_by_name(self):
        client, seen = _client(lambda r: httpx.Response(200, json=[]))
        await client.fetch_catalog(no_pagination=True)
        params = seen[0].url.params
        assert params["order"] == "subgrupo"
        assert params["select"].startswith("id,subgrupo,modelo,")
        assert "or" not in params

    async def test_http_error_raises_backing_store_error(self):
        client, _ = _client(lambda r: httpx.Response(500, json={"message": "boom"}))
        with pytest.raises(BackingStoreError) as exc_info:
            await client.fetch_catalog()
        assert exc_info.value.details == {"operation": "fetch_catalog"}

    async def test_transport_error_raises_backing_store_error(self):
        def _fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client, _ = _client(_fail)
        with pytest.raises(BackingStoreError):
            await client.fetch_catalog()

    async def test_unexpected_shape(self):
        client, _ = _client(lambda r: httpx.Response(200, json={"rows": []}))
        with pytest.raises(BackingStoreError, match="Unexpected response shape"):
            await client.fetch_catalog()


class TestRegionPrices:
    async def test_price_lookup_query(self):
        client, seen = _client(lambda r: httpx.Response(200, json=[{"preco": 120.5}]))

        price = await client.get_region_price(1, "rs-sem-ie")

        params = seen[0].url.params
        assert seen[0].url.path == "/rest/v1/precos_guindaste_regiao"
        assert params["guindaste_id"] == "eq.1"
        assert params["regiao"] == "eq.rs-sem-ie"
        assert params["limit"] == "1"
        assert price == Decimal("120.5")

    async def test_no_price_is_none(self):
        client, _ = _client(lambda r: httpx.Response(200, json=[]))
        assert await client.get_region_price(1, "norte-nordeste") is None

    async def test_null_price_is_none(self):
        client, _ = _client(lambda r: httpx.Response(200, json=[{"preco": None}]))
        assert await client.get_region_price(1, "norte-nordeste") is None

    async def test_all_prices(self):
        client, _ = _client(lambda r: httpx.Response(200, json=[
            {"regiao": "rs-com-ie", "preco": "100"},
            {"regiao": "rs-sem-ie", "preco": "120"},
            {"regiao": "norte-nordeste", "preco": None},
        ]))
        assert await client.get_region_prices(1) == {
            "rs-com-ie": Decimal("100"),
            "rs-sem-ie": Decimal("120"),
        }


class TestVendors:
    async def test_get_user_by_email(self):
        client, seen = _client(lambda r: httpx.Response(200, json=[{
            "id": 3, "nome": "Ana", "email": "ana@x.com", "tipo": "vendedor",
            "regiao": "Norte", "senha": "hash",
        }]))

        user = await client.get_user_by_email("ana@x.com")

        assert seen[0].url.params["email"] == "eq.ana@x.com"
        assert user.region == "Norte"
        assert user.password_hash == "hash"
        assert "password_hash" not in user.model_dump()

    async def test_unknown_user(self):
        client, _ = _client(lambda r: httpx.Response(200, json=[]))
        assert await client.get_user(42) is None


class TestLifecycle:
    async def test_health_check(self):
        client, _ = _client(lambda r: httpx.Response(200, json=[{"id": 1}]))
        assert await client.check_health() is True

    async def test_health_check_failure(self):
        client, _ = _client(lambda r: httpx.Response(503))
        assert await client.check_health() is False

    async def test_client_reused_and_closed(self):
        client, _ = _client(lambda r: httpx.Response(200, json=[]))
        first = await client._get_client()
        assert await client._get_client() is first
        await client.close()
        assert client._client is None

    def test_from_settings(self):
        settings = Settings(backing_store_url="https://x.supabase.co", backing_store_key="k")
        client = BackingStoreClient.from_settings(settings)
        assert client._base_url == "https://x.supabase.co/rest/v1"
