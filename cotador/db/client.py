"""Async client for the remote record store (Supabase REST / PostgREST).

Uses a persistent httpx.AsyncClient for connection reuse, created lazily on
first use. Every transport or HTTP failure surfaces as BackingStoreError.
"""

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from cotador.core.config import Settings
from cotador.core.exceptions import BackingStoreError
from cotador.core.logging import get_logger
from cotador.db.models import CatalogItem, CatalogPage, VendorRecord

logger = get_logger(__name__)

CATALOG_TABLE = "guindastes"
PRICES_TABLE = "precos_guindaste_regiao"
USERS_TABLE = "users"

CATALOG_FIELDS = (
    "id,subgrupo,modelo,imagem_url,grafico_carga_url,peso_kg,codigo_referencia,"
    "configuração,tem_contr,descricao,nao_incluido,imagens_adicionais,finame,ncm,updated_at"
)


def _parse_content_range(header: str | None) -> int | None:
    """Extract the total from a ``Content-Range: 0-23/350`` header."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


def _to_money(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning("Unparseable price value", value=value)
        return None


class BackingStoreClient:
    """CRUD-shaped access to the tables the pricing layer reads."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackingStoreClient":
        return cls(
            settings.rest_url,
            settings.backing_store_key,
            timeout=settings.backing_store_timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the persistent HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout, connect=2.0),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                headers={
                    "apikey": self._api_key,
                    "Authorization": f"Bearer {self._api_key}",
                    "Accept": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _select(
        self,
        table: str,
        params: dict[str, str],
        *,
        headers: dict[str, str] | None = None,
        operation: str,
    ) -> tuple[list[dict[str, Any]], httpx.Response]:
        try:
            client = await self._get_client()
            response = await client.get(f"/{table}", params=params, headers=headers)
            response.raise_for_status()
            rows = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Backing store request failed", operation=operation, error=str(e))
            raise BackingStoreError(str(e) or type(e).__name__, operation=operation) from e

        if not isinstance(rows, list):
            raise BackingStoreError("Unexpected response shape", operation=operation)
        return rows, response

    # ========== Catalog ==========

    async def fetch_catalog(
        self,
        page: int = 1,
        page_size: int = 24,
        *,
        no_pagination: bool = False,
    ) -> CatalogPage:
        """Fetch crane records ordered by descriptive name.

        With ``no_pagination`` every record is returned and ``count`` is the
        number of rows received; otherwise ``count`` is the store's exact
        total for the query.
        """
        params = {"select": CATALOG_FIELDS, "order": "subgrupo"}

        headers: dict[str, str] = {}
        if not no_pagination:
            start = (page - 1) * page_size
            headers["Range-Unit"] = "items"
            headers["Range"] = f"{start}-{start + page_size - 1}"
            headers["Prefer"] = "count=exact"

        rows, response = await self._select(
            CATALOG_TABLE, params, headers=headers, operation="fetch_catalog"
        )
        items = [CatalogItem.model_validate(row) for row in rows]

        if no_pagination:
            count = len(items)
        else:
            count = _parse_content_range(response.headers.get("content-range")) or len(items)

        return CatalogPage(data=items, count=count)

    # ========== Regional prices ==========

    async def get_region_price(self, item_id: int, region: str) -> Decimal | None:
        """Price of a crane in a canonical pricing region, or None if unset."""
        rows, _ = await self._select(
            PRICES_TABLE,
            {
                "select": "preco",
                "guindaste_id": f"eq.{item_id}",
                "regiao": f"eq.{region}",
                "limit": "1",
            },
            operation="get_region_price",
        )
        if not rows:
            logger.info("No regional price", item_id=item_id, region=region)
            return None
        return _to_money(rows[0].get("preco"))

    async def get_region_prices(self, item_id: int) -> dict[str, Decimal]:
        """Every regional price configured for a crane."""
        rows, _ = await self._select(
            PRICES_TABLE,
            {"select": "regiao,preco", "guindaste_id": f"eq.{item_id}"},
            operation="get_region_prices",
        )
        prices: dict[str, Decimal] = {}
        for row in rows:
            price = _to_money(row.get("preco"))
            if row.get("regiao") and price is not None:
                prices[row["regiao"]] = price
        return prices

    # ========== Vendors ==========

    async def get_user_by_email(self, email: str) -> VendorRecord | None:
        rows, _ = await self._select(
            USERS_TABLE,
            {"select": "*", "email": f"eq.{email}", "limit": "1"},
            operation="get_user_by_email",
        )
        return VendorRecord.model_validate(rows[0]) if rows else None

    async def get_user(self, user_id: int) -> VendorRecord | None:
        rows, _ = await self._select(
            USERS_TABLE,
            {"select": "*", "id": f"eq.{user_id}", "limit": "1"},
            operation="get_user",
        )
        return VendorRecord.model_validate(rows[0]) if rows else None

    # ========== Health check ==========

    async def check_health(self, timeout: float = 5.0) -> bool:
        """Check backing store connectivity with timeout."""
        try:
            await asyncio.wait_for(
                self._select(CATALOG_TABLE, {"select": "id", "limit": "1"}, operation="health"),
                timeout=timeout,
            )
            return True
        except asyncio.TimeoutError:
            logger.error("Backing store health check timed out", timeout=timeout)
            return False
        except BackingStoreError as e:
            logger.error("Backing store health check failed", error=e.message)
            return False
