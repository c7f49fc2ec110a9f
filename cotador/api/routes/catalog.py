"""Crane catalog endpoints."""

from fastapi import APIRouter, Query

from cotador.api.deps import Catalog, CurrentUser, Store
from cotador.api.schemas import (
    CapacitiesResponse,
    CatalogItemsResponse,
    CatalogResponse,
    CranePricesResponse,
    RegionPrice,
)
from cotador.core.exceptions import NotFoundError
from cotador.db import CatalogItem
from cotador.services.catalog import CatalogSnapshot
from cotador.services.regions import PRICING_REGIONS, region_label

router = APIRouter(prefix="/catalog", tags=["Catalog"])


def _catalog_response(snapshot: CatalogSnapshot) -> CatalogResponse:
    return CatalogResponse(
        items=list(snapshot.items),
        capacities=sorted(snapshot.capacity_index, key=float),
        models=sorted(snapshot.model_index),
        unindexed_ids=list(snapshot.unindexed_ids),
        from_cache=snapshot.from_cache,
        load_time_ms=snapshot.load_time_ms,
        error=snapshot.error,
    )


def _items(items: list[CatalogItem]) -> CatalogItemsResponse:
    return CatalogItemsResponse(items=items, count=len(items))


@router.get("", response_model=CatalogResponse, summary="Full crane catalog")
async def get_catalog(catalog: Catalog, _user: CurrentUser) -> CatalogResponse:
    """
    Return every crane with its capacity and model indexes.

    Served from cache within the TTL. When the backing store is unreachable
    the last loaded catalog is returned with ``error`` set.
    """
    return _catalog_response(await catalog.load())


@router.post("/refresh", response_model=CatalogResponse, summary="Reload the catalog")
async def refresh_catalog(catalog: Catalog, _user: CurrentUser) -> CatalogResponse:
    return _catalog_response(await catalog.load(force_refresh=True))


@router.get("/capacities", response_model=CapacitiesResponse, summary="Available capacities")
async def list_capacities(catalog: Catalog, _user: CurrentUser) -> CapacitiesResponse:
    await catalog.load()
    return CapacitiesResponse(capacities=catalog.get_capacities())


@router.get(
    "/capacities/{capacity}",
    response_model=CatalogItemsResponse,
    summary="Cranes of a capacity",
)
async def cranes_by_capacity(
    capacity: str,
    catalog: Catalog,
    _user: CurrentUser,
    one_per_model: bool = Query(default=False),
) -> CatalogItemsResponse:
    await catalog.load()
    if one_per_model:
        return _items(catalog.get_models_by_capacity(capacity))
    return _items(catalog.get_by_capacity(capacity))


@router.get("/models/{model}", response_model=CatalogItemsResponse, summary="Cranes of a model")
async def cranes_by_model(model: str, catalog: Catalog, _user: CurrentUser) -> CatalogItemsResponse:
    await catalog.load()
    return _items(catalog.get_by_model(model))


@router.get("/search", response_model=CatalogItemsResponse, summary="Search cranes")
async def search_cranes(
    catalog: Catalog,
    _user: CurrentUser,
    q: str = Query(default="", max_length=100),
) -> CatalogItemsResponse:
    await catalog.load()
    return _items(catalog.search(q))


@router.get("/items/{item_id}", response_model=CatalogItem, summary="Crane details")
async def get_crane(item_id: int, catalog: Catalog, _user: CurrentUser) -> CatalogItem:
    await catalog.load()
    item = catalog.get_by_id(item_id)
    if item is None:
        raise NotFoundError("Crane")
    return item


@router.get(
    "/items/{item_id}/prices",
    response_model=CranePricesResponse,
    summary="Crane prices by region",
)
async def get_crane_prices(
    item_id: int, catalog: Catalog, store: Store, _user: CurrentUser
) -> CranePricesResponse:
    """List the price configured for a crane in each pricing region."""
    await catalog.load()
    if catalog.get_by_id(item_id) is None:
        raise NotFoundError("Crane")
    prices = await store.get_region_prices(item_id)
    return CranePricesResponse(
        item_id=item_id,
        prices=[
            RegionPrice(
                region=region.value,
                label=region_label(region.value),
                price=prices[region.value],
            )
            for region in PRICING_REGIONS
            if region.value in prices
        ],
    )
