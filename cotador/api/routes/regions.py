"""Pricing region endpoints."""

from fastapi import APIRouter, Query

from cotador.api.schemas import NormalizedRegion, RegionInfo
from cotador.services.regions import (
    PRICING_REGIONS,
    is_dual_tax_region,
    normalize_region,
    region_label,
    states_for_region,
)

router = APIRouter(prefix="/regions", tags=["Regions"])


@router.get("", response_model=list[RegionInfo], summary="Pricing regions")
async def list_regions() -> list[RegionInfo]:
    return [
        RegionInfo(
            code=region.value,
            label=region_label(region.value),
            states=states_for_region(region.value),
        )
        for region in PRICING_REGIONS
    ]


@router.get("/normalize", response_model=NormalizedRegion, summary="Resolve a region label")
async def normalize(
    label: str | None = Query(default=None, max_length=100),
    has_tax_registration: bool = Query(default=True),
) -> NormalizedRegion:
    """Map a vendor's free-form region label to its pricing region."""
    region = normalize_region(label, has_tax_registration)
    return NormalizedRegion(
        label=label,
        has_tax_registration=has_tax_registration,
        region=region.value,
        region_label=region_label(region.value),
        dual_tax=is_dual_tax_region(label),
    )
