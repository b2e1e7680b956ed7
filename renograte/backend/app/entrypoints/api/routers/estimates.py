# app/entrypoints/api/routers/estimates.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from ..deps import get_places_client, get_realtyfeed_client
from ....adapters.clients.google_places import GooglePlacesClient
from ....adapters.clients.realtyfeed import RealtyFeedClient
from ....domain.errors import MissingParameterError
from ....domain.renovation import estimate_renovation
from ....domain.types import RenovationEstimate
from ....schemas import (
    AddressEstimateIn,
    AddressEstimateOut,
    ComparableOut,
    ListingEstimateOut,
    RenovationEstimateOut,
)
from ....service_layer.estimates import (
    estimate_for_address,
    estimate_for_listing,
    format_address,
    listing_details,
)

router = APIRouter(tags=["estimates"])


def _estimate_fields(est: RenovationEstimate) -> dict[str, float]:
    return {
        "list_price": est.list_price,
        "renovation_allowance": est.renovation_allowance,
        "after_renovation_value": est.after_renovation_value,
        "tier_percentage": est.tier.percentage,
        "tier_cap": est.tier.cap,
    }


def _comparable(p: dict[str, Any]) -> ComparableOut:
    return ComparableOut(address=format_address(p), **listing_details(p))


@router.get("/renovation-estimate", response_model=RenovationEstimateOut)
def renovation_estimate(list_price: str | None = Query(default=None)) -> RenovationEstimateOut:
    # taken as text so a non-numeric price is our 400, not a 422
    if list_price is None or not list_price.strip():
        raise MissingParameterError("list_price is required")
    return RenovationEstimateOut(**_estimate_fields(estimate_renovation(list_price.strip())))


@router.get("/properties/{listing_key}/renovation-estimate", response_model=ListingEstimateOut)
async def listing_renovation_estimate(
    listing_key: str,
    feed: RealtyFeedClient = Depends(get_realtyfeed_client),
) -> ListingEstimateOut:
    listing, est = await estimate_for_listing(feed, listing_key)
    return ListingEstimateOut(
        listing_key=str(listing.get("ListingKey") or listing_key),
        standard_status=listing.get("StandardStatus"),
        address=format_address(listing) or None,
        **_estimate_fields(est),
    )


@router.post("/estimate-renovation-allowance", response_model=AddressEstimateOut)
async def estimate_renovation_allowance(
    body: AddressEstimateIn,
    feed: RealtyFeedClient = Depends(get_realtyfeed_client),
    places: GooglePlacesClient = Depends(get_places_client),
) -> AddressEstimateOut:
    r = await estimate_for_address(feed, places, body.address)
    return AddressEstimateOut(
        property_address=r.property_address,
        arv=r.arv,
        chv=r.chv,
        renovation_allowance=r.renovation_allowance,
        calculation_method=r.calculation_method,
        arv_formula=r.arv_formula,
        chv_formula=r.chv_formula,
        renovation_formula=r.renovation_formula,
        property_details=listing_details(r.subject),
        renovated_comps=[_comparable(p) for p in r.comparables.renovated],
        as_is_comps=[_comparable(p) for p in r.comparables.as_is],
        latitude=r.coordinates.lat if r.coordinates else None,
        longitude=r.coordinates.lng if r.coordinates else None,
    )
