# app/service_layer/estimates.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..adapters.clients.google_places import GooglePlacesClient
from ..adapters.clients.realtyfeed import RealtyFeedClient
from ..domain.comparables import classify_comparables, sort_by_distance, values_from_comparables
from ..domain.errors import (
    ListingNotFoundError,
    MissingParameterError,
    NotFoundError,
    UpstreamFetchError,
)
from ..domain.odata_filter import encode_query
from ..domain.parsing import get_first, odata_quote, round_half_up, to_float
from ..domain.renovation import TARR, allowance_from_values, estimate_renovation
from ..domain.types import ComparableSplit, GeoPoint, RenovationEstimate
from .realtyfeed import query_feed

log = logging.getLogger(__name__)

SUBJECT_FIELDS = (
    "ListingKey,StandardStatus,PropertyType,PropertySubType,ListPrice,StreetNumber,StreetName,"
    "City,StateOrProvince,PostalCode,BedroomsTotal,BathroomsTotalInteger,LivingArea,LotSizeAcres,"
    "LotSizeSquareFeet,YearBuilt,Latitude,Longitude,PublicRemarks,SubdivisionName,ListOfficeName,"
    "ListAgentFullName"
)
COMPARABLE_FIELDS = (
    "ListingKey,StandardStatus,PropertyType,ListPrice,StreetNumber,StreetName,City,StateOrProvince,"
    "PostalCode,BedroomsTotal,BathroomsTotalInteger,LivingArea,YearBuilt,Latitude,Longitude,"
    "PublicRemarks,PropertyCondition"
)

# (radius in degrees, StandardStatus), widest last
SUBJECT_RADIUS_STRATEGIES: tuple[tuple[float, str], ...] = (
    (0.005, "Active"),  # ~0.3 miles
    (0.01, "Active"),
    (0.05, "Active"),
    (0.1, "Active"),  # ~6 miles
    (0.05, "Sold"),
    (0.1, "Sold"),
)


def _resource(path: str, **params: str) -> str:
    pairs = [(f"${k}", v) for k, v in params.items() if v]
    return f"{path}?{encode_query(pairs)}"


async def _first_rows(feed: RealtyFeedClient, resource: str, label: str) -> list[dict[str, Any]]:
    """
    Rows for one search strategy. An upstream rejection only sinks this strategy;
    auth failures still propagate.
    """
    try:
        resp = await query_feed(feed, resource)
    except UpstreamFetchError as e:
        log.info("estimate strategy failed: %s status=%s", label, e.status_code)
        return []
    return resp.rows()


# -----------------------------
# Listing estimate
# -----------------------------
async def fetch_listing(feed: RealtyFeedClient, listing_key: str) -> dict[str, Any]:
    if not listing_key:
        raise MissingParameterError("listing_key is required")
    resource = _resource("Property", filter=f"ListingKey eq {odata_quote(listing_key)}", top="1")
    resp = await query_feed(feed, resource)
    rows = resp.rows()
    if not rows:
        raise ListingNotFoundError(f"No MLS listing found for {listing_key}")
    return rows[0]


async def estimate_for_listing(feed: RealtyFeedClient, listing_key: str) -> tuple[dict[str, Any], RenovationEstimate]:
    listing = await fetch_listing(feed, listing_key)
    return listing, estimate_renovation(listing.get("ListPrice"))


# -----------------------------
# Address estimate (comparables)
# -----------------------------
@dataclass(frozen=True)
class ParsedAddress:
    street_number: str
    street_name: str
    city: str
    state: str
    zipcode: str


def parse_address(address: str) -> ParsedAddress:
    """'2312 Longwood St, Baltimore, MD 21216' -> parts. Missing parts come back empty."""
    parts = [p.strip() for p in address.split(",")]
    street = (parts[0] if parts else "").split()
    state_zip = (parts[2] if len(parts) > 2 else "").split()
    return ParsedAddress(
        street_number=street[0] if street else "",
        street_name=" ".join(street[1:]),
        city=parts[1] if len(parts) > 1 else "",
        state=state_zip[0] if state_zip else "",
        zipcode=state_zip[1] if len(state_zip) > 1 else "",
    )


async def find_subject_property(
    feed: RealtyFeedClient,
    point: GeoPoint,
    address: str | None = None,
) -> dict[str, Any] | None:
    if address:
        a = parse_address(address)
        if a.street_number and a.street_name and a.city and a.state:
            flt = (
                f"StreetNumber eq {odata_quote(a.street_number)}"
                f" and contains(StreetName,{odata_quote(a.street_name)})"
                f" and City eq {odata_quote(a.city)}"
                f" and StateOrProvince eq {odata_quote(a.state)}"
                " and StandardStatus eq 'Active'"
            )
            rows = await _first_rows(
                feed, _resource("Property", filter=flt, select=SUBJECT_FIELDS, top="1"), "exact_address"
            )
            if rows:
                return rows[0]

    geo = f"geo.distance(Coordinates, POINT({point.lng} {point.lat}))"
    for radius, status in SUBJECT_RADIUS_STRATEGIES:
        label = f"radius={radius}d status={status}"
        flt = f"{geo} lt {radius}d and StandardStatus eq {odata_quote(status)}"
        rows = await _first_rows(
            feed,
            _resource("Property", filter=flt, select=SUBJECT_FIELDS, orderby=geo, top="10"),
            label,
        )
        if rows:
            log.info("subject property found via %s (%d candidates)", label, len(rows))
            return sort_by_distance(rows, point.lat, point.lng)[0]

    return None


def comparable_strategies(subject: dict[str, Any]) -> list[tuple[str, str]]:
    city = str(subject.get("City") or "")
    state = str(subject.get("StateOrProvince") or "")
    out: list[tuple[str, str]] = []
    if city:
        out.append(("city_active", _resource(
            "Property", filter=f"City eq {odata_quote(city)} and StandardStatus eq 'Active'",
            select=COMPARABLE_FIELDS, top="30",
        )))
    if state:
        out.append(("state_active", _resource(
            "Property", filter=f"StateOrProvince eq {odata_quote(state)} and StandardStatus eq 'Active'",
            select=COMPARABLE_FIELDS, top="30",
        )))
    if city:
        out.append(("city_sold", _resource(
            "Property", filter=f"City eq {odata_quote(city)} and StandardStatus eq 'Sold'",
            select=COMPARABLE_FIELDS, orderby="ListPrice desc", top="30",
        )))
        out.append(("city_any", _resource(
            "Property", filter=f"City eq {odata_quote(city)}", select=COMPARABLE_FIELDS, top="30",
        )))
    out.append(("unfiltered", _resource("Property", select=COMPARABLE_FIELDS, top="10")))
    return out


async def find_comparables(feed: RealtyFeedClient, subject: dict[str, Any], point: GeoPoint) -> ComparableSplit:
    subject_key = subject.get("ListingKey")
    for label, resource in comparable_strategies(subject):
        rows = [r for r in await _first_rows(feed, resource, label) if r.get("ListingKey") != subject_key]
        if rows:
            log.info("comparables found via %s (%d rows)", label, len(rows))
            return classify_comparables(
                rows, subject_price=to_float(subject.get("ListPrice")), lat=point.lat, lng=point.lng
            )
    return ComparableSplit()


@dataclass(frozen=True)
class AddressEstimate:
    property_address: str
    arv: int
    chv: int
    renovation_allowance: int
    calculation_method: str  # mls_data | fallback_calculation
    arv_formula: str
    chv_formula: str
    renovation_formula: str
    subject: dict[str, Any]
    comparables: ComparableSplit = field(default_factory=ComparableSplit)
    coordinates: GeoPoint | None = None


def format_address(p: dict[str, Any]) -> str:
    street = " ".join(str(x) for x in (p.get("StreetNumber"), p.get("StreetName")) if x)
    tail = " ".join(str(x) for x in (p.get("StateOrProvince"), p.get("PostalCode")) if x)
    return ", ".join(x for x in (street, str(p.get("City") or ""), tail) if x)


async def estimate_for_address(
    feed: RealtyFeedClient,
    places: GooglePlacesClient,
    address: str | None,
) -> AddressEstimate:
    if not address or not address.strip():
        raise MissingParameterError("Address is required")

    point = await places.search_text(address)
    if point is None:
        raise NotFoundError("Could not geocode address")

    subject = await find_subject_property(feed, point, address)
    if subject is None:
        raise ListingNotFoundError("No MLS listing found near that address")

    chv_price = to_float(subject.get("ListPrice"))
    if chv_price is None or chv_price <= 0:
        log.info("subject listing %s has no usable list price", subject.get("ListingKey"))
        raise ListingNotFoundError("MLS listing has no list price")

    comps = await find_comparables(feed, subject, point)

    if comps.renovated:
        arv, _ = values_from_comparables(comps)
        method = "mls_data"
        arv_formula = f"Average of {len(comps.renovated)} renovated comparable properties"
        chv_formula = "Subject property listing price (exact MLS match)"
    else:
        est = estimate_renovation(chv_price)
        arv = round_half_up(est.after_renovation_value)
        method = "fallback_calculation"
        arv_formula = "List Price + Renovation Allowance + (Renovation Allowance x 30%)"
        chv_formula = "Current List Price"

    # allowance uses the exact list price; chv is rounded for display only
    chv = round_half_up(chv_price)
    allowance = allowance_from_values(arv, chv_price)
    pct = int(TARR * 100)
    return AddressEstimate(
        property_address=format_address(subject) or address.strip(),
        arv=arv,
        chv=chv,
        renovation_allowance=allowance,
        calculation_method=method,
        arv_formula=arv_formula,
        chv_formula=chv_formula,
        renovation_formula=f"(ARV x {pct}%) - CHV = ({arv:,} x {TARR}) - {chv:,} = {allowance:,}",
        subject=subject,
        comparables=comps,
        coordinates=point,
    )


def _text(v: Any) -> str | None:
    return None if v is None else str(v)


def listing_details(p: dict[str, Any]) -> dict[str, Any]:
    return {
        "listing_key": _text(get_first(p, "ListingKey")),
        "list_price": to_float(p.get("ListPrice")),
        "living_area": to_float(p.get("LivingArea")),
        "bedrooms": to_float(p.get("BedroomsTotal")),
        "bathrooms": to_float(p.get("BathroomsTotalInteger")),
        "year_built": get_first(p, "YearBuilt"),
        "property_type": _text(get_first(p, "PropertyType", "PropertySubType")),
    }
