# app/domain/comparables.py
from __future__ import annotations

import math
from typing import Any, Iterable

from .parsing import to_float
from .renovation import average_list_price
from .types import ComparableSplit

RENOVATED_REMARK_KEYWORDS: tuple[str, ...] = (
    "renovated",
    "updated",
    "remodeled",
    "new",
    "modern",
    "upgraded",
    "recently",
    "fresh",
    "stunning",
    "beautiful",
    "gorgeous",
    "luxury",
    "premium",
)
RENOVATED_CONDITION_KEYWORDS: tuple[str, ...] = ("excellent", "very good", "new", "updated")

# Priced this far above the subject => treat as already renovated
PRICE_PREMIUM_RATIO = 1.2

COMPS_PER_GROUP = 3


def planar_distance(item: dict[str, Any], lat: float, lng: float) -> float:
    """Degrees, not miles. Rows without coordinates sort last."""
    ilat = to_float(item.get("Latitude"))
    ilng = to_float(item.get("Longitude"))
    if ilat is None or ilng is None:
        return math.inf
    return math.hypot(ilat - lat, ilng - lng)


def sort_by_distance(items: Iterable[dict[str, Any]], lat: float, lng: float) -> list[dict[str, Any]]:
    return sorted(items, key=lambda x: planar_distance(x, lat, lng))


def looks_renovated(item: dict[str, Any], subject_price: float | None) -> bool:
    remarks = str(item.get("PublicRemarks") or "").lower()
    condition = str(item.get("PropertyCondition") or "").lower()

    if any(k in remarks for k in RENOVATED_REMARK_KEYWORDS):
        return True
    if any(k in condition for k in RENOVATED_CONDITION_KEYWORDS):
        return True

    price = to_float(item.get("ListPrice"))
    if price is not None and subject_price:
        return price > subject_price * PRICE_PREMIUM_RATIO
    return False


def classify_comparables(
    candidates: Iterable[dict[str, Any]],
    *,
    subject_price: float | None,
    lat: float,
    lng: float,
    limit: int = COMPS_PER_GROUP,
) -> ComparableSplit:
    renovated: list[dict[str, Any]] = []
    as_is: list[dict[str, Any]] = []
    for item in candidates:
        (renovated if looks_renovated(item, subject_price) else as_is).append(item)

    return ComparableSplit(
        renovated=sort_by_distance(renovated, lat, lng)[:limit],
        as_is=sort_by_distance(as_is, lat, lng)[:limit],
    )


def values_from_comparables(split: ComparableSplit) -> tuple[int, int]:
    """(ARV, CHV) as mean list price of renovated / as-is comps; 0 for an empty group."""
    return average_list_price(split.renovated), average_list_price(split.as_is)
