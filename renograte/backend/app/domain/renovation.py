# app/domain/renovation.py
from __future__ import annotations

from typing import Any, Iterable

from .errors import InvalidPriceError
from .parsing import round_half_up, to_float
from .types import RenovationEstimate, RenovationTier

# Evaluated top-down; first tier whose upper bound covers the price wins.
RENOVATION_TIERS: tuple[RenovationTier, ...] = (
    RenovationTier(upper_bound=300_000, percentage=0.165, cap=45_000),
    RenovationTier(upper_bound=600_000, percentage=0.135, cap=75_000),
    RenovationTier(upper_bound=None, percentage=0.115, cap=120_000),
)

# ARV adds the allowance plus this share of it as value uplift
PROFIT_MARGIN = 0.30

# Target after-renovation ratio for the comparable-based formula
TARR = 0.87


def _require_price(list_price: Any) -> float:
    price = to_float(list_price)
    if price is None:
        raise InvalidPriceError(f"List price must be numeric, got {list_price!r}")
    if price <= 0:
        raise InvalidPriceError(f"List price must be positive, got {price}")
    return price


def tier_for(list_price: float) -> RenovationTier:
    for tier in RENOVATION_TIERS:
        if tier.covers(list_price):
            return tier
    raise AssertionError("open-ended top tier missing")


def estimate_renovation(list_price: Any) -> RenovationEstimate:
    """
    Tiered renovation budget and after-renovation value for a listing price.
    Pure: same price, same answer.
    """
    price = _require_price(list_price)
    tier = tier_for(price)

    allowance = min(price * tier.percentage, tier.cap)
    arv = price + allowance * (1 + PROFIT_MARGIN)

    return RenovationEstimate(
        list_price=price,
        renovation_allowance=allowance,
        after_renovation_value=arv,
        tier=tier,
    )


def allowance_from_values(arv: float, chv: float) -> int:
    """(ARV x 87%) - CHV, floored at zero."""
    return max(0, round_half_up(arv * TARR - chv))


def average_list_price(comps: Iterable[dict[str, Any]]) -> int:
    prices = [p for p in (to_float(c.get("ListPrice")) for c in comps) if p is not None]
    if not prices:
        return 0
    return round_half_up(sum(prices) / len(prices))
