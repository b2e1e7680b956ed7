# app/domain/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RenovationTier:
    # None = open-ended top tier
    upper_bound: float | None
    percentage: float
    cap: float

    def covers(self, list_price: float) -> bool:
        return self.upper_bound is None or list_price <= self.upper_bound


@dataclass(frozen=True)
class RenovationEstimate:
    list_price: float
    renovation_allowance: float
    after_renovation_value: float
    tier: RenovationTier


@dataclass(frozen=True)
class ComparableSplit:
    renovated: list[dict[str, Any]] = field(default_factory=list)
    as_is: list[dict[str, Any]] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.renovated and not self.as_is


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float
    place_id: str | None = None
