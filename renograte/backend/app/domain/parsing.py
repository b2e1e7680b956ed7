# app/domain/parsing.py
from __future__ import annotations

import math
from typing import Any


def to_float(x: Any) -> float | None:
    """Lenient float coercion; bools, NaN and infinities are not numbers here."""
    if x is None or x == "" or isinstance(x, bool):
        return None
    try:
        v = float(x)
    except Exception:
        return None
    if math.isnan(v) or math.isinf(v):
        return None
    return v


def round_half_up(x: float) -> int:
    """Nearest integer with .5 going up (2.5 -> 3, -2.5 -> -2). Python's round() is half-even."""
    return int(math.floor(x + 0.5))


def get_first(payload: dict[str, Any], *keys: str) -> Any:
    """Return first non-empty key from payload."""
    for k in keys:
        v = payload.get(k)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def odata_quote(value: str) -> str:
    """Quote a string literal for an OData $filter (single quotes doubled)."""
    return "'" + str(value).replace("'", "''") + "'"
