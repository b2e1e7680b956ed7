# app/domain/odata_filter.py
from __future__ import annotations

import logging
import re
from urllib.parse import parse_qsl, urlencode

from .parsing import round_half_up

log = logging.getLogger(__name__)

_OPS = r"(?:eq|ne|gt|lt|ge|le)"

# The upstream feed chokes on long coordinate tails and fractional prices.
LONGITUDE_RE = re.compile(rf"(Longitude\s+{_OPS}\s+)(-?\d+\.?\d*)", re.IGNORECASE)
LATITUDE_RE = re.compile(rf"(Latitude\s+{_OPS}\s+)(-?\d+\.?\d*)", re.IGNORECASE)
LIST_PRICE_RE = re.compile(rf"(ListPrice\s+{_OPS}\s+)([0-9.]+)", re.IGNORECASE)

COORDINATE_DECIMALS = 6


def format_coordinate(raw: str | float) -> str:
    """
    At most 6 decimals, trailing zeros stripped:
      -76.668912340 -> -76.668912
      40.5          -> 40.5
    """
    s = f"{float(raw):.{COORDINATE_DECIMALS}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s in ("-0", ""):
        return "0"
    return s


def format_list_price(raw: str | float) -> str:
    return str(round_half_up(float(raw)))


def _rewrite(filter_value: str) -> str:
    out = LONGITUDE_RE.sub(lambda m: m.group(1) + format_coordinate(m.group(2)), filter_value)
    out = LATITUDE_RE.sub(lambda m: m.group(1) + format_coordinate(m.group(2)), out)
    out = LIST_PRICE_RE.sub(lambda m: m.group(1) + format_list_price(m.group(2)), out)
    return out


def normalize_filter(filter_value: str) -> str:
    """
    Canonicalize the numeric literals of Longitude/Latitude/ListPrice comparisons.
    Field names and operators are left exactly as typed.

    Fail-open: a literal we cannot rewrite (e.g. "ListPrice eq .") leaves the
    whole filter as the caller sent it.
    """
    try:
        return _rewrite(filter_value)
    except Exception as e:
        log.debug("filter rewrite failed, passing through: %s", type(e).__name__)
        return filter_value


def is_filter_param(key: str) -> bool:
    return key.lower() == "$filter"


def split_resource(resource: str) -> tuple[str, str]:
    """'Property?$filter=...&$top=5' -> ('Property', '$filter=...&$top=5')"""
    path, _, query = resource.partition("?")
    return path, query


def normalize_query(query: str) -> list[tuple[str, str]]:
    """
    Parse a form-encoded query string, rewriting only the $filter parameter.
    Order and duplicate keys are preserved.
    """
    pairs = parse_qsl(query, keep_blank_values=True)
    return [(k, normalize_filter(v) if is_filter_param(k) else v) for k, v in pairs]


def encode_query(pairs: list[tuple[str, str]]) -> str:
    return urlencode(pairs)
