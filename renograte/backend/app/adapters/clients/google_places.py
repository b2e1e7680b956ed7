# app/adapters/clients/google_places.py
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ...config import settings
from ...domain.errors import MissingParameterError, ServiceNotConfiguredError, UpstreamFetchError
from ...domain.parsing import to_float
from ...domain.types import GeoPoint
from ..cache import Cache, get_or_set

log = logging.getLogger(__name__)


class GooglePlacesClient:
    """Places API (v1): text-search geocoding and place details, optionally cached."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        referrer: str | None = None,
        cache: Cache | None = None,
        cache_ttl_s: int | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.base_url = (base_url or settings.GOOGLE_PLACES_BASE_URL).rstrip("/")
        self.referrer = referrer or settings.APP_URL
        self.cache = cache
        self.cache_ttl_s = int(cache_ttl_s if cache_ttl_s is not None else settings.PLACES_CACHE_TTL_S)
        self.timeout_s = float(timeout_s if timeout_s is not None else settings.GOOGLE_PLACES_TIMEOUT_S)
        self._transport = transport

    def _headers(self, field_mask: str) -> dict[str, str]:
        if not self.api_key:
            raise ServiceNotConfiguredError("Google Maps API key is not configured")
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_mask,
            "Referer": self.referrer,
        }

    async def _request(self, method: str, url: str, *, headers: dict[str, str], json: Any | None = None) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                r = await client.request(method, url, headers=headers, json=json)
        except httpx.HTTPError as e:
            log.warning("google places request failed: %s", type(e).__name__)
            raise UpstreamFetchError(f"Google Places API failed: {type(e).__name__}", status_code=502) from e

        if not r.is_success:
            log.warning("google places rejected status=%s", r.status_code)
            raise UpstreamFetchError(
                f"Google Places API failed: {r.status_code}",
                status_code=r.status_code,
                body=r.content,
                content_type=r.headers.get("content-type"),
            )
        return r.json()

    async def _search_text_uncached(self, address: str) -> dict[str, Any] | None:
        data = await self._request(
            "POST",
            f"{self.base_url}/places:searchText",
            headers=self._headers("places.location,places.id"),
            json={"textQuery": address, "languageCode": "en"},
        )
        places = data.get("places") if isinstance(data, dict) else None
        if not places:
            return None
        first = places[0]
        loc = first.get("location") or {}
        lat, lng = to_float(loc.get("latitude")), to_float(loc.get("longitude"))
        if lat is None or lng is None:
            return None
        return {"lat": lat, "lng": lng, "place_id": first.get("id")}

    async def search_text(self, address: str) -> GeoPoint | None:
        """Geocode a free-form address. None when Google has no match."""
        address = (address or "").strip()
        if not address:
            raise MissingParameterError("Address is required")

        if self.cache is None:
            hit = await self._search_text_uncached(address)
        else:
            hit = await get_or_set(
                self.cache,
                f"places:geocode:{address.lower()}",
                self.cache_ttl_s,
                lambda: self._search_text_uncached(address),
            )
        if not hit:
            return None
        return GeoPoint(lat=hit["lat"], lng=hit["lng"], place_id=hit.get("place_id"))

    async def _place_details_uncached(self, place_id: str) -> dict[str, Any]:
        data = await self._request(
            "GET",
            f"{self.base_url}/places/{quote(place_id, safe='')}?languageCode=en",
            headers=self._headers("id,formattedAddress,location,addressComponents"),
        )
        data = data if isinstance(data, dict) else {}
        return {
            "status": "OK",
            "result": {
                "place_id": data.get("id") or "",
                "formatted_address": data.get("formattedAddress") or "",
                "geometry": {"location": data.get("location") or {}},
                "address_components": data.get("addressComponents") or [],
            },
        }

    async def place_details(self, place_id: str | None) -> dict[str, Any]:
        if not place_id:
            raise MissingParameterError("Place ID parameter is required")
        if self.cache is None:
            return await self._place_details_uncached(place_id)
        return await get_or_set(
            self.cache,
            f"places:details:{place_id}",
            self.cache_ttl_s,
            lambda: self._place_details_uncached(place_id),
        )
