# app/entrypoints/api/routers/places.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from ..deps import get_places_client
from ....adapters.clients.google_places import GooglePlacesClient

router = APIRouter(tags=["places"])


@router.get("/places/details")
async def place_details(
    place_id: str | None = Query(default=None),
    places: GooglePlacesClient = Depends(get_places_client),
) -> dict[str, Any]:
    return await places.place_details(place_id)
