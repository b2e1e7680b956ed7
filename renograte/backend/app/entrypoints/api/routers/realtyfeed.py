# app/entrypoints/api/routers/realtyfeed.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from ..deps import get_realtyfeed_client
from ....adapters.clients.realtyfeed import RealtyFeedClient
from ....service_layer.realtyfeed import NO_CACHE_HEADERS, query_feed, resolve_resource

router = APIRouter(tags=["realtyfeed"])


@router.get("/realtyfeed")
async def realtyfeed_proxy(
    resource: str | None = Query(default=None),
    postal_code: str | None = Query(default=None, alias="postalCode"),
    feed: RealtyFeedClient = Depends(get_realtyfeed_client),
) -> Response:
    """
    GET /realtyfeed?resource=Property?$filter=... relays the MLS feed's JSON
    untouched, after tidying coordinate/price literals in $filter.
    """
    resp = await query_feed(feed, resolve_resource(resource, postal_code))
    return Response(
        content=resp.content,
        status_code=resp.status_code,
        media_type=resp.content_type,
        headers=NO_CACHE_HEADERS,
    )
