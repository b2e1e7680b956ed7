# app/entrypoints/api/deps.py
from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request

from ...adapters.cache import Cache
from ...adapters.clients.google_places import GooglePlacesClient
from ...adapters.clients.realtyfeed import RealtyFeedClient
from ...config import settings


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.API_KEY:
        if not x_api_key or x_api_key != settings.API_KEY:
            raise HTTPException(status_code=401, detail="Invalid API key")


def get_cache(request: Request) -> Cache:
    # built once in create_app()
    return request.app.state.cache


def get_realtyfeed_client() -> RealtyFeedClient:
    # new instance per request; its token never outlives the request
    return RealtyFeedClient()


def get_places_client(cache: Cache = Depends(get_cache)) -> GooglePlacesClient:
    return GooglePlacesClient(cache=cache)


def client_ip(request: Request) -> str:
    fwd = request.headers.get("x-forwarded-for")
    if fwd:
        return fwd.split(",")[0].strip() or "unknown"
    return "unknown"
