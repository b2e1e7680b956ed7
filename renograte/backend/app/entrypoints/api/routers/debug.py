# app/entrypoints/api/routers/debug.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from ..deps import get_cache, require_api_key
from ....adapters.cache import Cache, MemoryCache
from ....config import settings

router = APIRouter(tags=["debug"])


def _redact(v: str | None) -> str | None:
    if not v:
        return v
    if len(v) <= 8:
        return "***"
    return v[:4] + "***" + v[-4:]


@router.get("/debug/config", dependencies=[Depends(require_api_key)])
def debug_config() -> dict[str, Any]:
    """
    Reads the *running server's* settings, not your shell's.
    Secrets are redacted.
    """
    return {
        "ENV": settings.ENV,
        "RENOGRATE_DB_URL": settings.RENOGRATE_DB_URL,
        "APP_URL": settings.APP_URL,
        "REALTYFEED_AUTH_URL": settings.REALTYFEED_AUTH_URL,
        "REALTYFEED_API_URL": settings.REALTYFEED_API_URL,
        "REALTYFEED_CLIENT_ID": _redact(settings.REALTYFEED_CLIENT_ID),
        "REALTYFEED_CLIENT_SECRET": "***" if settings.REALTYFEED_CLIENT_SECRET else None,
        "REALTYFEED_API_KEY": _redact(settings.REALTYFEED_API_KEY),
        "GOOGLE_MAPS_API_KEY_SET": bool(settings.GOOGLE_MAPS_API_KEY),
        "API_KEY_SET": bool(settings.API_KEY),
    }


@router.get("/debug/routes", dependencies=[Depends(require_api_key)])
def debug_routes(request: Request) -> dict[str, Any]:
    """Shows what this running server has actually mounted."""
    routes: list[str] = []
    for r in request.app.routes:
        methods = getattr(r, "methods", None)
        path = getattr(r, "path", None)
        if path:
            if methods:
                routes.append(f"{sorted(list(methods))} {path}")
            else:
                routes.append(path)
    return {"count": len(routes), "routes": sorted(routes)}


@router.get("/debug/cache/stats", dependencies=[Depends(require_api_key)])
async def debug_cache_stats(
    clear: bool = Query(default=False),
    cache: Cache = Depends(get_cache),
) -> dict[str, Any]:
    if clear:
        await cache.clear()
    out: dict[str, Any] = {"keys": len(await cache.keys())}
    if isinstance(cache, MemoryCache):
        out.update(cache.stats.snapshot())
        out["max_entries"] = cache.max_entries
    return {"cache": out}
