# app/entrypoints/fastapi_app.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from ..adapters.cache import Cache, MemoryCache
from ..config import settings
from ..db import init_models
from ..domain.errors import AlreadySignedError, RenograteError, UpstreamFetchError
from ..service_layer.realtyfeed import NO_CACHE_HEADERS
from .api.routers import contracts, debug, estimates, health, places, realtyfeed


async def _renograte_error(request: Request, exc: RenograteError) -> Response:
    if isinstance(exc, UpstreamFetchError) and exc.body:
        # relay the upstream's own error so callers can see what it disliked
        return Response(
            content=exc.body,
            status_code=exc.status_code,
            media_type=exc.content_type or "application/json",
            headers=NO_CACHE_HEADERS,
        )

    body: dict = {"detail": exc.message}
    if isinstance(exc, AlreadySignedError):
        body["already_signed"] = True
    headers = NO_CACHE_HEADERS if isinstance(exc, UpstreamFetchError) else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


def create_app(cache: Cache | None = None) -> FastAPI:
    app = FastAPI(title="Renograte - MLS proxy, renovation estimates, contract signing")

    app.state.cache = cache if cache is not None else MemoryCache(
        max_entries=settings.CACHE_MAX_ENTRIES,
        default_ttl_s=settings.CACHE_DEFAULT_TTL_S,
    )

    @app.on_event("startup")
    async def _startup() -> None:
        # Single place where DB tables are created in dev.
        await init_models()

    app.add_exception_handler(RenograteError, _renograte_error)

    # Routers
    app.include_router(health.router)
    app.include_router(debug.router)
    app.include_router(realtyfeed.router)
    app.include_router(estimates.router)
    app.include_router(places.router)
    app.include_router(contracts.router)

    return app
