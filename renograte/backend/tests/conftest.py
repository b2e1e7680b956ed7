# tests/conftest.py
import json
from typing import Any, Callable

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.adapters.cache import MemoryCache
from app.adapters.clients.google_places import GooglePlacesClient
from app.adapters.clients.realtyfeed import RealtyFeedClient
from app.db import get_session
from app.entrypoints.api.deps import get_places_client, get_realtyfeed_client
from app.entrypoints.fastapi_app import create_app
from app.models import Base, ContractRole
from app.service_layer.signing import SectionDraft, create_contract

AUTH_URL = "https://auth.feed.test/token"
FEED_URL = "https://feed.test/odata/"
PLACES_URL = "https://places.test/v1"


@pytest.fixture(autouse=True)
async def _reset_db(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
async def seeded_contract(async_session_maker):
    """Two required sections (BUYER p1, SELLER p2) plus an optional AGENT section."""
    async with async_session_maker() as session:
        detail = await create_contract(
            session,
            title="Renovation Agreement",
            document_url="https://example.com/c.pdf",
            sections=[
                SectionDraft(title="Seller initials", role=ContractRole.SELLER, page_number=2),
                SectionDraft(title="Buyer initials", role=ContractRole.BUYER, page_number=1),
                SectionDraft(title="Agent witness", role=ContractRole.AGENT, page_number=3, required=False),
            ],
        )
        await session.commit()
        return detail


# -----------------------------
# Fake upstreams
# -----------------------------
class FakeUpstream:
    """
    httpx.MockTransport handler standing in for the RealtyFeed token endpoint,
    the OData feed and Google Places. Feed responses come from `feed_rows`
    (a callable of the parsed $filter) or a fixed `feed_status`.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_calls = 0
        self.token_status = 200
        self.token_payload: dict[str, Any] = {"access_token": "tok-123", "expires_in": 3600}
        self.feed_status = 200
        self.feed_rows: Callable[[str], list[dict[str, Any]]] = lambda _flt: []
        self.places: list[dict[str, Any]] = []
        self.place_detail: dict[str, Any] = {}

    @property
    def feed_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "feed.test"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if host == "auth.feed.test":
            self.token_calls += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(200, json=self.token_payload)

        if host == "feed.test":
            if self.feed_status != 200:
                return httpx.Response(self.feed_status, json={"error": {"message": "bad filter"}})
            flt = request.url.params.get("$filter", "")
            return httpx.Response(200, json={"value": self.feed_rows(flt)})

        if host == "places.test":
            if request.url.path.endswith("places:searchText"):
                return httpx.Response(200, json={"places": self.places})
            return httpx.Response(200, json=self.place_detail)

        return httpx.Response(404, content=json.dumps({"error": "unknown host"}).encode())


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def feed_client(upstream):
    def _make() -> RealtyFeedClient:
        return RealtyFeedClient(
            client_id="cid",
            client_secret="secret",
            api_key="feed-key",
            auth_url=AUTH_URL,
            api_url=FEED_URL,
            origin="https://app.test",
            transport=httpx.MockTransport(upstream),
        )

    return _make


@pytest.fixture
def memory_cache():
    return MemoryCache(max_entries=50, default_ttl_s=60)


@pytest.fixture
def places_client(upstream, memory_cache):
    return GooglePlacesClient(
        api_key="maps-key",
        base_url=PLACES_URL,
        referrer="https://app.test",
        cache=memory_cache,
        transport=httpx.MockTransport(upstream),
    )


@pytest.fixture
async def api(async_session_maker, feed_client, places_client, memory_cache):
    app = create_app(cache=memory_cache)

    async def _session():
        async with async_session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_realtyfeed_client] = feed_client
    app.dependency_overrides[get_places_client] = lambda: places_client

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
