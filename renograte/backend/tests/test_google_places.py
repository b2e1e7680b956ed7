import httpx
import pytest

from app.adapters.clients.google_places import GooglePlacesClient
from app.domain.errors import MissingParameterError, ServiceNotConfiguredError, UpstreamFetchError


async def test_place_details_shape_and_cache(places_client, upstream, memory_cache):
    upstream.place_detail = {
        "id": "abc",
        "formattedAddress": "2312 Longwood St, Baltimore, MD 21216, USA",
        "location": {"latitude": 39.31, "longitude": -76.67},
        "addressComponents": [{"longText": "Baltimore"}],
    }

    out = await places_client.place_details("abc")
    again = await places_client.place_details("abc")

    assert out == again
    assert out["status"] == "OK"
    assert out["result"]["place_id"] == "abc"
    assert out["result"]["geometry"]["location"] == {"latitude": 39.31, "longitude": -76.67}
    assert len(upstream.requests) == 1
    assert await memory_cache.keys("places:details:*") == ["places:details:abc"]

    req = upstream.requests[0]
    assert req.headers["x-goog-api-key"] == "maps-key"
    assert "addressComponents" in req.headers["x-goog-fieldmask"]


async def test_search_text_returns_point(places_client, upstream):
    upstream.places = [{"id": "p1", "location": {"latitude": 1.5, "longitude": 2.5}}]
    point = await places_client.search_text("1 Main St")
    assert (point.lat, point.lng, point.place_id) == (1.5, 2.5, "p1")


async def test_place_id_required(places_client):
    with pytest.raises(MissingParameterError) as ei:
        await places_client.place_details(None)
    assert ei.value.message == "Place ID parameter is required"


async def test_missing_api_key():
    client = GooglePlacesClient(api_key="", base_url="https://places.test/v1")
    with pytest.raises(ServiceNotConfiguredError):
        await client.place_details("abc")


async def test_non_2xx_is_upstream_error():
    def handler(request):
        return httpx.Response(403, json={"error": {"status": "PERMISSION_DENIED"}})

    client = GooglePlacesClient(
        api_key="k", base_url="https://places.test/v1", transport=httpx.MockTransport(handler)
    )
    with pytest.raises(UpstreamFetchError) as ei:
        await client.place_details("abc")
    assert ei.value.status_code == 403
