# app/service_layer/realtyfeed.py
from __future__ import annotations

from ..adapters.clients.realtyfeed import FeedResponse, RealtyFeedClient
from ..domain.errors import MissingParameterError
from ..domain.odata_filter import normalize_query, split_resource
from ..domain.parsing import odata_quote

NO_CACHE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def resolve_resource(resource: str | None, postal_code: str | None = None) -> str:
    """The caller's resource, or a PostalCode lookup when only a zip was given."""
    if resource and resource.strip():
        return resource
    if postal_code and postal_code.strip():
        return f"Property?$filter=PostalCode eq {odata_quote(postal_code.strip())}"
    raise MissingParameterError("Either resource or postalCode parameter is required")


async def query_feed(client: RealtyFeedClient, resource: str | None) -> FeedResponse:
    """
    Proxy one OData resource string ("<path>?<query>") to RealtyFeed with its
    $filter normalized. Upstream payload comes back untouched.
    """
    if not resource:
        raise MissingParameterError("resource parameter is required")

    path, query = split_resource(resource)
    return await client.fetch(path, normalize_query(query))
