# app/adapters/clients/realtyfeed.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from ...config import settings
from ...domain.errors import UpstreamAuthError, UpstreamFetchError
from ...domain.odata_filter import encode_query
from ...domain.parsing import to_float

log = logging.getLogger(__name__)

# refresh a little before the provider says the token dies
TOKEN_BUFFER = timedelta(seconds=60)
DEFAULT_TOKEN_TTL_S = 3600.0
MAX_TOKEN_TTL_S = 86_400.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Token:
    access_token: str
    expires_at: datetime


@dataclass(frozen=True)
class FeedResponse:
    status_code: int
    content: bytes
    content_type: str = "application/json"

    def json(self) -> Any:
        if not self.content:
            return None
        return json.loads(self.content)

    def rows(self) -> list[dict[str, Any]]:
        """OData collection rows ("value"), tolerant of bare lists."""
        data = self.json()
        items = data.get("value") if isinstance(data, dict) else data
        if isinstance(items, list):
            return [x for x in items if isinstance(x, dict)]
        return []


class RealtyFeedClient:
    """
    RealtyFeed RESO Web API (OAuth2 client credentials -> OData GET).

    Meant to be built per request: the token it fetches lives on the instance
    and dies with it.
    """

    def __init__(
        self,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        api_key: str | None = None,
        auth_url: str | None = None,
        api_url: str | None = None,
        origin: str | None = None,
        timeout_s: float | None = None,
        auth_timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id if client_id is not None else settings.REALTYFEED_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.REALTYFEED_CLIENT_SECRET
        self.api_key = api_key if api_key is not None else settings.REALTYFEED_API_KEY
        self.auth_url = auth_url or settings.REALTYFEED_AUTH_URL
        self.api_url = (api_url or settings.REALTYFEED_API_URL).rstrip("/") + "/"
        self.origin = origin or settings.APP_URL
        self.timeout_s = float(timeout_s if timeout_s is not None else settings.REALTYFEED_TIMEOUT_S)
        self.auth_timeout_s = float(
            auth_timeout_s if auth_timeout_s is not None else settings.REALTYFEED_AUTH_TIMEOUT_S
        )
        self._transport = transport
        self._token: _Token | None = None

    def _client(self, timeout_s: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(timeout_s), transport=self._transport)

    async def _get_token(self) -> str:
        if self._token and self._token.expires_at > _utcnow() + TOKEN_BUFFER:
            return self._token.access_token

        if not (self.client_id and self.client_secret and self.api_key):
            log.error("RealtyFeed credentials are not configured")
            raise UpstreamAuthError("Server configuration error")

        data = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "*/*",
        }

        try:
            async with self._client(self.auth_timeout_s) as client:
                r = await client.post(self.auth_url, data=data, headers=headers)
        except httpx.HTTPError as e:
            log.warning("realtyfeed token request failed: %s", type(e).__name__)
            raise UpstreamAuthError() from e

        if not r.is_success:
            log.warning("realtyfeed token request rejected status=%s", r.status_code)
            raise UpstreamAuthError()

        try:
            payload = r.json()
        except ValueError as e:
            raise UpstreamAuthError() from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise UpstreamAuthError()

        # providers send this as int, float or string; anything unusable means an hour
        expires_in = to_float(payload.get("expires_in"))
        if expires_in is None or expires_in <= 0:
            expires_in = DEFAULT_TOKEN_TTL_S
        expires_in = min(expires_in, MAX_TOKEN_TTL_S)
        self._token = _Token(access_token=str(token), expires_at=_utcnow() + timedelta(seconds=expires_in))
        return self._token.access_token

    def build_url(self, path: str, params: list[tuple[str, str]]) -> str:
        url = self.api_url + path.lstrip("/")
        query = encode_query(params)
        return f"{url}?{query}" if query else url

    async def fetch(self, path: str, params: list[tuple[str, str]]) -> FeedResponse:
        """
        GET <api_url><path>?<params>. Params are sent exactly as given; callers
        normalize $filter beforehand.
        """
        token = await self._get_token()
        url = self.build_url(path, params)
        headers = {
            "Authorization": f"Bearer {token}",
            "x-api-key": self.api_key or "",
            "Origin": self.origin,
            "Referer": self.origin,
            "Accept": "application/json",
        }

        try:
            async with self._client(self.timeout_s) as client:
                r = await client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            log.warning("realtyfeed fetch timed out path=%s", path)
            raise UpstreamFetchError("Timed out waiting for RealtyFeed", status_code=504) from e
        except httpx.HTTPError as e:
            log.warning("realtyfeed fetch failed path=%s err=%s", path, type(e).__name__)
            raise UpstreamFetchError(f"Failed to reach RealtyFeed: {type(e).__name__}", status_code=502) from e

        content_type = r.headers.get("content-type", "application/json")
        if not r.is_success:
            # status + path only; query strings can carry caller data
            log.warning("realtyfeed fetch rejected status=%s path=%s", r.status_code, path)
            raise UpstreamFetchError(
                f"Failed to fetch from RealtyFeed: HTTP {r.status_code}",
                status_code=r.status_code,
                body=r.content,
                content_type=content_type,
            )

        return FeedResponse(status_code=r.status_code, content=r.content, content_type=content_type)
