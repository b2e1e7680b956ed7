# app/adapters/cache.py
from __future__ import annotations

import fnmatch
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol


class Cache(Protocol):
    async def get(self, key: str) -> Any | None: ...
    async def set(self, key: str, value: Any, ttl_s: int | None = None) -> None: ...
    async def delete(self, key: str) -> None: ...
    async def clear(self) -> None: ...
    async def keys(self, pattern: str = "*") -> list[str]: ...


@dataclass
class _Entry:
    value: Any
    stored_at: float
    ttl_s: float

    def expired(self, now: float) -> bool:
        return (now - self.stored_at) > self.ttl_s


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    def snapshot(self) -> dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "evictions": self.evictions}


class MemoryCache:
    """
    Per-process TTL cache. Built once by the app factory and handed to whoever
    needs it; nothing here is a module global.

    When full, the oldest 10% of entries (insertion order) are dropped before a
    new key goes in.
    """

    def __init__(
        self,
        *,
        max_entries: int = 1000,
        default_ttl_s: int = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max(1, int(max_entries))
        self.default_ttl_s = default_ttl_s
        self._clock = clock
        self._data: dict[str, _Entry] = {}
        self.stats = CacheStats()

    def __len__(self) -> int:
        return len(self._data)

    async def get(self, key: str) -> Any | None:
        entry = self._data.get(key)
        if entry is None:
            self.stats.misses += 1
            return None
        if entry.expired(self._clock()):
            del self._data[key]
            self.stats.misses += 1
            return None
        self.stats.hits += 1
        return entry.value

    async def set(self, key: str, value: Any, ttl_s: int | None = None) -> None:
        if key not in self._data and len(self._data) >= self.max_entries:
            self._evict_oldest()
        # re-insert so a refreshed key counts as newest
        self._data.pop(key, None)
        ttl = self.default_ttl_s if ttl_s is None else ttl_s
        self._data[key] = _Entry(value=value, stored_at=self._clock(), ttl_s=float(ttl))

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()

    async def keys(self, pattern: str = "*") -> list[str]:
        now = self._clock()
        return [k for k, e in self._data.items() if not e.expired(now) and fnmatch.fnmatchcase(k, pattern)]

    def purge_expired(self) -> int:
        now = self._clock()
        dead = [k for k, e in self._data.items() if e.expired(now)]
        for k in dead:
            del self._data[k]
        return len(dead)

    def _evict_oldest(self) -> None:
        if self.purge_expired():
            if len(self._data) < self.max_entries:
                return
        n = max(1, self.max_entries // 10)
        for k in list(self._data.keys())[:n]:
            del self._data[k]
            self.stats.evictions += 1


async def get_or_set(cache: Cache, key: str, ttl_s: int, fetch: Callable[[], Awaitable[Any]]) -> Any:
    """
    Cached value if present, else fetch() and remember it.
    None results are not cached so a transient miss can be retried.
    """
    hit = await cache.get(key)
    if hit is not None:
        return hit
    value = await fetch()
    if value is not None:
        await cache.set(key, value, ttl_s)
    return value
