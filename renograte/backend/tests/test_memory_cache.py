from app.adapters.cache import MemoryCache, get_or_set


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


async def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = MemoryCache(default_ttl_s=10, clock=clock)

    await cache.set("a", 1)
    await cache.set("b", 2, ttl_s=100)
    assert await cache.get("a") == 1

    clock.now += 11
    assert await cache.get("a") is None
    assert await cache.get("b") == 2
    assert cache.stats.snapshot() == {"hits": 2, "misses": 1, "evictions": 0}


async def test_full_cache_evicts_oldest_tenth():
    cache = MemoryCache(max_entries=20, default_ttl_s=60, clock=FakeClock())
    for i in range(20):
        await cache.set(f"k{i}", i)

    await cache.set("new", "x")

    assert len(cache) == 19
    assert await cache.get("k0") is None
    assert await cache.get("k1") is None
    assert await cache.get("k2") == 2
    assert await cache.get("new") == "x"
    assert cache.stats.evictions == 2


async def test_expired_entries_are_purged_before_evicting_live_ones():
    clock = FakeClock()
    cache = MemoryCache(max_entries=3, default_ttl_s=60, clock=clock)
    await cache.set("short", 1, ttl_s=1)
    await cache.set("a", 2)
    await cache.set("b", 3)

    clock.now += 5
    await cache.set("c", 4)

    assert sorted(await cache.keys()) == ["a", "b", "c"]
    assert cache.stats.evictions == 0


async def test_keys_glob_delete_and_clear():
    cache = MemoryCache()
    await cache.set("places:details:1", {"x": 1})
    await cache.set("places:geocode:main st", {"y": 2})
    await cache.set("other", 3)

    assert sorted(await cache.keys("places:*")) == ["places:details:1", "places:geocode:main st"]

    await cache.delete("other")
    assert await cache.get("other") is None

    await cache.clear()
    assert await cache.keys() == []


async def test_get_or_set_does_not_cache_none():
    cache = MemoryCache()
    calls = []

    async def fetch_none():
        calls.append(1)
        return None

    async def fetch_value():
        calls.append(2)
        return {"ok": True}

    assert await get_or_set(cache, "k", 60, fetch_none) is None
    assert await get_or_set(cache, "k", 60, fetch_value) == {"ok": True}
    assert await get_or_set(cache, "k", 60, fetch_value) == {"ok": True}
    assert calls == [1, 2]
