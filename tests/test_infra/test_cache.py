"""Tests for the in-process TTL cache."""

import pytest

from app.infra.cache import CacheKeys, TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestCacheKeys:
    def test_versioned_keys(self):
        keys = CacheKeys("v1")
        assert keys.tree("categories") == "categories:v1:tree"
        assert keys.flat("categories") == "categories:v1:flat"
        assert keys.pattern("categories") == "categories:v1:*"

    def test_default_version_from_settings(self, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "cache_version", "v7")
        assert CacheKeys().tree("categories") == "categories:v7:tree"


class TestTTLCache:
    """Get/set/expiry and pattern invalidation."""

    @pytest.mark.asyncio
    async def test_set_and_get(self):
        cache = TTLCache(default_ttl=60)
        await cache.set("a", {"x": 1})

        assert await cache.get("a") == {"x": 1}
        assert await cache.get("missing") is None
        assert cache.hits == 1
        assert cache.misses == 1

    @pytest.mark.asyncio
    async def test_entries_expire(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl=60, clock=clock)
        await cache.set("a", 1)
        await cache.set("b", 2, ttl=120)

        clock.now += 61
        assert await cache.get("a") is None
        assert await cache.get("b") == 2
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_zero_ttl_never_expires(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl=0, clock=clock)
        await cache.set("a", 1)

        clock.now += 10**9
        assert await cache.get("a") == 1

    @pytest.mark.asyncio
    async def test_delete(self):
        cache = TTLCache(default_ttl=60)
        await cache.set("a", 1)

        assert await cache.delete("a") is True
        assert await cache.delete("a") is False

    @pytest.mark.asyncio
    async def test_invalidate_by_pattern(self):
        cache = TTLCache(default_ttl=60)
        await cache.set("categories:v1:tree", 1)
        await cache.set("categories:v1:flat", 2)
        await cache.set("characteristic-groups:v1:tree", 3)

        removed = await cache.invalidate("categories:v1:*")

        assert removed == 2
        assert await cache.get("categories:v1:tree") is None
        assert await cache.get("characteristic-groups:v1:tree") == 3

    @pytest.mark.asyncio
    async def test_invalidate_several_patterns(self):
        cache = TTLCache(default_ttl=60)
        await cache.set("categories:v1:tree", 1)
        await cache.set("characteristic-groups:v1:tree", 2)

        removed = await cache.invalidate(["categories:*", "characteristic-groups:*"])
        assert removed == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_clear(self):
        cache = TTLCache(default_ttl=60)
        await cache.set("a", 1)
        await cache.clear()
        assert len(cache) == 0


class TestRemember:
    """Read-through helper used by the listing endpoint."""

    @pytest.mark.asyncio
    async def test_computes_once(self):
        cache = TTLCache(default_ttl=60)
        calls = []

        async def factory():
            calls.append(1)
            return {"data": [1, 2]}

        first = await cache.remember("k", 60, factory)
        second = await cache.remember("k", 60, factory)

        assert first == second == {"data": [1, 2]}
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_failing_factory_caches_nothing(self):
        cache = TTLCache(default_ttl=60)

        async def factory():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await cache.remember("k", 60, factory)
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_invalidation_during_load_skips_store(self):
        cache = TTLCache(default_ttl=60)

        async def factory():
            await cache.invalidate("categories:v1:*")
            return ["before mutation"]

        value = await cache.remember("categories:v1:tree", 60, factory)

        assert value == ["before mutation"]
        assert await cache.get("categories:v1:tree") is None

    @pytest.mark.asyncio
    async def test_clear_during_load_skips_store(self):
        cache = TTLCache(default_ttl=60)

        async def factory():
            await cache.clear()
            return 1

        await cache.remember("k", 60, factory)
        assert len(cache) == 0
