"""Tests for the place details cache."""

import fnmatch

import pytest

from route_eats import config
from route_eats.services.cache import CacheService, RedisCacheService
from route_eats.utils.cache import LRUCache


class FakeRedis:
    """In-memory stand-in for the async Redis client."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expiry: dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.expiry[key] = ex

    async def scan_iter(self, match="*", count=100):
        for key in list(self.store):
            if fnmatch.fnmatch(key, match):
                yield key

    async def delete(self, *keys):
        return sum(self.store.pop(k, None) is not None for k in keys)

    async def aclose(self):
        pass


@pytest.fixture
def cache() -> RedisCacheService:
    service = RedisCacheService(redis_url="redis://test", default_ttl=60)
    service._client = FakeRedis()
    return service


class TestPlaceKey:
    def test_language_is_lowercased(self) -> None:
        assert CacheService.build_place_key("abc", "EN") == "place:en:abc"

    def test_default_language(self) -> None:
        assert CacheService.build_place_key("abc") == "place:en:abc"


class TestRedisCacheService:
    """Tests for RedisCacheService against an in-memory client."""

    def test_defaults_come_from_config(self) -> None:
        assert RedisCacheService().default_ttl == config.PLACE_DETAILS_TTL_SECONDS

    @pytest.mark.asyncio
    async def test_set_then_get_json(self, cache) -> None:
        await cache.set("place:en:a", {"id": "a", "rating": 4.5})
        assert await cache.get("place:en:a") == {"id": "a", "rating": 4.5}
        assert cache._client.expiry["place:en:a"] == 60

    @pytest.mark.asyncio
    async def test_explicit_ttl(self, cache) -> None:
        await cache.set("k", "plain", ttl_seconds=5)
        assert await cache.get("k") == "plain"
        assert cache._client.expiry["k"] == 5

    @pytest.mark.asyncio
    async def test_missing_key(self, cache) -> None:
        assert await cache.get("nope") is None

    @pytest.mark.asyncio
    async def test_invalidate_pattern(self, cache) -> None:
        await cache.set("place:en:a", {})
        await cache.set("place:de:b", {})
        await cache.set("other", {})
        assert await cache.invalidate("place:*") == 2
        assert list(cache._client.store) == ["other"]

    @pytest.mark.asyncio
    async def test_delete(self, cache) -> None:
        await cache.set("k", 1)
        assert await cache.delete("k") is True
        assert await cache.delete("k") is False

    @pytest.mark.asyncio
    async def test_close_drops_client(self, cache) -> None:
        await cache.close()
        assert cache._client is None


class TestLRUCache:
    """Tests for the in-process LRU cache."""

    def test_keys_are_normalized_by_default(self) -> None:
        cache: LRUCache[int] = LRUCache()
        cache.set("  Main   St ", 1)
        assert cache.get("main st") == 1

    def test_exact_keys(self) -> None:
        cache: LRUCache[int] = LRUCache(normalize_keys=False)
        cache.set("abc", 1)
        assert cache.get("ABC") is None
        assert cache.get("abc") == 1

    def test_evicts_least_recently_used(self) -> None:
        cache: LRUCache[int] = LRUCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 1
