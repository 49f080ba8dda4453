"""Integration tests for the cache layer against a real Redis server."""

from __future__ import annotations

import asyncio

import pytest
from redis.asyncio import Redis

from lawrose.cache.redis import verify_connection
from lawrose.cache.service import CacheService
from lawrose.cache.types import BulkCacheItem, CacheKey, CacheKeyType, CacheSetOptions
from lawrose.catalog.invalidation import CatalogInvalidator
from lawrose.catalog.keys import CatalogKeys
from lawrose.config import Settings
from tests.integration.docker_utils import RedisServer


class TestExpiry:
    @pytest.mark.asyncio
    async def test_server_expires_entry(self, live_cache: CacheService) -> None:
        """An entry set with ttl=1 is gone after the server expires it."""
        key = CacheKey(CacheKeyType.OTP_CODES, "user-1")
        await live_cache.set(key, "123456", CacheSetOptions(ttl=1))
        assert 0 < await live_cache.get_ttl(key) <= 1

        await asyncio.sleep(1.5)

        assert await live_cache.get(key) is None
        assert await live_cache.get_ttl(key) == -1

    @pytest.mark.asyncio
    async def test_bulk_items_get_category_ttls(
        self, live_cache: CacheService, redis_client: Redis
    ) -> None:
        await live_cache.mset(
            [
                BulkCacheItem(CacheKey(CacheKeyType.RATE_LIMIT, "1.2.3.4"), 1),
                BulkCacheItem(CacheKey(CacheKeyType.SESSION, "s1"), {"user": "u1"}),
            ]
        )
        assert 0 < await redis_client.ttl("it:rate_limit:1.2.3.4") <= 60
        assert 3600 < await redis_client.ttl("it:session:s1") <= 86400


class TestInvalidation:
    @pytest.mark.asyncio
    async def test_clear_pattern_over_many_keys(self, live_cache: CacheService) -> None:
        """SCAN-based clearing removes every matching key across batches."""
        await live_cache.mset(
            [
                BulkCacheItem(CatalogKeys.product_list({"page": page}), {"items": []})
                for page in range(1200)
            ]
        )
        await live_cache.set(CacheKey(CacheKeyType.SESSION, "s1"), {"user": "u1"})

        assert await live_cache.clear_pattern(CatalogKeys.family_pattern("list")) == 1200
        assert await live_cache.search_keys("*") == ["session:s1"]

    @pytest.mark.asyncio
    async def test_product_update_flow(self, live_cache: CacheService) -> None:
        await live_cache.set(CatalogKeys.product_detail("p1"), {"id": "p1"})
        await live_cache.set(CatalogKeys.featured(8), [{"id": "p1"}])

        removed = await CatalogInvalidator(live_cache).invalidate_product("p1")

        assert removed == 2


class TestIntrospection:
    @pytest.mark.asyncio
    async def test_stats(self, live_cache: CacheService) -> None:
        await live_cache.set("k", 1)
        stats = await live_cache.get_stats()
        assert stats.total_keys == 1
        assert stats.memory_usage != "Unknown"

    @pytest.mark.asyncio
    async def test_health_check(self, live_cache: CacheService) -> None:
        assert await live_cache.health_check() is True

    @pytest.mark.asyncio
    async def test_verify_connection(
        self, redis_client: Redis, redis_server: RedisServer
    ) -> None:
        assert await verify_connection(redis_client, key_prefix="it:") == redis_server.version


class TestForeignWriters:
    @pytest.mark.asyncio
    async def test_binary_value_is_a_miss_for_its_own_key(
        self, live_cache: CacheService, redis_settings: Settings
    ) -> None:
        """Non-UTF-8 bytes from another writer do not poison neighbouring keys."""
        raw = Redis.from_url(redis_settings.redis_url)
        try:
            await raw.set("it:legacy", b"\xff\xfe\x00binary")
        finally:
            await raw.aclose()
        await live_cache.set("fresh", {"ok": True})

        assert await live_cache.get("legacy") is None
        assert await live_cache.mget(["legacy", "fresh"]) == [None, {"ok": True}]
