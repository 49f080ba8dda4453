"""CacheService: the cache API exposed to catalog, cart and auth services.

Composes the key codec, TTL policy, single-key store, bulk operations,
pattern scanner, cache-aside orchestrator and stats collector over one
injected Redis client. Nothing here raises for a cache failure; see each
component for its fallback values.

Example:
    cache = CacheService(await get_redis())

    key = CacheKey(CacheKeyType.PRODUCT_DATA, "slug", "red-shirt")
    product = await cache.get_or_set(key, lambda: repo.find_by_slug("red-shirt"))

    # after a catalog write commits
    await cache.clear_cache_type(CacheKeyType.PRODUCT_DATA)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from lawrose.cache.aside import CacheAsideOrchestrator, Factory
from lawrose.cache.bulk import BulkOps
from lawrose.cache.errors import BACKEND_ERRORS
from lawrose.cache.keys import KeyCodec
from lawrose.cache.redis import get_redis
from lawrose.cache.scanner import PatternScanner
from lawrose.cache.stats import StatsCollector
from lawrose.cache.store import CacheStore
from lawrose.cache.ttl import TTLPolicy
from lawrose.cache.types import (
    BulkCacheItem,
    CacheKeyType,
    CacheSearchResult,
    CacheSetOptions,
    CacheStats,
    KeyLike,
)
from lawrose.config import Settings, settings
from lawrose.observability.metrics import record_cache_error

if TYPE_CHECKING:
    from redis.asyncio import Redis

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CacheService:
    """Typed, namespaced cache over a Redis client."""

    def __init__(
        self,
        client: Redis,
        config: Settings | None = None,
        *,
        ttl_policy: TTLPolicy | None = None,
        single_flight: bool | None = None,
    ):
        config = config or settings
        self.client = client
        self.codec = KeyCodec(config.redis_key_prefix)
        self.ttl_policy = ttl_policy or TTLPolicy.from_settings(config)
        self.store = CacheStore(client, self.codec, self.ttl_policy)
        self.bulk = BulkOps(client, self.codec, self.ttl_policy)
        self.scanner = PatternScanner(client, self.codec, self.bulk)
        self.aside = CacheAsideOrchestrator(
            self.store,
            self.codec,
            single_flight=config.cache_single_flight if single_flight is None else single_flight,
        )
        self.stats = StatsCollector(client, self.store)

    # -------------------------------------------------------------------------
    # Single-key operations
    # -------------------------------------------------------------------------

    async def set(self, key: KeyLike, value: Any, options: CacheSetOptions | None = None) -> bool:
        return await self.store.set(key, value, options)

    async def get(self, key: KeyLike, model: type[T] | Any | None = None) -> T | Any | None:
        return await self.store.get(key, model)

    async def delete(self, key: KeyLike) -> bool:
        return await self.store.delete(key)

    async def exists(self, key: KeyLike) -> bool:
        return await self.store.exists(key)

    async def get_ttl(self, key: KeyLike) -> int:
        return await self.store.get_ttl(key)

    async def expire(self, key: KeyLike, ttl: int) -> bool:
        return await self.store.expire(key, ttl)

    async def increment(
        self, key: KeyLike, amount: int = 1, ttl: int | None = None
    ) -> int | None:
        return await self.store.increment(key, amount, ttl)

    async def decrement(
        self, key: KeyLike, amount: int = 1, ttl: int | None = None
    ) -> int | None:
        return await self.store.decrement(key, amount, ttl)

    # -------------------------------------------------------------------------
    # Bulk operations
    # -------------------------------------------------------------------------

    async def mset(self, items: Sequence[BulkCacheItem[Any]]) -> bool:
        return await self.bulk.mset(items)

    async def mget(
        self, keys: Sequence[KeyLike], model: type[T] | Any | None = None
    ) -> list[T | Any | None]:
        return await self.bulk.mget(keys, model)

    async def mdel(self, keys: Sequence[KeyLike]) -> int:
        return await self.bulk.mdel(keys)

    # -------------------------------------------------------------------------
    # Pattern search and invalidation
    # -------------------------------------------------------------------------

    async def search_keys(self, pattern: str, count: int | None = None) -> list[str]:
        return await self.scanner.search_keys(pattern, count)

    async def search_keys_with_values(
        self,
        pattern: str,
        model: type[T] | Any | None = None,
        count: int | None = None,
    ) -> list[CacheSearchResult[Any]]:
        return await self.scanner.search_keys_with_values(pattern, model, count)

    async def clear_pattern(self, pattern: str) -> int:
        return await self.scanner.clear_pattern(pattern)

    async def clear_cache_type(self, key_type: CacheKeyType) -> int:
        return await self.scanner.clear_cache_type(key_type)

    # -------------------------------------------------------------------------
    # Cache-aside
    # -------------------------------------------------------------------------

    async def get_or_set(
        self,
        key: KeyLike,
        factory: Factory[T],
        options: CacheSetOptions | None = None,
        model: type[T] | Any | None = None,
    ) -> T | None:
        return await self.aside.get_or_set(key, factory, options, model)

    # -------------------------------------------------------------------------
    # Introspection and administration
    # -------------------------------------------------------------------------

    async def get_stats(self) -> CacheStats:
        return await self.stats.get_stats()

    async def health_check(self) -> bool:
        return await self.stats.health_check()

    async def flush_all(self) -> bool:
        """Drop every key in the current database. Administrative use only."""
        try:
            await self.client.flushdb()
        except BACKEND_ERRORS as e:
            record_cache_error("flush")
            logger.error(f"Failed to flush cache: {e}")
            return False
        logger.warning("All cache data has been flushed")
        return True


# Process-wide instance
_cache_service: CacheService | None = None


async def get_cache_service() -> CacheService:
    """Get or create the shared CacheService bound to the shared client."""
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService(await get_redis())
    return _cache_service


def reset_cache_service() -> None:
    """Forget the shared instance (after close_redis, or in tests)."""
    global _cache_service
    _cache_service = None
