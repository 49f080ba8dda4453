"""Pattern search and bulk invalidation over the logical keyspace.

Patterns are relative to the global prefix: "product_data:*" scans
"{prefix}product_data:*". Enumeration always uses SCAN, never KEYS, so large
invalidations do not stall other clients; ``count`` is the per-batch hint
passed to SCAN, not a cap on results.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from lawrose.cache import serialization
from lawrose.cache.errors import BACKEND_ERRORS, CacheDeserializationError
from lawrose.cache.types import CacheKeyType, CacheSearchResult
from lawrose.observability.metrics import record_cache_error, timed_operation

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from lawrose.cache.bulk import BulkOps
    from lawrose.cache.keys import KeyCodec

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_SCAN_COUNT = 100

# Keys per DEL when clearing a pattern
DELETE_CHUNK_SIZE = 500


class PatternScanner:
    """Cursor-based key search and pattern invalidation."""

    def __init__(self, client: Redis, codec: KeyCodec, bulk: BulkOps):
        self.client = client
        self.codec = codec
        self.bulk = bulk

    async def search_keys(self, pattern: str, count: int | None = None) -> list[str]:
        """Logical keys matching ``pattern``, without the global prefix."""
        match = self.codec.pattern(pattern)
        found: dict[str, None] = {}

        try:
            with timed_operation("scan"):
                async for physical in self.client.scan_iter(
                    match=match, count=count or DEFAULT_SCAN_COUNT
                ):
                    # SCAN may return a key more than once
                    found[self.codec.strip(physical)] = None
        except BACKEND_ERRORS as e:
            record_cache_error("scan")
            logger.error(f"Failed to search cache keys for {match}: {e}")
            return []

        return list(found)

    async def search_keys_with_values(
        self,
        pattern: str,
        model: type[T] | Any | None = None,
        count: int | None = None,
    ) -> list[CacheSearchResult[Any]]:
        """Matching keys joined with their value and TTL.

        Values and TTLs are fetched in one pipeline. Keys that expired between
        the scan and the read, or whose payload cannot be decoded, are skipped.
        """
        keys = await self.search_keys(pattern, count)
        if not keys:
            return []

        cache_keys = self.codec.render_many(list(keys))
        try:
            with timed_operation("scan_values"):
                async with self.client.pipeline(transaction=False) as pipe:
                    for cache_key in cache_keys:
                        pipe.get(cache_key)
                        pipe.ttl(cache_key)
                    results = await pipe.execute(raise_on_error=False)
        except BACKEND_ERRORS as e:
            record_cache_error("scan_values")
            logger.error(f"Failed to search cache keys with values: {e}")
            return []

        found: list[CacheSearchResult[Any]] = []
        for i, key in enumerate(keys):
            raw, ttl = results[2 * i], results[2 * i + 1]
            if raw is None or isinstance(raw, Exception):
                continue
            try:
                value = serialization.loads(raw, model)
            except CacheDeserializationError:
                logger.debug(f"Skipping undecodable cache entry {cache_keys[i]}")
                continue
            found.append(
                CacheSearchResult(
                    key=key,
                    value=value,
                    ttl=ttl if isinstance(ttl, int) else -1,
                )
            )
        return found

    async def clear_pattern(self, pattern: str, count: int | None = None) -> int:
        """Delete every key matching ``pattern``; returns the number removed."""
        keys = await self.search_keys(pattern, count)
        if not keys:
            return 0

        removed = 0
        for start in range(0, len(keys), DELETE_CHUNK_SIZE):
            removed += await self.bulk.mdel(list(keys[start : start + DELETE_CHUNK_SIZE]))

        logger.info(f"Cleared {removed} cache keys matching pattern: {pattern}")
        return removed

    async def clear_cache_type(self, key_type: CacheKeyType) -> int:
        """Delete every key of one category."""
        return await self.clear_pattern(self.codec.type_pattern(key_type))
