"""Multi-key operations, each issued as a single round trip."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from lawrose.cache import serialization
from lawrose.cache.errors import (
    BACKEND_ERRORS,
    CacheDeserializationError,
    CacheSerializationError,
)
from lawrose.cache.types import BulkCacheItem, KeyLike
from lawrose.observability.metrics import record_cache_error, timed_operation

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from lawrose.cache.keys import KeyCodec
    from lawrose.cache.ttl import TTLPolicy

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BulkOps:
    """Pipelined multi-set, MGET and multi-key DEL."""

    def __init__(self, client: Redis, codec: KeyCodec, ttl_policy: TTLPolicy):
        self.client = client
        self.codec = codec
        self.ttl_policy = ttl_policy

    async def mset(self, items: Sequence[BulkCacheItem[Any]]) -> bool:
        """Write all items in one pipeline.

        True only if every write succeeded. On False the caller cannot assume
        which subset, if any, landed.
        """
        if not items:
            return True

        try:
            encoded = [
                (
                    self.codec.render(item.key),
                    self.ttl_policy.resolve_for(item.key, item.ttl),
                    serialization.dumps(item.value),
                )
                for item in items
            ]
        except CacheSerializationError as e:
            record_cache_error("mset")
            logger.error(f"Failed to serialize bulk cache items: {e}")
            return False

        try:
            with timed_operation("mset"):
                async with self.client.pipeline(transaction=False) as pipe:
                    for cache_key, ttl, payload in encoded:
                        pipe.set(cache_key, payload, ex=ttl)
                    results = await pipe.execute(raise_on_error=False)
        except BACKEND_ERRORS as e:
            record_cache_error("mset")
            logger.error(f"Failed to set multiple cache keys: {e}")
            return False

        failed = [r for r in results if isinstance(r, Exception) or not r]
        if failed:
            record_cache_error("mset")
            logger.error(f"Bulk cache set: {len(failed)} of {len(items)} writes failed")
            return False

        logger.debug(f"Bulk cache set: {len(items)} items")
        return True

    async def mget(
        self, keys: Sequence[KeyLike], model: type[T] | Any | None = None
    ) -> list[T | Any | None]:
        """Values in input order; each position is None on miss or bad payload."""
        if not keys:
            return []

        cache_keys = self.codec.render_many(list(keys))
        try:
            with timed_operation("mget"):
                raw_values = await self.client.mget(cache_keys)
        except UnicodeDecodeError as e:
            # a strict-decoding client fails the whole reply, not one slot
            record_cache_error("decode")
            logger.warning(f"Discarding non-UTF-8 reply for {len(keys)} cache keys: {e}")
            return [None] * len(keys)
        except BACKEND_ERRORS as e:
            record_cache_error("mget")
            logger.error(f"Failed to get multiple cache keys: {e}")
            return [None] * len(keys)

        values: list[T | Any | None] = []
        for cache_key, raw in zip(cache_keys, raw_values):
            if raw is None:
                values.append(None)
                continue
            try:
                values.append(serialization.loads(raw, model))
            except CacheDeserializationError as e:
                logger.warning(f"Discarding undecodable cache entry {cache_key}: {e}")
                values.append(None)
        return values

    async def mdel(self, keys: Sequence[KeyLike]) -> int:
        """Delete keys; returns how many existed."""
        if not keys:
            return 0

        cache_keys = self.codec.render_many(list(keys))
        try:
            with timed_operation("mdel"):
                removed = int(await self.client.delete(*cache_keys))
        except BACKEND_ERRORS as e:
            record_cache_error("mdel")
            logger.error(f"Failed to delete multiple cache keys: {e}")
            return 0

        if removed:
            logger.debug(f"Bulk cache deleted: {removed} keys")
        return removed
