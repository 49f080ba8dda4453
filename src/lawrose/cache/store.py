"""Single-key cache operations.

Every public method is total: backend failures, encoding failures and
decoding failures are logged and turned into the method's fallback value.
A read therefore cannot distinguish a miss from a broken payload or an
unreachable backend, and callers must go to the source of truth on None.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from lawrose.cache import serialization
from lawrose.cache.errors import (
    BACKEND_ERRORS,
    CacheDeserializationError,
    CacheSerializationError,
)
from lawrose.cache.types import CacheSetOptions, KeyLike
from lawrose.observability.metrics import (
    record_cache_error,
    record_cache_hit,
    record_cache_miss,
    timed_operation,
)

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from lawrose.cache.keys import KeyCodec
    from lawrose.cache.ttl import TTLPolicy

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CacheStore:
    """Get/set/delete and counters against one backend client."""

    def __init__(self, client: Redis, codec: KeyCodec, ttl_policy: TTLPolicy):
        self.client = client
        self.codec = codec
        self.ttl_policy = ttl_policy

    async def set(self, key: KeyLike, value: Any, options: CacheSetOptions | None = None) -> bool:
        """Write a value with its resolved TTL.

        With ``nx`` the write only lands if the key is absent, with ``xx`` only
        if it is present. Returns whether the write took effect.
        """
        options = options or CacheSetOptions()
        cache_key = self.codec.render(key)
        ttl = self.ttl_policy.resolve_for(key, options.ttl)

        try:
            payload = serialization.dumps(value)
        except CacheSerializationError as e:
            record_cache_error("set")
            logger.error(f"Failed to serialize value for {cache_key}: {e}")
            return False

        try:
            with timed_operation("set"):
                result = await self.client.set(
                    cache_key, payload, ex=ttl, nx=options.nx, xx=options.xx
                )
        except BACKEND_ERRORS as e:
            record_cache_error("set")
            logger.error(f"Failed to set cache key {cache_key}: {e}")
            return False

        success = bool(result)
        if success:
            logger.debug(f"Cache set: {cache_key} (TTL: {ttl}s)")
        else:
            logger.debug(f"Cache set skipped by write condition: {cache_key}")
        return success

    async def get(self, key: KeyLike, model: type[T] | Any | None = None) -> T | Any | None:
        """Read a value; None on miss, undecodable payload or backend failure."""
        cache_key = self.codec.render(key)
        key_type = self.codec.key_type_of(key)

        try:
            with timed_operation("get"):
                raw = await self.client.get(cache_key)
        except UnicodeDecodeError as e:
            record_cache_error("decode")
            logger.warning(f"Discarding non-UTF-8 cache entry {cache_key}: {e}")
            return None
        except BACKEND_ERRORS as e:
            record_cache_error("get")
            logger.error(f"Failed to get cache key {cache_key}: {e}")
            return None

        if raw is None:
            record_cache_miss(key_type)
            logger.debug(f"Cache miss: {cache_key}")
            return None

        try:
            value = serialization.loads(raw, model)
        except CacheDeserializationError as e:
            record_cache_error("decode")
            logger.warning(f"Discarding undecodable cache entry {cache_key}: {e}")
            return None

        record_cache_hit(key_type)
        logger.debug(f"Cache hit: {cache_key}")
        return value

    async def delete(self, key: KeyLike) -> bool:
        """Delete a key; True if it existed."""
        cache_key = self.codec.render(key)
        try:
            with timed_operation("delete"):
                removed = await self.client.delete(cache_key)
        except BACKEND_ERRORS as e:
            record_cache_error("delete")
            logger.error(f"Failed to delete cache key {cache_key}: {e}")
            return False

        if removed:
            logger.debug(f"Cache deleted: {cache_key}")
        return removed > 0

    async def exists(self, key: KeyLike) -> bool:
        cache_key = self.codec.render(key)
        try:
            return bool(await self.client.exists(cache_key))
        except BACKEND_ERRORS as e:
            record_cache_error("exists")
            logger.error(f"Failed to check cache key existence {cache_key}: {e}")
            return False

    async def get_ttl(self, key: KeyLike) -> int:
        """Remaining TTL in seconds; -1 if the key is absent or has no TTL."""
        cache_key = self.codec.render(key)
        try:
            ttl = int(await self.client.ttl(cache_key))
        except BACKEND_ERRORS as e:
            record_cache_error("ttl")
            logger.error(f"Failed to get TTL for {cache_key}: {e}")
            return -1
        return ttl if ttl >= 0 else -1

    async def expire(self, key: KeyLike, ttl: int) -> bool:
        """Reset the TTL of an existing key; False if it does not exist."""
        cache_key = self.codec.render(key)
        try:
            return bool(await self.client.expire(cache_key, ttl))
        except BACKEND_ERRORS as e:
            record_cache_error("expire")
            logger.error(f"Failed to set expiration on {cache_key}: {e}")
            return False

    async def increment(
        self, key: KeyLike, amount: int = 1, ttl: int | None = None
    ) -> int | None:
        """Atomically add ``amount``; a missing key counts from zero.

        With ``ttl`` the key's expiry is reset to ``ttl`` seconds in the same
        MULTI block, so a counter lives for ``ttl`` after its last change.
        """
        return await self._count(key, amount, ttl, "incr")

    async def decrement(
        self, key: KeyLike, amount: int = 1, ttl: int | None = None
    ) -> int | None:
        """Atomically subtract ``amount``; a missing key counts from zero."""
        return await self._count(key, -amount, ttl, "decr")

    async def _count(
        self, key: KeyLike, amount: int, ttl: int | None, operation: str
    ) -> int | None:
        cache_key = self.codec.render(key)
        try:
            with timed_operation(operation):
                if ttl is None:
                    result = int(await self.client.incrby(cache_key, amount))
                else:
                    async with self.client.pipeline(transaction=True) as pipe:
                        pipe.incrby(cache_key, amount)
                        pipe.expire(cache_key, ttl)
                        result = int((await pipe.execute())[0])
        except BACKEND_ERRORS as e:
            record_cache_error(operation)
            logger.error(f"Failed to update counter {cache_key} by {amount}: {e}")
            return None
        logger.debug(f"Counter updated: {cache_key} by {amount} = {result}")
        return result
