"""Cache-aside reads: serve from cache, or load from the source of truth and
repopulate.

Cache failures degrade to a direct load. Exceptions raised by the loader are
the caller's to handle and propagate unchanged.

Concurrent misses for one key each call their own loader unless single-flight
is enabled, in which case they share the first caller's load. Neither mode
orders a read against a concurrent invalidation: a load that read the source
of truth before a writer committed may repopulate stale data, so writers must
invalidate after their commit.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from lawrose.cache import serialization
from lawrose.cache.types import CacheSetOptions, KeyLike
from lawrose.observability.metrics import record_factory_call

if TYPE_CHECKING:
    from lawrose.cache.keys import KeyCodec
    from lawrose.cache.store import CacheStore

T = TypeVar("T")

# Source-of-truth loader supplied by the caller
Factory = Callable[[], Awaitable[T | None]]

logger = logging.getLogger(__name__)


class CacheAsideOrchestrator:
    """Implements get_or_set on top of a CacheStore."""

    def __init__(self, store: CacheStore, codec: KeyCodec, single_flight: bool = False):
        self.store = store
        self.codec = codec
        self.single_flight = single_flight
        self._in_flight: dict[str, asyncio.Future[Any]] = {}

    async def get_or_set(
        self,
        key: KeyLike,
        factory: Factory[T],
        options: CacheSetOptions | None = None,
        model: type[T] | Any | None = None,
    ) -> T | None:
        """Return the cached value, or load it with ``factory`` and cache it.

        A None from the factory is returned as-is and not cached. The loaded
        value is returned even if writing it back to the cache failed. With
        ``model`` the loaded value is validated into it before caching, so a
        cold and a warm read return the same type; a loaded value that does
        not match ``model`` raises pydantic.ValidationError and is not cached.
        """
        cached = await self.store.get(key, model)
        if cached is not None:
            return cached  # type: ignore[no-any-return]

        if not self.single_flight:
            return await self._load(key, factory, options, model)

        cache_key = self.codec.render(key)
        pending = self._in_flight.get(cache_key)
        if pending is not None:
            logger.debug(f"Joining in-flight load for {cache_key}")
            return await asyncio.shield(pending)  # type: ignore[no-any-return]

        task = asyncio.ensure_future(self._load(key, factory, options, model))
        self._in_flight[cache_key] = task
        task.add_done_callback(lambda done: self._forget(cache_key, done))
        return await asyncio.shield(task)

    async def _load(
        self,
        key: KeyLike,
        factory: Factory[T],
        options: CacheSetOptions | None,
        model: type[T] | Any | None,
    ) -> T | None:
        record_factory_call(self.codec.key_type_of(key))
        value = await factory()
        if value is None:
            return None
        if model is not None:
            value = serialization.coerce(value, model)
        await self.store.set(key, value, options)
        return value

    def _forget(self, cache_key: str, done: asyncio.Future[Any]) -> None:
        if not done.cancelled():
            # mark a failure as retrieved even if every waiter was cancelled
            done.exception()
        if self._in_flight.get(cache_key) is done:
            del self._in_flight[cache_key]

    @property
    def in_flight(self) -> int:
        """Number of loads currently shared by single-flight waiters."""
        return len(self._in_flight)
