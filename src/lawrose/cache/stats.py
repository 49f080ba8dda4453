"""Backend introspection and health probing."""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

from lawrose.cache.errors import BACKEND_ERRORS
from lawrose.cache.types import CacheSetOptions, CacheStats
from lawrose.observability.metrics import record_cache_error

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from lawrose.cache.store import CacheStore

logger = logging.getLogger(__name__)

HEALTH_CHECK_KEY = "health_check"
HEALTH_CHECK_TTL = 5


class StatsCollector:
    """Key count, memory usage and a read/write health check."""

    def __init__(self, client: Redis, store: CacheStore):
        self.client = client
        self.store = store

    async def get_stats(self) -> CacheStats:
        """Backend key count and memory; zeroed stats if the backend fails."""
        try:
            info = await self.client.info("memory")
            total_keys = int(await self.client.dbsize())
        except BACKEND_ERRORS as e:
            record_cache_error("stats")
            logger.error(f"Failed to get cache stats: {e}")
            return CacheStats()

        memory_usage = str(info.get("used_memory_human", "Unknown")).strip()
        return CacheStats(total_keys=total_keys, memory_usage=memory_usage)

    async def health_check(self) -> bool:
        """Round-trip a short-lived check key through the store."""
        check_key = f"{HEALTH_CHECK_KEY}:{uuid.uuid4().hex}"
        check_value = str(time.time_ns())

        written = await self.store.set(
            check_key, check_value, CacheSetOptions(ttl=HEALTH_CHECK_TTL)
        )
        if not written:
            logger.error("Cache health check failed: check write did not land")
            return False

        read_back = await self.store.get(check_key)
        await self.store.delete(check_key)

        healthy = read_back == check_value
        if not healthy:
            logger.error("Cache health check failed: check read did not match write")
        return healthy
