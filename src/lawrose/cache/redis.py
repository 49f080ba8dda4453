"""Redis client lifecycle for Lawrose.

One process-wide async client is shared by every cache component; redis-py
owns connection pooling and per-connection synchronization, so callers never
lock. Every command is bounded by the configured socket timeouts and a small
number of backoff retries.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import urlsplit

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from lawrose.cache.errors import BACKEND_ERRORS
from lawrose.config import Settings, settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Module-level shared client
_redis_client: Redis | None = None

CONNECTION_TEST_KEY = "connection_test"


def create_redis(config: Settings | None = None) -> Redis:
    """Build a Redis client from settings.

    TLS is selected by the URL scheme (rediss://). Replies that are not valid
    UTF-8 decode with replacement characters, so a foreign binary value fails
    JSON decoding for its own key instead of failing the whole reply.
    """
    config = config or settings
    retry = Retry(ExponentialBackoff(cap=2.0, base=0.05), retries=config.redis_max_retries)

    parts = urlsplit(config.redis_url)
    logger.info(
        "Redis configuration: "
        f"host={parts.hostname} port={parts.port or 6379} db={parts.path.lstrip('/') or '0'} "
        f"tls={parts.scheme == 'rediss'} password={'***' if parts.password else None}"
    )

    return redis.from_url(  # type: ignore[no-untyped-call]
        config.redis_url,
        encoding="utf-8",
        encoding_errors="replace",
        decode_responses=True,
        socket_connect_timeout=config.redis_connect_timeout,
        socket_timeout=config.redis_command_timeout,
        retry=retry,
        retry_on_error=[RedisConnectionError, RedisTimeoutError],
        health_check_interval=config.redis_health_check_interval,
    )


async def get_redis() -> Redis:
    """Get or create the shared Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = create_redis()
    return _redis_client


async def close_redis() -> None:
    """Close the shared Redis client."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


async def is_healthy(client: Redis) -> bool:
    """PING the backend."""
    try:
        return bool(await cast(Awaitable[Any], client.ping()))
    except BACKEND_ERRORS as e:
        logger.error(f"Redis health check failed: {e}")
        return False


async def verify_connection(client: Redis, key_prefix: str = "") -> str | None:
    """Startup check: ping, report the server version, smoke-test read/write.

    Returns the server version, or None if the backend is not usable.
    """
    test_key = f"{key_prefix}{CONNECTION_TEST_KEY}"
    try:
        await cast(Awaitable[Any], client.ping())
        info = await client.info("server")
        version = str(info.get("redis_version", "unknown"))
        logger.info(f"Connected to Redis server version: {version}")

        await client.set(test_key, "success", ex=60)
        value = await client.get(test_key)
        await client.delete(test_key)
    except BACKEND_ERRORS as e:
        logger.error(f"Redis initialization failed: {e}")
        return None

    if value != "success":
        logger.warning("Redis read/write test failed")
        return None

    logger.info("Redis read/write test passed")
    return version
