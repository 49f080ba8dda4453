"""Global pytest fixtures.

Provides:
- fakeredis-backed async clients and CacheService instances
- An unreachable Redis client for outage behaviour
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fakeredis import FakeServer
from fakeredis import aioredis as fake_aioredis
from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from lawrose.cache.keys import KeyCodec
from lawrose.cache.service import CacheService
from lawrose.cache.ttl import TTLPolicy
from lawrose.config import Settings

TEST_PREFIX = "test:"


@pytest.fixture
def cache_settings() -> Settings:
    """Settings with a test prefix and the stock TTL table."""
    return Settings(redis_key_prefix=TEST_PREFIX, cache_single_flight=False)


@pytest.fixture
def codec() -> KeyCodec:
    return KeyCodec(TEST_PREFIX)


@pytest.fixture
def ttl_policy(cache_settings: Settings) -> TTLPolicy:
    return TTLPolicy.from_settings(cache_settings)


@pytest.fixture
def fake_server() -> FakeServer:
    """One in-memory server per test; clients attached to it share data."""
    return FakeServer()


@pytest_asyncio.fixture
async def fake_redis(fake_server: FakeServer) -> AsyncIterator[Redis]:
    """A clean in-memory Redis for each test, decoding responses strictly."""
    client = fake_aioredis.FakeRedis(server=fake_server, decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def cache(fake_redis: Redis, cache_settings: Settings) -> CacheService:
    return CacheService(fake_redis, cache_settings)


@pytest_asyncio.fixture
async def unreachable_redis() -> AsyncIterator[Redis]:
    """A client pointed at a closed port: every command fails to connect."""
    client = Redis(
        host="127.0.0.1",
        port=1,
        decode_responses=True,
        socket_connect_timeout=0.5,
        socket_timeout=0.5,
        retry=Retry(NoBackoff(), 0),
    )
    yield client
    await client.aclose()


@pytest.fixture
def offline_cache(unreachable_redis: Redis, cache_settings: Settings) -> CacheService:
    return CacheService(unreachable_redis, cache_settings)
