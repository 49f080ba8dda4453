"""Integration test fixtures using Docker.

Provides a containerized Redis so expiry, SCAN and INFO run against the
real server. Skipped when Docker is unavailable.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from redis.asyncio import Redis

from lawrose.cache.redis import create_redis
from lawrose.cache.service import CacheService
from lawrose.config import Settings
from tests.integration.docker_utils import RedisServer, get_docker_client, run_redis


@pytest.fixture(scope="session")
def docker_client():
    """Create a Docker client or skip if Docker is unavailable."""
    try:
        client = get_docker_client()
        client.ping()
    except Exception as exc:
        pytest.skip(f"Docker not available: {exc}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def redis_server(docker_client) -> Iterator[RedisServer]:
    """Start Redis for the test session."""
    with run_redis(docker_client) as server:
        yield server


@pytest.fixture(scope="session")
def redis_settings(redis_server: RedisServer) -> Settings:
    return Settings(redis_url=redis_server.url(), redis_key_prefix="it:")


@pytest_asyncio.fixture
async def redis_client(redis_settings: Settings) -> AsyncIterator[Redis]:
    """Production-configured client against the container."""
    client = create_redis(redis_settings)
    yield client
    await client.flushdb()
    await client.aclose()


@pytest.fixture
def live_cache(redis_client: Redis, redis_settings: Settings) -> CacheService:
    return CacheService(redis_client, redis_settings)
