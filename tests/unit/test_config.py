"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from lawrose.cache.ttl import TTLPolicy
from lawrose.cache.types import CacheKeyType
from lawrose.config import Settings


class TestDefaults:
    def test_connection_defaults(self) -> None:
        config = Settings()
        assert config.redis_connect_timeout == 10.0
        assert config.redis_command_timeout == 5.0
        assert config.redis_max_retries == 3
        assert config.redis_key_prefix == "lawrose:"
        assert config.redis_default_ttl == 3600
        assert config.cache_single_flight is False

    def test_ttl_table_covers_every_category(self) -> None:
        table = Settings().ttl_table()
        assert set(table) == {key_type.value for key_type in CacheKeyType}
        assert table["rate_limit"] == 60
        assert table["otp_codes"] == 300
        assert table["user_data"] == 1800


class TestEnvironment:
    def test_reads_unprefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIS_URL", "rediss://cache.internal:6380/1")
        monkeypatch.setenv("REDIS_KEY_PREFIX", "shop:")
        monkeypatch.setenv("REDIS_SESSION_TTL", "7200")
        monkeypatch.setenv("CACHE_SINGLE_FLIGHT", "true")

        config = Settings()

        assert config.redis_url == "rediss://cache.internal:6380/1"
        assert config.redis_key_prefix == "shop:"
        assert config.redis_session_ttl == 7200
        assert config.cache_single_flight is True

    def test_rejects_non_redis_url(self) -> None:
        with pytest.raises(ValidationError):
            Settings(redis_url="http://localhost:6379")

    def test_rejects_non_positive_default_ttl(self) -> None:
        with pytest.raises(ValidationError):
            Settings(redis_default_ttl=0)

    def test_zero_category_ttl_falls_back_to_default(self) -> None:
        policy = TTLPolicy.from_settings(Settings(redis_default_ttl=900, redis_rate_limit_ttl=0))
        assert policy.resolve(CacheKeyType.RATE_LIMIT) == 900
        assert policy.resolve(CacheKeyType.SESSION) == 86400
