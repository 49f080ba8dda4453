"""Tests for the cache CLI commands."""

import logging
from collections.abc import Iterator
from unittest.mock import AsyncMock

import fakeredis
import orjson
import pytest
from fakeredis import FakeServer
from fakeredis import aioredis as fake_aioredis
from typer.testing import CliRunner

from lawrose.cli import app
from lawrose.cli import cache_cmd
from lawrose.config import Settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def server(monkeypatch: pytest.MonkeyPatch) -> FakeServer:
    """Point the CLI at an in-memory server under the test prefix."""
    fake_server = FakeServer()
    monkeypatch.setattr(cache_cmd, "settings", Settings(redis_key_prefix="test:"))
    monkeypatch.setattr(
        cache_cmd,
        "create_redis",
        lambda config: fake_aioredis.FakeRedis(server=fake_server, decode_responses=True),
    )
    return fake_server


@pytest.fixture
def seeded(server: FakeServer) -> fakeredis.FakeRedis:
    client = fakeredis.FakeRedis(server=server, decode_responses=True)
    client.set("test:product_data:detail:p1", '{"id":"p1"}', ex=600)
    client.set("test:product_data:list:abc", "[]", ex=600)
    client.set("test:session:s1", '{"user":"u1"}', ex=600)
    return client


class TestReadCommands:
    def test_health(self, server: FakeServer) -> None:
        result = runner.invoke(app, ["cache", "health"])
        assert result.exit_code == 0
        assert "Cache is healthy" in result.output

    def test_keys(self, seeded: fakeredis.FakeRedis) -> None:
        result = runner.invoke(app, ["cache", "keys", "product_data:*"])
        assert result.exit_code == 0
        assert "product_data:detail:p1" in result.output
        assert "product_data:list:abc" in result.output
        assert "session:s1" not in result.output

    def test_keys_with_values(self, seeded: fakeredis.FakeRedis) -> None:
        result = runner.invoke(app, ["cache", "keys", "session:*", "--values"])
        assert result.exit_code == 0
        assert "session:s1" in result.output
        assert '{"user":"u1"}' in result.output
        assert "1 key(s)" in result.output

    def test_keys_with_values_shows_data_category(self, seeded: fakeredis.FakeRedis) -> None:
        seeded.set("test:legacy", "1")
        result = runner.invoke(app, ["cache", "keys", "*", "--values"])
        assert result.exit_code == 0
        assert "product_data" in result.output
        assert "session" in result.output
        assert "raw" in result.output

    def test_keys_with_values_as_json(self, seeded: fakeredis.FakeRedis) -> None:
        result = runner.invoke(app, ["cache", "keys", "*", "--values", "--json"])
        assert result.exit_code == 0
        rows = [orjson.loads(line) for line in result.output.splitlines()]
        assert [row["key"] for row in rows] == [
            "product_data:detail:p1",
            "product_data:list:abc",
            "session:s1",
        ]
        assert rows[2]["value"] == {"user": "u1"}
        assert 0 < rows[2]["ttl"] <= 600

    def test_stats_as_json(
        self, seeded: fakeredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            fake_aioredis.FakeRedis, "info", AsyncMock(return_value={"used_memory_human": "1.52M"})
        )
        result = runner.invoke(app, ["cache", "stats", "--json"])
        assert result.exit_code == 0
        stats = orjson.loads(result.output)
        assert stats == {"total_keys": 3, "memory_usage": "1.52M"}


class TestWriteCommands:
    def test_clear_type(self, seeded: fakeredis.FakeRedis) -> None:
        result = runner.invoke(app, ["cache", "clear-type", "product_data"])
        assert result.exit_code == 0
        assert "Cleared 2 key(s) of type product_data" in result.output
        assert seeded.keys("*") == ["test:session:s1"]

    def test_clear_type_rejects_unknown_category(self, server: FakeServer) -> None:
        result = runner.invoke(app, ["cache", "clear-type", "widgets"])
        assert result.exit_code != 0

    def test_clear_pattern(self, seeded: fakeredis.FakeRedis) -> None:
        result = runner.invoke(app, ["cache", "clear-pattern", "product_data:list:*"])
        assert result.exit_code == 0
        assert "Cleared 1 key(s)" in result.output
        assert seeded.exists("test:product_data:detail:p1") == 1

    def test_flush_requires_confirmation(self, seeded: fakeredis.FakeRedis) -> None:
        result = runner.invoke(app, ["cache", "flush"])
        assert result.exit_code == 2
        assert seeded.dbsize() == 3

    def test_flush(self, seeded: fakeredis.FakeRedis) -> None:
        result = runner.invoke(app, ["cache", "flush", "--yes"])
        assert result.exit_code == 0
        assert seeded.dbsize() == 0
