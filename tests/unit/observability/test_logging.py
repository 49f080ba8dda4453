"""Tests for structured logging."""

import json
import logging
import sys
from collections.abc import Iterator

import pytest

from lawrose.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    correlation_id_var,
)


def _record(message: str = "Cache hit: lawrose:session:s1", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="lawrose.cache.store",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg=message,
        args=None,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    redis_level = logging.getLogger("redis").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("redis").setLevel(redis_level)


class TestJsonFormatter:
    def test_basic_fields(self) -> None:
        """One JSON object per record with the standard fields."""
        data = json.loads(JsonFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "lawrose.cache.store"
        assert data["message"] == "Cache hit: lawrose:session:s1"
        assert data["line"] == 42
        assert "correlation_id" not in data

    def test_extra_fields_are_included(self) -> None:
        data = json.loads(JsonFormatter().format(_record(cache_key="lawrose:session:s1")))
        assert data["cache_key"] == "lawrose:session:s1"

    def test_correlation_id(self) -> None:
        with LogContext(correlation_id="req-42"):
            data = json.loads(JsonFormatter().format(_record()))
        assert data["correlation_id"] == "req-42"

    def test_exception_block(self) -> None:
        try:
            raise ConnectionError("refused")
        except ConnectionError:
            record = _record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))
        assert data["exception"]["type"] == "ConnectionError"
        assert data["exception"]["message"] == "refused"
        assert "Traceback" in data["exception"]["traceback"]


class TestConsoleFormatter:
    def test_plain_line(self) -> None:
        line = ConsoleFormatter(use_colors=False).format(_record())
        assert "| INFO     | lawrose.cache.store | Cache hit: lawrose:session:s1" in line

    def test_correlation_suffix(self) -> None:
        with LogContext(correlation_id="req-7"):
            line = ConsoleFormatter(use_colors=False).format(_record())
        assert line.endswith("| cid=req-7")


class TestLogContext:
    def test_resets_on_exit(self) -> None:
        with LogContext(correlation_id="outer"):
            with LogContext(correlation_id="inner"):
                assert correlation_id_var.get() == "inner"
            assert correlation_id_var.get() == "outer"
        assert correlation_id_var.get() == ""


class TestConfigureLogging:
    @pytest.mark.usefixtures("restore_root_logger")
    def test_installs_single_handler(self) -> None:
        configure_logging(json_format=True, level="DEBUG")
        configure_logging(json_format=True, level="DEBUG")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("redis").level == logging.WARNING

    @pytest.mark.usefixtures("restore_root_logger")
    def test_console_format(self) -> None:
        configure_logging(json_format=False, level="warning")
        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)
        assert root.level == logging.WARNING
