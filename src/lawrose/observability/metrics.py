"""Prometheus metrics for the Lawrose cache layer.

Provides:
- Hit / miss counters per key category
- Error counters per cache operation
- Operation latency histogram
- Source-of-truth loads made by get_or_set

Usage:
    from lawrose.observability.metrics import record_cache_hit

    record_cache_hit("product_data")
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import REGISTRY, Counter, Histogram, generate_latest

from lawrose.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CacheMetrics:
    """Registry for cache metrics."""

    cache_hits_total: Counter | None = None
    cache_misses_total: Counter | None = None
    cache_errors_total: Counter | None = None
    cache_operation_duration_seconds: Histogram | None = None
    cache_factory_calls_total: Counter | None = None

    _initialized: bool = field(default=False, repr=False)
    _registry: Any = field(default=None, repr=False)

    def initialize(self) -> None:
        """Register metrics with the default Prometheus registry."""
        if self._initialized:
            return

        if not settings.enable_metrics:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = REGISTRY

        self.cache_hits_total = Counter(
            "lawrose_cache_hits_total",
            "Cache hits",
            ["key_type"],
        )
        self.cache_misses_total = Counter(
            "lawrose_cache_misses_total",
            "Cache misses",
            ["key_type"],
        )
        self.cache_errors_total = Counter(
            "lawrose_cache_errors_total",
            "Cache operations that failed and fell back",
            ["operation"],
        )
        self.cache_operation_duration_seconds = Histogram(
            "lawrose_cache_operation_duration_seconds",
            "Cache operation latency in seconds",
            ["operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5),
        )
        self.cache_factory_calls_total = Counter(
            "lawrose_cache_factory_calls_total",
            "Source-of-truth loads performed on cache miss",
            ["key_type"],
        )

        self._initialized = True
        logger.info("Prometheus cache metrics initialized")

    def generate_latest(self) -> bytes:
        """Render metrics in Prometheus exposition format."""
        if self._registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)


metrics_registry = CacheMetrics()


def get_metrics() -> CacheMetrics:
    """Get the global cache metrics, initializing on first access."""
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry


def record_cache_hit(key_type: str) -> None:
    metrics = get_metrics()
    if metrics.cache_hits_total:
        metrics.cache_hits_total.labels(key_type=key_type).inc()


def record_cache_miss(key_type: str) -> None:
    metrics = get_metrics()
    if metrics.cache_misses_total:
        metrics.cache_misses_total.labels(key_type=key_type).inc()


def record_cache_error(operation: str) -> None:
    metrics = get_metrics()
    if metrics.cache_errors_total:
        metrics.cache_errors_total.labels(operation=operation).inc()


def record_cache_operation(operation: str, duration: float) -> None:
    """Record cache operation duration.

    Args:
        operation: Cache operation (get, set, mget, scan, ...)
        duration: Operation duration in seconds
    """
    metrics = get_metrics()
    if metrics.cache_operation_duration_seconds:
        metrics.cache_operation_duration_seconds.labels(operation=operation).observe(duration)


def record_factory_call(key_type: str) -> None:
    metrics = get_metrics()
    if metrics.cache_factory_calls_total:
        metrics.cache_factory_calls_total.labels(key_type=key_type).inc()


@contextmanager
def timed_operation(operation: str) -> Iterator[None]:
    """Time the enclosed block as one cache operation."""
    start = time.perf_counter()
    try:
        yield
    finally:
        record_cache_operation(operation, time.perf_counter() - start)
