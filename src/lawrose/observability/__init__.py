"""Observability for Lawrose: structured logging and Prometheus cache metrics."""

from lawrose.observability.logging import LogContext, configure_logging
from lawrose.observability.metrics import CacheMetrics, get_metrics

__all__ = [
    "CacheMetrics",
    "LogContext",
    "configure_logging",
    "get_metrics",
]
