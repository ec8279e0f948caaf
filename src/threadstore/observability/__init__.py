"""Observability: structured logging with correlation IDs and Prometheus metrics."""

from threadstore.observability.logging import get_logger, setup_logging
from threadstore.observability.metrics import MetricsCollector, get_metrics_collector

__all__ = [
    "setup_logging",
    "get_logger",
    "MetricsCollector",
    "get_metrics_collector",
]
