"""Prometheus metrics for HTTP traffic and conversation persistence."""

from typing import Optional

from prometheus_client import Counter, Histogram, generate_latest

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

conversation_operations_total = Counter(
    "conversation_operations_total",
    "Total number of conversation store/load/list/delete operations",
    labelnames=["operation", "outcome"],
)


class MetricsCollector:
    """Collects and exposes Prometheus metrics."""

    def record_http_request(
        self,
        method: str,
        endpoint: str,
        status_code: int,
        duration_seconds: float,
    ) -> None:
        """Record an HTTP request event.

        Args:
            method: HTTP method (GET, DELETE, etc.)
            endpoint: Request endpoint path
            status_code: HTTP status code
            duration_seconds: Request duration in seconds

        Example:
            >>> collector = get_metrics_collector()
            >>> collector.record_http_request("GET", "/api/v1/projects/1/conversations", 200, 0.05)
        """
        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=status_code,
        ).inc()

        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint,
        ).observe(duration_seconds)

    def record_conversation_operation(self, operation: str, outcome: str) -> None:
        """Record the outcome of one conversation repository operation.

        Args:
            operation: One of store, load, list, delete
            outcome: success, not_found, invalid, storage_error or internal_error
        """
        conversation_operations_total.labels(operation=operation, outcome=outcome).inc()

    def generate_metrics(self) -> bytes:
        """Generate Prometheus metrics in text exposition format."""
        return generate_latest()


_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Get the process-wide MetricsCollector instance."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector
