"""Prometheus metrics for search index sync."""

from prometheus_client import Counter, Histogram

search_index_latency_ms = Histogram(
    "search_index_latency_ms",
    "Search index notification latency in milliseconds",
    ["operation", "outcome"],
    buckets=[1, 5, 10, 50, 100, 200, 500, 1000, 2000, 4000],
)

search_index_errors_total = Counter(
    "search_index_errors_total",
    "Total search index notification errors",
    ["operation", "reason"],
)


class PrometheusIndexMetrics:
    """Prometheus-based search index metrics implementation."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record notification latency."""
        search_index_latency_ms.labels(operation=operation, outcome=outcome).observe(latency_ms)

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment error counter."""
        search_index_errors_total.labels(operation=operation, reason=reason).inc()
