"""Prometheus metrics definitions and helpers.

Provides the metric definitions used by the catalog API.
"""

from functools import lru_cache
from typing import Callable

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    REGISTRY,
    CollectorRegistry,
)


class HTTPMetrics:
    """Request-level metrics recorded by the logging middleware."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize HTTP metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
            registry=registry,
        )

        self.requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method"],
            registry=registry,
        )


class CatalogMetrics:
    """Domain metrics for books and accounts."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize catalog metrics.

        Args:
            registry: Prometheus registry to use
        """
        # operation: created|updated|deleted
        self.book_writes = Counter(
            "catalog_book_writes_total",
            "Book write operations",
            ["operation"],
            registry=registry,
        )

        # outcome: created|conflict|invalid
        self.registrations = Counter(
            "catalog_registrations_total",
            "User registration attempts",
            ["outcome"],
            registry=registry,
        )

        # outcome: success|failure
        self.logins = Counter(
            "catalog_logins_total",
            "Login attempts",
            ["outcome"],
            registry=registry,
        )

        self.db_connections_active = Gauge(
            "database_connections_active",
            "Open database connections in pool",
            registry=registry,
        )

        self.db_connections_idle = Gauge(
            "database_connections_idle",
            "Idle database connections in pool",
            registry=registry,
        )


@lru_cache()
def setup_metrics() -> tuple[HTTPMetrics, CatalogMetrics]:
    """Create the process-wide metric instances once.

    Returns:
        Tuple of (HTTPMetrics, CatalogMetrics)
    """
    return HTTPMetrics(), CatalogMetrics()


def get_metrics_handler() -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(REGISTRY)

    return metrics_handler
