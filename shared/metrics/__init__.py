"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    HTTPMetrics,
    CatalogMetrics,
    setup_metrics,
    get_metrics_handler,
)

__all__ = [
    "HTTPMetrics",
    "CatalogMetrics",
    "setup_metrics",
    "get_metrics_handler",
]
