"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    MetricsBackend,
    NullMetrics,
    PrometheusMetrics,
    sanitize_metric_name,
)

__all__ = [
    "MetricsBackend",
    "NullMetrics",
    "PrometheusMetrics",
    "sanitize_metric_name",
]
