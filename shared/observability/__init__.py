"""Observability sinks for error and performance monitoring."""

from .sink import NullSink, ObservabilitySink
from .otel_sink import OpenTelemetrySink
from .sentry_sink import SentrySink, init_sentry

__all__ = [
    "NullSink",
    "ObservabilitySink",
    "OpenTelemetrySink",
    "SentrySink",
    "init_sentry",
]
