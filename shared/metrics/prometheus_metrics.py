"""Prometheus metrics backend for context loggers.

Collectors are created on first use, keyed by registry and metric name, so
backends sharing a registry share its collectors. Metric names such
as ``api.api_calls.success`` are sanitised into Prometheus form
(``api_api_calls_success``) and the label set is fixed by the first call.
"""

import re
import threading
import weakref
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    REGISTRY,
    CollectorRegistry,
)

_INVALID_METRIC_CHARS = re.compile(r"[^a-zA-Z0-9_:]")
_INVALID_LABEL_CHARS = re.compile(r"[^a-zA-Z0-9_]")

# Histogram buckets per distribution unit
UNIT_BUCKETS = {
    "millisecond": [5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
    "second": [0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
    "character": [25, 50, 100, 150, 200, 300, 500, 1000],
}

# Collectors already registered, per registry, shared by every backend on it
_COLLECTORS: "weakref.WeakKeyDictionary[CollectorRegistry, Dict[str, Tuple[Any, List[str]]]]" = (
    weakref.WeakKeyDictionary()
)
_COLLECTORS_LOCK = threading.Lock()


class MetricsBackend(Protocol):
    """Optional metrics capability used by the logger's track_* helpers."""

    def increment_counter(self, name: str, value: float, tags: Mapping[str, Any]) -> None:
        ...

    def set_gauge(self, name: str, value: float, tags: Mapping[str, Any]) -> None:
        ...

    def record_distribution(
        self, name: str, value: float, unit: Optional[str], tags: Mapping[str, Any]
    ) -> None:
        ...


class NullMetrics:
    """Metrics backend used when metrics are disabled."""

    def increment_counter(self, name, value, tags) -> None:
        pass

    def set_gauge(self, name, value, tags) -> None:
        pass

    def record_distribution(self, name, value, unit, tags) -> None:
        pass


def sanitize_metric_name(name: str) -> str:
    """Convert a dotted metric name into a valid Prometheus metric name."""
    sanitized = _INVALID_METRIC_CHARS.sub("_", name)
    if sanitized[:1].isdigit():
        sanitized = f"_{sanitized}"
    return sanitized


def sanitize_label_name(name: str) -> str:
    """Convert a tag key into a valid Prometheus label name."""
    sanitized = _INVALID_LABEL_CHARS.sub("_", name)
    if sanitized[:1].isdigit():
        sanitized = f"_{sanitized}"
    return sanitized


class PrometheusMetrics:
    """Metrics backend that records into a Prometheus registry."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize the backend.

        Args:
            registry: Prometheus registry to use
        """
        self._registry = registry

    def increment_counter(self, name: str, value: float, tags: Mapping[str, Any]) -> None:
        self._child(Counter, name, tags).inc(value)

    def set_gauge(self, name: str, value: float, tags: Mapping[str, Any]) -> None:
        self._child(Gauge, name, tags).set(value)

    def record_distribution(
        self, name: str, value: float, unit: Optional[str], tags: Mapping[str, Any]
    ) -> None:
        self._child(Histogram, name, tags, unit=unit).observe(value)

    def _child(self, kind: type, name: str, tags: Mapping[str, Any], unit: Optional[str] = None) -> Any:
        metric_name = sanitize_metric_name(name)
        labels = {sanitize_label_name(key): str(value) for key, value in tags.items()}

        with _COLLECTORS_LOCK:
            collectors = _COLLECTORS.setdefault(self._registry, {})
            entry = collectors.get(metric_name)
            if entry is None:
                label_names = sorted(labels)
                options: Dict[str, Any] = {}
                if kind is Histogram and unit in UNIT_BUCKETS:
                    options["buckets"] = UNIT_BUCKETS[unit]
                collector = kind(
                    metric_name,
                    f"{kind.__name__} for {name}",
                    label_names,
                    registry=self._registry,
                    unit=sanitize_label_name(unit) if unit else "",
                    **options,
                )
                entry = (collector, label_names)
                collectors[metric_name] = entry

        collector, label_names = entry
        if not isinstance(collector, kind):
            raise TypeError(
                f"Metric {name!r} is already registered as a {type(collector).__name__}"
            )
        if not label_names:
            if labels:
                raise ValueError(f"Metric {name!r} was registered without labels")
            return collector
        return collector.labels(**labels)
