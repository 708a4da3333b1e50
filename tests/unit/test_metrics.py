"""
Unit tests for metric tracking.

Tests cover:
- Namespacing and tag merging in the logger's track_* helpers
- Graceful degradation when the metrics backend is absent or failing
- The Prometheus metrics backend
"""

import pytest
from prometheus_client import CollectorRegistry

from shared.logging import Logger
from shared.metrics import NullMetrics, PrometheusMetrics, sanitize_metric_name
from tests.fakes import ExplodingMetrics, RecordingConsole, RecordingSink


class TestLoggerMetrics:
    """Test the logger's metric helpers."""

    def test_counter_is_namespaced_and_tagged(self, api_logger, metrics):
        api_logger.track_counter("api_calls.success", 1, {"endpoint": "/fact"})

        assert metrics.calls == [
            ("counter", "api.api_calls.success", 1, {"context": "API", "endpoint": "/fact"})
        ]

    def test_counter_defaults_to_one(self, api_logger, metrics):
        api_logger.track_counter("page.views")
        assert metrics.calls == [("counter", "api.page.views", 1, {"context": "API"})]

    def test_namespace_is_lowercased(self, metrics):
        logger = Logger("Performance", metrics=metrics, console=RecordingConsole())
        logger.track_gauge("queue_depth", 3)
        assert metrics.names("gauge") == ["performance.queue_depth"]

    def test_distribution_forwards_unit(self, api_logger, metrics):
        api_logger.track_distribution("response_time", 120, "millisecond", {"status": "success"})

        assert metrics.calls == [
            (
                "distribution",
                "api.response_time",
                120,
                "millisecond",
                {"context": "API", "status": "success"},
            )
        ]

    def test_metric_calls_do_not_touch_console_or_sink(self, api_logger, console, sink):
        api_logger.track_counter("page.views")
        assert console.lines == []
        assert sink.breadcrumbs == []

    def test_failing_backend_never_raises(self):
        logger = Logger("API", metrics=ExplodingMetrics(), console=RecordingConsole())

        logger.track_counter("api_calls.success", 1, {"endpoint": "/fact"})
        logger.track_gauge("current_fact_length", 80)
        logger.track_distribution("fact_length", 80, "character")

    def test_backend_without_metrics_methods_never_raises(self):
        logger = Logger("API", metrics=object(), console=RecordingConsole())

        logger.track_counter("api_calls.success")
        logger.track_gauge("current_fact_length", 80)
        logger.track_distribution("fact_length", 80)

    def test_null_metrics_is_the_default(self):
        logger = Logger("API", sink=RecordingSink(), console=RecordingConsole())
        logger.track_counter("page.views")

    def test_null_metrics_accepts_every_call(self):
        backend = NullMetrics()
        backend.increment_counter("a", 1, {})
        backend.set_gauge("a", 1, {})
        backend.record_distribution("a", 1, None, {})


class TestPrometheusMetrics:
    """Test the Prometheus backend."""

    @pytest.fixture
    def registry(self):
        return CollectorRegistry()

    @pytest.fixture
    def backend(self, registry):
        return PrometheusMetrics(registry)

    def test_counter(self, backend, registry):
        backend.increment_counter("api.api_calls.success", 1, {"context": "API", "endpoint": "/fact"})
        backend.increment_counter("api.api_calls.success", 2, {"context": "API", "endpoint": "/fact"})

        value = registry.get_sample_value(
            "api_api_calls_success_total", {"context": "API", "endpoint": "/fact"}
        )
        assert value == 3.0

    def test_gauge_keeps_last_value(self, backend, registry):
        backend.set_gauge("api.current_fact_length", 80, {"context": "API"})
        backend.set_gauge("api.current_fact_length", 120, {"context": "API"})

        assert registry.get_sample_value("api_current_fact_length", {"context": "API"}) == 120.0

    def test_distribution_with_unit(self, backend, registry):
        backend.record_distribution("api.response_time", 250, "millisecond", {"context": "API"})

        labels = {"context": "API"}
        assert registry.get_sample_value("api_response_time_millisecond_count", labels) == 1.0
        assert registry.get_sample_value("api_response_time_millisecond_sum", labels) == 250.0
        assert registry.get_sample_value(
            "api_response_time_millisecond_bucket", {**labels, "le": "250.0"}
        ) == 1.0
        assert registry.get_sample_value(
            "api_response_time_millisecond_bucket", {**labels, "le": "100.0"}
        ) == 0.0

    def test_label_values_are_stringified(self, backend, registry):
        backend.increment_counter("api.api_calls.failed", 1, {"status_code": 503})

        assert registry.get_sample_value("api_api_calls_failed_total", {"status_code": "503"}) == 1.0

    def test_unlabelled_metric(self, backend, registry):
        backend.increment_counter("jobs", 1, {})
        assert registry.get_sample_value("jobs_total") == 1.0

    def test_backends_share_collectors_of_one_registry(self, registry):
        first = Logger("Checkout", metrics=PrometheusMetrics(registry), console=RecordingConsole())
        second = Logger("Checkout", metrics=PrometheusMetrics(registry), console=RecordingConsole())

        first.track_counter("hits", 1)
        second.track_counter("hits", 1)

        assert registry.get_sample_value("checkout_hits_total", {"context": "Checkout"}) == 2.0

    def test_separate_registries_keep_separate_collectors(self, registry):
        other = CollectorRegistry()

        PrometheusMetrics(registry).increment_counter("jobs", 1, {})
        PrometheusMetrics(other).increment_counter("jobs", 3, {})

        assert registry.get_sample_value("jobs_total") == 1.0
        assert other.get_sample_value("jobs_total") == 3.0

    def test_label_mismatch_raises(self, backend):
        backend.increment_counter("api.page.views", 1, {"context": "API", "page": "home"})

        with pytest.raises(ValueError):
            backend.increment_counter("api.page.views", 1, {"context": "API"})

    def test_type_mismatch_raises(self, backend):
        backend.increment_counter("api.fact_length", 1, {"context": "API"})

        with pytest.raises(TypeError):
            backend.set_gauge("api.fact_length", 1, {"context": "API"})

    def test_mismatch_is_contained_by_logger(self, registry):
        logger = Logger("API", metrics=PrometheusMetrics(registry), console=RecordingConsole())

        logger.track_counter("page.views", 1, {"page": "home"})
        logger.track_counter("page.views", 1, {"other": "label"})

        assert registry.get_sample_value(
            "api_page_views_total", {"context": "API", "page": "home"}
        ) == 1.0


class TestSanitizeMetricName:
    """Test metric name conversion."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("api.api_calls.success", "api_api_calls_success"),
            ("performance.http.request-duration", "performance_http_request_duration"),
            ("5xx.errors", "_5xx_errors"),
            ("already_valid:name", "already_valid:name"),
        ],
    )
    def test_sanitize(self, name, expected):
        assert sanitize_metric_name(name) == expected
