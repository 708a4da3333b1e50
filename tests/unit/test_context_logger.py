"""
Unit tests for the context logger.

Tests cover:
- Console and breadcrumb output per level
- Remote capture routing for warn and error
- Debug gating by environment
- Error value normalization
- Containment of console and sink failures
"""

import pytest

from shared.logging import LogLevel, Logger, create_logger, summarize_error
from tests.fakes import FailingSink, RecordingConsole, RecordingSink


class TestConstruction:
    """Test logger construction."""

    def test_context_is_kept_verbatim(self, api_logger):
        assert api_logger.context == "API"
        assert api_logger.tags == {"logger_context": "API"}

    def test_empty_context_rejected(self):
        with pytest.raises(ValueError):
            Logger("")

    def test_create_logger_defaults(self):
        """Default collaborators never raise."""
        logger = create_logger("UI")
        logger.info("hello")
        logger.track_counter("clicks")
        assert logger.context == "UI"


class TestLeveledLogging:
    """Test per-level console, breadcrumb and capture behavior."""

    def test_info_writes_console_and_breadcrumb(self, api_logger, console, sink):
        api_logger.info("Fetching", {"url": "https://catfact.ninja/fact"})

        assert console.messages == ["Fetching"]
        level, context, _, attributes = console.lines[0]
        assert level is LogLevel.INFO
        assert context == "API"
        assert attributes == {"url": "https://catfact.ninja/fact"}

        assert len(sink.breadcrumbs) == 1
        crumb = sink.breadcrumbs[0]
        assert crumb["category"] == "api"
        assert crumb["level"] == "info"
        assert crumb["message"] == "Fetching"
        assert crumb["data"]["context"] == "API"
        assert crumb["data"]["url"] == "https://catfact.ninja/fact"
        assert "timestamp" in crumb["data"]

        assert sink.messages == []
        assert sink.exceptions == []

    def test_warn_maps_severity_and_captures_message(self, api_logger, console, sink):
        api_logger.warn("Slow response", {"delay_ms": 1200})

        assert len(console.lines) == 1
        assert sink.breadcrumbs[0]["level"] == "warning"

        assert len(sink.messages) == 1
        captured = sink.messages[0]
        assert captured["text"] == "[API] Slow response"
        assert captured["level"] == "warning"
        assert captured["tags"] == {"logger_context": "API"}
        assert captured["extra"]["delay_ms"] == 1200
        assert captured["extra"]["context"] == "API"
        assert sink.exceptions == []

    def test_warning_alias(self, api_logger, sink):
        api_logger.warning("Slow response")
        assert len(sink.messages) == 1

    def test_error_with_exception_captures_message_and_exception(self, api_logger, console, sink):
        try:
            raise ValueError("bad payload")
        except ValueError as exc:
            error = exc

        api_logger.error("Parse failed", error, {"status": 502})

        assert len(console.lines) == 1
        assert sink.breadcrumbs[0]["level"] == "error"
        assert len(sink.messages) == 1
        assert sink.messages[0]["level"] == "error"

        assert len(sink.exceptions) == 1
        assert sink.exceptions[0]["error"] is error
        assert sink.exceptions[0]["tags"] == {"logger_context": "API"}

        summary = sink.messages[0]["extra"]["error"]
        assert summary["name"] == "ValueError"
        assert summary["message"] == "bad payload"
        assert "ValueError: bad payload" in summary["stack"]
        assert sink.messages[0]["extra"]["status"] == 502

    def test_error_with_plain_value_never_captures_exception(self, api_logger, sink):
        api_logger.error("Something odd was thrown", "boom")

        assert len(sink.messages) == 1
        assert sink.exceptions == []
        assert sink.messages[0]["extra"]["error"] == "boom"

    def test_error_without_value_has_no_error_key(self, api_logger, sink):
        api_logger.error("Failure without details")

        assert "error" not in sink.messages[0]["extra"]
        assert sink.exceptions == []

    def test_error_summary_overrides_caller_error_key(self, api_logger, sink):
        api_logger.error("Failed", "raw", {"error": "caller value"})
        assert sink.messages[0]["extra"]["error"] == "raw"

    @pytest.mark.parametrize("method", ["info", "warn", "error"])
    def test_one_console_write_and_one_breadcrumb_per_call(self, api_logger, console, sink, method):
        getattr(api_logger, method)("message")

        assert len(console.lines) == 1
        assert len(sink.breadcrumbs) == 1

    def test_call_order_is_console_breadcrumb_message_exception(self, api_logger, events):
        api_logger.error("Failed", KeyError("fact"))

        assert [event[0] for event in events] == [
            "console",
            "breadcrumb",
            "message",
            "exception",
        ]


class TestDebugGating:
    """Test debug output depends on the environment."""

    def test_debug_is_silent_outside_development(self, api_logger, console, sink):
        api_logger.debug("details", {"a": 1})

        assert console.lines == []
        assert sink.breadcrumbs == []
        assert sink.messages == []

    def test_debug_behaves_like_info_in_development(self):
        console = RecordingConsole()
        sink = RecordingSink()
        logger = Logger("API", sink=sink, console=console, development=True)

        logger.debug("details", {"a": 1})

        assert console.messages == ["details"]
        assert console.lines[0][0] is LogLevel.DEBUG
        assert len(sink.breadcrumbs) == 1
        assert sink.breadcrumbs[0]["level"] == "debug"
        assert sink.messages == []


class TestCollaboratorFailures:
    """Test console and sink failures never reach the caller."""

    def test_failing_sink_is_contained(self, console):
        logger = Logger("API", sink=FailingSink(), console=console)

        logger.info("still fine")
        logger.warn("still fine")
        logger.error("still fine", RuntimeError("original"))
        logger.set_measurement("fact_length", 42, "character")
        logger.set_tag("cat_fact_length", "short")
        logger.breadcrumb("navigation", "Home page render started")

        assert console.messages == ["still fine", "still fine", "still fine"]

    def test_failing_console_still_reaches_sink(self, sink):
        class BrokenConsole:
            def write(self, level, context, message, attributes):
                raise OSError("stdout closed")

        logger = Logger("API", sink=sink, console=BrokenConsole())
        logger.warn("disk almost full")

        assert len(sink.breadcrumbs) == 1
        assert len(sink.messages) == 1


class TestSinkPassThrough:
    """Test breadcrumbs, measurements and tags forwarded directly."""

    def test_breadcrumb_uses_explicit_category(self, api_logger, console, sink):
        api_logger.breadcrumb("navigation", "Home page render started")

        assert console.lines == []
        assert sink.breadcrumbs == [
            {
                "category": "navigation",
                "message": "Home page render started",
                "level": "info",
                "data": {},
            }
        ]

    def test_measurement_and_tag(self, api_logger, sink):
        api_logger.set_measurement("api_response_time", 120, "millisecond")
        api_logger.set_tag("cat_fact_length", "long")

        assert sink.measurements == [("api_response_time", 120, "millisecond")]
        assert sink.tags == {"cat_fact_length": "long"}


class TestSummarizeError:
    """Test error normalization."""

    def test_exception_without_traceback(self):
        summary = summarize_error(TimeoutError("too slow"))
        assert summary["name"] == "TimeoutError"
        assert summary["message"] == "too slow"
        assert summary["stack"].strip() == "TimeoutError: too slow"

    @pytest.mark.parametrize("value", ["boom", 42, {"code": 7}, None])
    def test_non_exception_values_pass_through(self, value):
        assert summarize_error(value) == value
