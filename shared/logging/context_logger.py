"""Context logger that reports to an observability sink.

Each :class:`Logger` belongs to one logical subsystem ("API", "UI",
"Performance") and tags everything it emits with that context label. A log
call writes a console line, leaves a breadcrumb with the sink and, for
``warn`` and ``error``, captures a discrete event.

Quick Start:
    >>> api_logger = create_logger("API", sink=SentrySink(), metrics=PrometheusMetrics())
    >>> api_logger.info("Fetching fact", {"url": "https://catfact.ninja/fact"})
    >>> fact = await api_logger.start_span("fetch-fact", "http.client", fetch)
    >>> api_logger.track_counter("api_calls.success", 1, {"endpoint": "/fact"})

Collaborator failures (console, sink, metrics backend) are reported to the
module diagnostic logger and never reach the caller.
"""

import time
import traceback
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, TypeVar

from shared.metrics import MetricsBackend, NullMetrics
from shared.observability.sink import NullSink, ObservabilitySink

from .console import ConsoleOutput, StructlogConsole
from .levels import LogLevel, LogRecord
from .structured_logger import get_logger

T = TypeVar("T")

diagnostics = get_logger(__name__)


def summarize_error(error: Any) -> Any:
    """Normalize an error value for inclusion in log data.

    Exceptions become a ``name``/``message``/``stack`` mapping, anything else
    is passed through untouched.
    """
    if isinstance(error, BaseException):
        return {
            "name": type(error).__name__,
            "message": str(error),
            "stack": "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
        }
    return error


class _SpanOutcome:
    """What happened to the wrapped work inside one span."""

    def __init__(self) -> None:
        self.entered = False
        self.has_result = False
        self.result: Any = None
        self.error: Optional[BaseException] = None


class Logger:
    """Structured logger bound to a fixed context label."""

    def __init__(
        self,
        context: str,
        sink: Optional[ObservabilitySink] = None,
        console: Optional[ConsoleOutput] = None,
        metrics: Optional[MetricsBackend] = None,
        development: bool = False,
    ) -> None:
        if not context:
            raise ValueError("Logger context must be a non-empty label")
        self._context = context
        self._sink = sink if sink is not None else NullSink()
        self._console = console if console is not None else StructlogConsole()
        self._metrics = metrics if metrics is not None else NullMetrics()
        self._development = development

    @property
    def context(self) -> str:
        return self._context

    @property
    def tags(self) -> Dict[str, str]:
        """Tags attached to every captured event."""
        return {"logger_context": self._context}

    # ------------------------------------------------------------------
    # Leveled logging
    # ------------------------------------------------------------------

    def debug(self, message: str, attributes: Optional[Mapping[str, Any]] = None) -> None:
        """Log at debug level. Only emitted in development."""
        if self._development:
            self._log(LogLevel.DEBUG, message, attributes)

    def info(self, message: str, attributes: Optional[Mapping[str, Any]] = None) -> None:
        self._log(LogLevel.INFO, message, attributes)

    def warn(self, message: str, attributes: Optional[Mapping[str, Any]] = None) -> None:
        self._log(LogLevel.WARN, message, attributes)

    warning = warn

    def error(
        self,
        message: str,
        error: Any = None,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Log at error level.

        Args:
            message: Human readable description
            error: Exception or arbitrary failure value
            attributes: Extra key/value data
        """
        data = dict(attributes or {})
        if error is not None:
            data["error"] = summarize_error(error)

        record = self._log(LogLevel.ERROR, message, data)

        if isinstance(error, BaseException):
            self._forward(
                "capture_exception", error, self.tags, record.as_data()
            )

    def _log(
        self, level: LogLevel, message: str, attributes: Optional[Mapping[str, Any]]
    ) -> LogRecord:
        record = LogRecord(
            context=self._context,
            message=message,
            level=level,
            attributes=dict(attributes or {}),
        )
        data = record.as_data()

        try:
            self._console.write(level, self._context, message, attributes)
        except Exception as exc:
            diagnostics.warning(
                "console_write_failed", context=self._context, error=str(exc)
            )

        self._forward(
            "add_breadcrumb", self._context.lower(), message, level.severity, data
        )

        if level.captured:
            self._forward(
                "capture_message",
                f"[{self._context}] {message}",
                level.severity,
                self.tags,
                data,
            )

        return record

    # ------------------------------------------------------------------
    # Performance
    # ------------------------------------------------------------------

    async def start_span(
        self, name: str, operation: str, work: Callable[[], Awaitable[T]]
    ) -> T:
        """Run ``work`` inside a timing span.

        Logs "Starting {name}" before and "Completed {name}" or
        "Failed {name}" after, with ``duration_ms`` attached. A failure of
        ``work`` is re-raised unchanged.

        Args:
            name: Span name, prefixed with the context label for the sink
            operation: Operation category (e.g., "http.client")
            work: Zero-argument coroutine function to time

        Returns:
            Whatever ``work`` returns
        """
        outcome = _SpanOutcome()

        async def timed() -> T:
            outcome.entered = True
            start = time.monotonic()
            self.info(f"Starting {name}")

            try:
                result = await work()
            except BaseException as exc:
                outcome.error = exc
                duration_ms = (time.monotonic() - start) * 1000
                self.error(f"Failed {name}", exc, {"duration_ms": duration_ms})
                raise

            duration_ms = (time.monotonic() - start) * 1000
            self.info(f"Completed {name}", {"duration_ms": duration_ms})
            outcome.has_result = True
            outcome.result = result
            return result

        try:
            return await self._sink.run_span(
                f"{self._context}.{name}",
                operation,
                {"logger_context": self._context},
                timed,
            )
        except Exception as exc:
            if exc is outcome.error:
                raise
            if outcome.error is not None:
                self._report_sink_failure("run_span", exc)
                raise outcome.error
            if outcome.has_result:
                self._report_sink_failure("run_span", exc)
                return outcome.result
            if outcome.entered:
                raise
            self._report_sink_failure("run_span", exc)
            return await timed()

    def breadcrumb(
        self, category: str, message: str, data: Optional[Mapping[str, Any]] = None
    ) -> None:
        """Leave an info breadcrumb under an explicit category, without a console line."""
        self._forward("add_breadcrumb", category, message, LogLevel.INFO.severity, dict(data or {}))

    def set_measurement(self, name: str, value: float, unit: Optional[str] = None) -> None:
        self._forward("set_measurement", name, value, unit)

    def set_tag(self, key: str, value: Any) -> None:
        self._forward("set_tag", key, value)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def track_counter(
        self, metric: str, value: float = 1, tags: Optional[Mapping[str, Any]] = None
    ) -> None:
        self._emit_metric(
            metric, tags, lambda name, merged: self._metrics.increment_counter(name, value, merged)
        )

    def track_gauge(
        self, metric: str, value: float, tags: Optional[Mapping[str, Any]] = None
    ) -> None:
        self._emit_metric(
            metric, tags, lambda name, merged: self._metrics.set_gauge(name, value, merged)
        )

    def track_distribution(
        self,
        metric: str,
        value: float,
        unit: Optional[str] = None,
        tags: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._emit_metric(
            metric,
            tags,
            lambda name, merged: self._metrics.record_distribution(name, value, unit, merged),
        )

    def _emit_metric(
        self,
        metric: str,
        tags: Optional[Mapping[str, Any]],
        emit: Callable[[str, Dict[str, Any]], None],
    ) -> None:
        name = f"{self._context.lower()}.{metric}"
        merged = {"context": self._context, **(tags or {})}
        try:
            emit(name, merged)
        except Exception as exc:
            diagnostics.warning(
                "metric_emit_failed",
                context=self._context,
                metric=name,
                error=str(exc),
            )

    # ------------------------------------------------------------------
    # Sink plumbing
    # ------------------------------------------------------------------

    def _forward(self, method: str, *args: Any) -> None:
        try:
            getattr(self._sink, method)(*args)
        except Exception as exc:
            self._report_sink_failure(method, exc)

    def _report_sink_failure(self, method: str, exc: BaseException) -> None:
        diagnostics.warning(
            "observability_call_failed",
            context=self._context,
            method=method,
            error=str(exc),
        )

    def __repr__(self) -> str:
        return f"Logger(context={self._context!r})"


def create_logger(
    context: str,
    *,
    sink: Optional[ObservabilitySink] = None,
    console: Optional[ConsoleOutput] = None,
    metrics: Optional[MetricsBackend] = None,
    development: bool = False,
) -> Logger:
    """Create a logger for one subsystem.

    Args:
        context: Context label (e.g., "API")
        sink: Observability sink, defaults to one that records nothing
        console: Console output, defaults to structlog
        metrics: Metrics capability, defaults to no-op metrics
        development: Whether debug records are emitted

    Returns:
        Configured Logger
    """
    return Logger(
        context,
        sink=sink,
        console=console,
        metrics=metrics,
        development=development,
    )
