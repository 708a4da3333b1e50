"""OpenTelemetry-backed observability sink.

Breadcrumbs and captured messages become events on the current span,
captured exceptions are recorded on it, measurements and tags become span
attributes. Timing spans are real OpenTelemetry spans.
"""

from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from shared.tracing import get_tracer

T = TypeVar("T")


def _attribute_value(value: Any) -> Any:
    """Coerce a value into something the span attribute API accepts."""
    if isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


def _flatten(prefix: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    return {f"{prefix}.{key}": _attribute_value(value) for key, value in data.items()}


class OpenTelemetrySink:
    """Forwards logger events to the active OpenTelemetry span."""

    def __init__(self, tracer: Optional[trace.Tracer] = None) -> None:
        self._tracer = tracer if tracer is not None else get_tracer(__name__)

    def add_breadcrumb(
        self, category: str, message: str, level: str, data: Mapping[str, Any]
    ) -> None:
        span = trace.get_current_span()
        attributes = {"breadcrumb.category": category, "breadcrumb.level": level}
        attributes.update(_flatten("data", data))
        span.add_event(message, attributes=attributes)

    def capture_message(
        self, text: str, level: str, tags: Dict[str, str], extra: Mapping[str, Any]
    ) -> None:
        span = trace.get_current_span()
        attributes = {"message.level": level}
        attributes.update(_flatten("tag", tags))
        attributes.update(_flatten("extra", extra))
        span.add_event(text, attributes=attributes)

    def capture_exception(
        self, error: BaseException, tags: Dict[str, str], extra: Mapping[str, Any]
    ) -> None:
        span = trace.get_current_span()
        attributes = _flatten("tag", tags)
        attributes.update(_flatten("extra", extra))
        span.record_exception(error, attributes=attributes)
        span.set_status(Status(StatusCode.ERROR, str(error)))

    def set_measurement(self, name: str, value: float, unit: Optional[str] = None) -> None:
        span = trace.get_current_span()
        span.set_attribute(f"measurement.{name}", value)
        if unit:
            span.set_attribute(f"measurement.{name}.unit", unit)

    def set_tag(self, key: str, value: Any) -> None:
        trace.get_current_span().set_attribute(f"tag.{key}", _attribute_value(value))

    async def run_span(
        self,
        name: str,
        operation: str,
        attributes: Mapping[str, Any],
        work: Callable[[], Awaitable[T]],
    ) -> T:
        with self._tracer.start_as_current_span(
            name, record_exception=False, set_status_on_exception=False
        ) as span:
            span.set_attribute("operation", operation)
            for key, value in attributes.items():
                span.set_attribute(key, _attribute_value(value))

            try:
                result = await work()
            except BaseException as exc:
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                raise

            span.set_status(Status(StatusCode.OK))
            return result
