"""Observability sink interface.

A sink receives breadcrumbs, captured events, measurements and timing spans
from :class:`shared.logging.Logger`. Implementations are best-effort: the
logger contains anything they raise, except for exceptions coming out of the
``work`` passed to :meth:`ObservabilitySink.run_span`, which must reach the
caller unchanged.
"""

from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Protocol, TypeVar

T = TypeVar("T")


class ObservabilitySink(Protocol):
    """Error and performance monitoring backend."""

    def add_breadcrumb(
        self, category: str, message: str, level: str, data: Mapping[str, Any]
    ) -> None:
        ...

    def capture_message(
        self, text: str, level: str, tags: Dict[str, str], extra: Mapping[str, Any]
    ) -> None:
        ...

    def capture_exception(
        self, error: BaseException, tags: Dict[str, str], extra: Mapping[str, Any]
    ) -> None:
        ...

    def set_measurement(self, name: str, value: float, unit: Optional[str] = None) -> None:
        ...

    def set_tag(self, key: str, value: Any) -> None:
        ...

    async def run_span(
        self,
        name: str,
        operation: str,
        attributes: Mapping[str, Any],
        work: Callable[[], Awaitable[T]],
    ) -> T:
        ...


class NullSink:
    """Sink that records nothing."""

    def add_breadcrumb(self, category, message, level, data) -> None:
        pass

    def capture_message(self, text, level, tags, extra) -> None:
        pass

    def capture_exception(self, error, tags, extra) -> None:
        pass

    def set_measurement(self, name, value, unit=None) -> None:
        pass

    def set_tag(self, key, value) -> None:
        pass

    async def run_span(self, name, operation, attributes, work):
        return await work()
