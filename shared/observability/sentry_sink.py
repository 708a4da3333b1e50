"""Sentry-backed observability sink."""

from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, TypeVar

import sentry_sdk

T = TypeVar("T")


def init_sentry(
    dsn: str,
    environment: str,
    release: Optional[str] = None,
    traces_sample_rate: float = 1.0,
) -> None:
    """Initialise the Sentry SDK.

    Args:
        dsn: Project DSN
        environment: Deployment environment reported with every event
        release: Release identifier (e.g., "cat-facts@1.0.0")
        traces_sample_rate: Fraction of transactions to sample (0.0 to 1.0)
    """
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
    )


class SentrySink:
    """Forwards logger events to the Sentry SDK."""

    def add_breadcrumb(
        self, category: str, message: str, level: str, data: Mapping[str, Any]
    ) -> None:
        sentry_sdk.add_breadcrumb(
            category=category, message=message, level=level, data=dict(data)
        )

    def capture_message(
        self, text: str, level: str, tags: Dict[str, str], extra: Mapping[str, Any]
    ) -> None:
        sentry_sdk.capture_message(text, level=level, tags=tags, extras=dict(extra))

    def capture_exception(
        self, error: BaseException, tags: Dict[str, str], extra: Mapping[str, Any]
    ) -> None:
        sentry_sdk.capture_exception(error, tags=tags, extras=dict(extra))

    def set_measurement(self, name: str, value: float, unit: Optional[str] = None) -> None:
        sentry_sdk.set_measurement(name, value, unit or "")

    def set_tag(self, key: str, value: Any) -> None:
        sentry_sdk.set_tag(key, value)

    async def run_span(
        self,
        name: str,
        operation: str,
        attributes: Mapping[str, Any],
        work: Callable[[], Awaitable[T]],
    ) -> T:
        with sentry_sdk.start_span(op=operation, name=name) as span:
            for key, value in attributes.items():
                span.set_data(key, value)
            return await work()
