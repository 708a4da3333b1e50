"""
Dependency wiring for loggers, observability backends and services.

Loggers are built once per application and kept on ``app.state``; request
handlers receive them through FastAPI's dependency injection, so tests can
swap in fake sinks and consoles.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from prometheus_client import REGISTRY, CollectorRegistry

from shared.logging import ConsoleOutput, Logger, create_logger, get_logger
from shared.metrics import MetricsBackend, NullMetrics, PrometheusMetrics
from shared.observability import (
    ObservabilitySink,
    OpenTelemetrySink,
    SentrySink,
    init_sentry,
)
from web.src.config import Settings
from web.src.services import FactService

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppLoggers:
    """Context loggers owned by one application instance."""

    api: Logger
    performance: Logger


def build_sink(settings: Settings) -> ObservabilitySink:
    """
    Select the observability sink for the configured environment.

    Sentry is used when a DSN is configured; otherwise events go to the
    active OpenTelemetry span.
    """
    if settings.sentry_dsn:
        logger.info("initializing_sentry", environment=settings.environment)
        init_sentry(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            release=settings.release,
            traces_sample_rate=settings.sentry_traces_sample_rate,
        )
        return SentrySink()

    logger.info("sentry_disabled_using_opentelemetry_sink")
    return OpenTelemetrySink()


def build_metrics(
    settings: Settings, registry: CollectorRegistry = REGISTRY
) -> MetricsBackend:
    """Select the metrics capability once, at application construction."""
    if settings.metrics_enabled:
        return PrometheusMetrics(registry)
    return NullMetrics()


def build_loggers(
    settings: Settings,
    sink: ObservabilitySink,
    metrics: MetricsBackend,
    console: Optional[ConsoleOutput] = None,
) -> AppLoggers:
    """Create the API and Performance context loggers."""
    return AppLoggers(
        api=create_logger(
            "API",
            sink=sink,
            console=console,
            metrics=metrics,
            development=settings.is_development,
        ),
        performance=create_logger(
            "Performance",
            sink=sink,
            console=console,
            metrics=metrics,
            development=settings.is_development,
        ),
    )


# ============================================================================
# Request-scoped dependencies
# ============================================================================


def get_api_logger(request: Request) -> Logger:
    return request.app.state.loggers.api


def get_fact_service(request: Request) -> FactService:
    return request.app.state.fact_service
