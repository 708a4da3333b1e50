"""
FastAPI application entry point for the cat facts service.

This module provides the FastAPI application with:
- Fact endpoint instrumented through context loggers
- Example error endpoint for verifying error reporting
- Health endpoint
- Request logging and Prometheus metrics
- Sentry or OpenTelemetry observability
- Graceful startup and shutdown
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from shared.logging import ConsoleOutput, configure_logging, get_logger
from shared.metrics import MetricsBackend
from shared.models import HealthStatus, ServiceInfo
from shared.observability import ObservabilitySink
from shared.tracing import configure_tracing
from web.src.clients import FactClient
from web.src.config import Settings, get_settings
from web.src.dependencies import build_loggers, build_metrics, build_sink
from web.src.routers import facts_router
from web.src.services import FactService

logger = get_logger(__name__)


# ============================================================================
# Request Logging Middleware
# ============================================================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging and request metrics."""

    async def dispatch(self, request: Request, call_next):
        """Process request and log details."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        performance = request.app.state.loggers.performance

        start_time = time.monotonic()

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_ip=client_ip,
            correlation_id=correlation_id
        )

        try:
            response = await call_next(request)

            duration_ms = (time.monotonic() - start_time) * 1000

            performance.track_counter(
                "http.requests",
                1,
                {"method": method, "endpoint": path, "status": str(response.status_code)},
            )
            performance.track_distribution(
                "http.request_duration",
                duration_ms,
                "millisecond",
                {"method": method, "endpoint": path},
            )

            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration_ms:.1f}ms",
                correlation_id=correlation_id
            )

            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration_ms:.1f}ms",
                correlation_id=correlation_id,
            )
            raise


# ============================================================================
# Application Factory
# ============================================================================

def create_app(
    settings: Optional[Settings] = None,
    *,
    sink: Optional[ObservabilitySink] = None,
    metrics: Optional[MetricsBackend] = None,
    console: Optional[ConsoleOutput] = None,
    fact_client: Optional[FactClient] = None,
    registry: CollectorRegistry = REGISTRY,
) -> FastAPI:
    """
    Build the FastAPI application.

    Collaborators default to the ones selected by ``settings``; tests pass
    fakes instead.

    Args:
        settings: Application settings, defaults to get_settings()
        sink: Observability sink override
        metrics: Metrics backend override
        console: Console output override
        fact_client: Fact API client override
        registry: Prometheus registry backing metrics and /metrics

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    if sink is None:
        sink = build_sink(settings)
    if metrics is None:
        metrics = build_metrics(settings, registry)
    if fact_client is None:
        fact_client = FactClient(settings.fact_api_url, timeout=settings.fact_api_timeout)

    loggers = build_loggers(settings, sink, metrics, console)
    fact_service = FactService(
        fact_client,
        loggers.api,
        latency_probability=settings.latency_probability,
        latency_min_ms=settings.latency_min_ms,
        latency_max_ms=settings.latency_max_ms,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan manager for startup and shutdown events.

        Handles:
        - OpenTelemetry tracing setup
        - Fact API client cleanup
        """
        logger.info(
            "application_starting",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment
        )

        if settings.tracing_enabled:
            logger.info("initializing_tracing", otlp_endpoint=settings.tracing_otlp_endpoint)
            configure_tracing(
                service_name=settings.app_name,
                service_version=settings.app_version,
                otlp_endpoint=settings.tracing_otlp_endpoint,
                sampling_rate=settings.tracing_sample_rate,
            )
            logger.info("tracing_initialized")

        logger.info("application_started", app_name=settings.app_name)

        try:
            yield
        finally:
            logger.info("application_shutting_down")

            await fact_client.close()

            if settings.tracing_enabled:
                logger.info("shutting_down_tracing")
                trace.get_tracer_provider().shutdown()

            logger.info("application_shutdown_complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Random cat facts with error and performance monitoring.",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.loggers = loggers
    app.state.fact_service = fact_service

    app.add_middleware(RequestLoggingMiddleware)

    if settings.tracing_enabled:
        FastAPIInstrumentor.instrument_app(app)

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        loggers.api.warn(
            "HTTP exception",
            {"path": request.url.path, "status_code": exc.status_code, "detail": exc.detail},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        loggers.api.error("Unhandled exception", exc, {"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )

    # ========================================================================
    # Health and Metrics Endpoints
    # ========================================================================

    @app.get("/health", tags=["Health"], response_model=ServiceInfo)
    async def health_check() -> ServiceInfo:
        """
        Health check endpoint.

        Returns basic health status without checking dependencies.
        """
        return ServiceInfo(
            status=HealthStatus.HEALTHY,
            service=settings.app_name,
            version=settings.app_version,
            environment=settings.environment,
        )

    @app.get(settings.metrics_endpoint, tags=["Monitoring"], response_class=PlainTextResponse)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(registry),
            media_type=CONTENT_TYPE_LATEST
        )

    app.include_router(facts_router)

    return app


# ============================================================================
# Application Entry Point
# ============================================================================

def run() -> None:
    """Run the application with Uvicorn."""
    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name=settings.app_name,
        environment=settings.environment,
    )

    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run()
