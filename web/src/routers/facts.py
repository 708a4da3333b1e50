"""
Fact endpoints.

- GET /                       Random fact, fully instrumented
- GET /api/sentry-example-api Always fails, for verifying error reporting
"""

from fastapi import APIRouter, Depends

from shared.logging import Logger
from shared.models import FactResponse
from web.src.dependencies import get_api_logger, get_fact_service
from web.src.services import FactService

router = APIRouter()


class ExampleAPIError(RuntimeError):
    """Raised on purpose by the example error endpoint."""


@router.get("/", response_model=FactResponse, tags=["Facts"])
async def home(
    logger: Logger = Depends(get_api_logger),
    fact_service: FactService = Depends(get_fact_service),
) -> FactResponse:
    """
    Return a random fact.

    Never fails because of the fact API: fetch errors are reported and
    replaced by a fallback message.
    """
    logger.info("Rendering cat facts home page")
    logger.track_counter("page.views", 1, {"page": "home"})
    logger.breadcrumb("navigation", "Home page render started")

    fact = await fact_service.get_fact()

    logger.info("Page render complete", {"fact_length": len(fact)})
    logger.track_counter("page.renders.success", 1, {"page": "home"})

    return FactResponse(fact=fact)


@router.get("/api/sentry-example-api", tags=["Monitoring"])
async def sentry_example_api() -> None:
    """Trigger a server-side error that the error monitor should capture."""
    raise ExampleAPIError("Sentry Server-side Test Error - API Route")
