"""
Fact service: fetches a random fact with full instrumentation.

Every fetch runs inside a "fetch-cat-fact" span on the API logger and
reports request outcome, response time and fact length as metrics. A
configurable share of requests is delayed on purpose so latency shows up in
performance monitoring.
"""

import asyncio
import random
import time
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from shared.logging import Logger
from shared.models import CatFact
from web.src.clients import FactClient

FALLBACK_MESSAGE = "Failed to load cat fact. Please refresh the page to try again."


class FactServiceError(Exception):
    """Base error for fact retrieval."""


class FactAPIError(FactServiceError):
    """The fact API answered with a non-success status."""

    def __init__(self, status: int, status_text: str = ""):
        self.status = status
        self.status_text = status_text
        super().__init__(f"Cat Facts API returned status {status}")


class InvalidFactError(FactServiceError):
    """The fact API answered with a body that is not a fact."""


class FactService:
    """Service for retrieving facts from the fact API."""

    def __init__(
        self,
        client: FactClient,
        logger: Logger,
        latency_probability: float = 0.3,
        latency_min_ms: int = 1000,
        latency_max_ms: int = 5000,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize fact service.

        Args:
            client: Fact API client
            logger: Logger for the API context
            latency_probability: Share of requests that get an injected delay
            latency_min_ms: Lower bound of the injected delay
            latency_max_ms: Upper bound of the injected delay
            rng: Random source, injectable for deterministic tests
            sleep: Coroutine used to wait out the injected delay
        """
        self.client = client
        self.logger = logger
        self.latency_probability = latency_probability
        self.latency_min_ms = latency_min_ms
        self.latency_max_ms = latency_max_ms
        self._rng = rng or random.Random()
        self._sleep = sleep

    async def get_fact(self) -> str:
        """
        Fetch a fact, falling back to a friendly message on any failure.

        Returns:
            Fact text, or FALLBACK_MESSAGE when the fetch failed
        """
        return await self.logger.start_span("fetch-cat-fact", "http.client", self._fetch)

    async def _fetch(self) -> str:
        start_time = time.monotonic()

        self.logger.info(
            "Fetching new cat fact from API",
            {"url": self.client.url, "method": "GET"},
        )

        try:
            response = await self.client.fetch()

            await self._maybe_delay()

            duration_ms = round((time.monotonic() - start_time) * 1000)

            if not response.ok:
                error = FactAPIError(response.status, response.reason)

                self.logger.error(
                    "API request failed",
                    error,
                    {
                        "status": response.status,
                        "status_text": response.reason,
                        "duration_ms": duration_ms,
                    },
                )

                self.logger.track_counter(
                    "api_calls.failed",
                    1,
                    {
                        "endpoint": "/fact",
                        "status_code": str(response.status),
                        "api": "catfact.ninja",
                    },
                )
                self.logger.track_distribution(
                    "failed_request_duration",
                    duration_ms,
                    "millisecond",
                    {"status_code": str(response.status)},
                )

                raise error

            try:
                fact = CatFact.model_validate(response.body)
            except ValidationError as exc:
                raise InvalidFactError(f"Unexpected fact API payload: {exc}") from exc

            self.logger.info(
                "Successfully fetched cat fact",
                {
                    "fact_length": fact.length,
                    "duration_ms": duration_ms,
                    "fact_preview": fact.preview(),
                },
            )

            self.logger.set_measurement("api_response_time", duration_ms, "millisecond")
            self.logger.set_measurement("fact_length", fact.length, "character")
            self.logger.set_tag("cat_fact_length", fact.category)

            self.logger.track_distribution(
                "response_time",
                duration_ms,
                "millisecond",
                {"endpoint": "/fact", "status": "success"},
            )
            self.logger.track_distribution(
                "fact_length", fact.length, "character", {"category": fact.category}
            )
            self.logger.track_counter(
                "api_calls.success", 1, {"endpoint": "/fact", "api": "catfact.ninja"}
            )
            self.logger.track_gauge(
                "current_fact_length", fact.length, {"endpoint": "/fact"}
            )

            return fact.fact

        except Exception as exc:
            duration_ms = round((time.monotonic() - start_time) * 1000)

            self.logger.error(
                "Exception during cat fact fetch",
                exc,
                {"duration_ms": duration_ms, "url": self.client.url},
            )
            self.logger.track_counter(
                "api_calls.exception",
                1,
                {"endpoint": "/fact", "error_type": type(exc).__name__},
            )

            return FALLBACK_MESSAGE

    async def _maybe_delay(self) -> None:
        """Delay the request on a random share of calls."""
        if self._rng.random() >= self.latency_probability:
            return

        delay_ms = self._rng.randint(self.latency_min_ms, self.latency_max_ms)
        self.logger.warn(
            "Introducing artificial latency for performance testing",
            {"delay_ms": delay_ms, "delay_seconds": f"{delay_ms / 1000:.2f}"},
        )
        await self._sleep(delay_ms / 1000)
