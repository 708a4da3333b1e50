"""
HTTP client for the public fact API.

Wraps a shared aiohttp session. The client only transports: status handling,
logging and metrics live in the fact service.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from shared.tracing import trace_function


@dataclass(frozen=True)
class FactAPIResponse:
    """Raw outcome of one fact API request."""

    status: int
    reason: str
    body: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class FactClient:
    """Async client for ``GET {url}`` returning ``{"fact": ..., "length": ...}``."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    @trace_function("fact_api.request")
    async def fetch(self) -> FactAPIResponse:
        """
        Request a random fact.

        The body is only decoded for successful responses.

        Returns:
            FactAPIResponse with status and decoded body

        Raises:
            aiohttp.ClientError: On connection or protocol failure
            asyncio.TimeoutError: When the request exceeds the timeout
        """
        session = await self._get_session()
        headers = {"Accept": "application/json", "Cache-Control": "no-store"}

        async with session.get(self.url, headers=headers) as response:
            body = None
            if 200 <= response.status < 300:
                body = await response.json()
            return FactAPIResponse(
                status=response.status,
                reason=response.reason or "",
                body=body,
            )

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
