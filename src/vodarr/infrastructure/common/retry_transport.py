"""httpx transport that retries upstream calls on failure."""

from __future__ import annotations

import asyncio

import httpx
import structlog

log = structlog.get_logger(__name__)


class RetryTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx transport with retry on network errors and non-2xx.

    Up to *max_retries* extra attempts are made.  Before retry number
    ``n`` the transport waits ``backoff_seconds * n`` (linear backoff).
    The last response is returned as-is and the last transport error is
    re-raised, so callers still see the final failure.
    """

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport,
        *,
        max_retries: int = 1,
        backoff_seconds: float = 1.0,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._wrapped = wrapped
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = await self._wrapped.handle_async_request(request)
            except httpx.TransportError as exc:
                if attempt >= self._max_retries:
                    raise
                attempt += 1
                await self._wait(request, attempt, error=repr(exc))
                continue

            if response.is_success or attempt >= self._max_retries:
                return response

            # Drain the failed response before retrying
            await response.aread()
            await response.aclose()
            attempt += 1
            await self._wait(request, attempt, status=response.status_code)

    async def _wait(
        self, request: httpx.Request, attempt: int, **context: object
    ) -> None:
        delay = self._backoff_seconds * attempt
        log.info(
            "http_retry",
            url=str(request.url),
            attempt=attempt,
            delay=round(delay, 2),
            **context,
        )
        if delay > 0:
            await asyncio.sleep(delay)

    async def aclose(self) -> None:
        """Close the wrapped transport."""
        await self._wrapped.aclose()
