"""Retry policy for idempotent requests."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum

import httpx
import structlog


logger = structlog.get_logger()


class Backoff(StrEnum):
    FIXED = "fixed"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently to retry a request.

    Attributes:
        max_attempts: Total attempts including the first one
        delay: Seconds before the first retry
        backoff: Keep the delay fixed or double it after every retry
        max_delay: Upper bound for exponential delays
        retry_statuses: Response statuses that are worth another attempt
    """

    max_attempts: int = 3
    delay: float = 1.0
    backoff: Backoff = Backoff.FIXED
    max_delay: float = 10.0
    retry_statuses: frozenset[int] = field(default_factory=lambda: frozenset({502, 503, 504}))

    def delay_for(self, retry_number: int) -> float:
        """Seconds to wait before retry ``retry_number`` (1-based)."""
        if self.backoff == Backoff.EXPONENTIAL:
            return min(self.delay * 2 ** (retry_number - 1), self.max_delay)
        return self.delay

    async def run(
        self,
        send: Callable[[], Awaitable[httpx.Response]],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> httpx.Response:
        """Call ``send`` until it succeeds or attempts run out.

        Transport errors and retryable statuses trigger another attempt.
        Any other response, including 4xx, is returned immediately.

        Args:
            send: Issues one request
            sleep: Awaitable delay, replaceable in tests

        Returns:
            The last response

        Raises:
            httpx.TransportError: If the final attempt failed at transport level
        """
        attempt = 1
        while True:
            try:
                response = await send()
            except httpx.TransportError as exc:
                if attempt >= self.max_attempts:
                    raise
                logger.warning("request_retry", attempt=attempt, error=str(exc))
            else:
                if response.status_code not in self.retry_statuses or attempt >= self.max_attempts:
                    return response
                logger.warning("request_retry", attempt=attempt, status_code=response.status_code)
            await sleep(self.delay_for(attempt))
            attempt += 1


NO_RETRY = RetryPolicy(max_attempts=1)
