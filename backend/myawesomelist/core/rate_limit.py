"""Async token-bucket rate limiting for upstream services.

One limiter instance exists per external service (GitHub, embeddings). The
application container builds them once and injects them into every client
that talks to that service, so all concurrent fetches share one budget.

``wait()`` suspends until a token is available. Cancellation is the caller's
asyncio cancellation (``asyncio.timeout`` or ``task.cancel()``); a cancelled
waiter does not consume a token.
"""

from __future__ import annotations

import asyncio
import logging
import time

logger = logging.getLogger(__name__)

GITHUB_AUTHENTICATED_PER_HOUR = 5000
GITHUB_AUTHENTICATED_BURST = 10
GITHUB_UNAUTHENTICATED_PER_HOUR = 60
GITHUB_UNAUTHENTICATED_BURST = 1


class NoopLimiter:
    """Limiter that never blocks. Used in tests and for unlimited services."""

    async def wait(self) -> None:
        return None


class AsyncTokenBucket:
    """
    Token bucket limiter.

    Tokens refill continuously at ``rate`` per second up to ``burst``. Each
    ``wait()`` takes one token, sleeping with asyncio.sleep while the bucket
    is empty so other tasks keep running.
    """

    def __init__(self, rate: float, burst: int = 1):
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self.rate = rate
        self.burst = burst
        self._tokens = float(burst)
        self._updated = time.monotonic()
        self._lock: asyncio.Lock | None = None  # Lazy init inside the running loop

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._updated
        self._updated = now
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)

    async def wait(self) -> None:
        """Block until a token is available, then consume it."""
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            while True:
                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return
                delay = (1 - self._tokens) / self.rate
                await asyncio.sleep(delay)


def new_github_limiter(authenticated: bool) -> AsyncTokenBucket:
    """Token bucket tuned for authenticated or anonymous GitHub API usage."""
    if authenticated:
        limiter = AsyncTokenBucket(
            GITHUB_AUTHENTICATED_PER_HOUR / 3600, GITHUB_AUTHENTICATED_BURST
        )
        logger.info(
            "Created authenticated GitHub rate limiter (%d requests/hour, burst %d)",
            GITHUB_AUTHENTICATED_PER_HOUR,
            GITHUB_AUTHENTICATED_BURST,
        )
    else:
        limiter = AsyncTokenBucket(
            GITHUB_UNAUTHENTICATED_PER_HOUR / 3600, GITHUB_UNAUTHENTICATED_BURST
        )
        logger.info(
            "Created unauthenticated GitHub rate limiter (%d requests/hour, burst %d)",
            GITHUB_UNAUTHENTICATED_PER_HOUR,
            GITHUB_UNAUTHENTICATED_BURST,
        )
    return limiter


def new_embedding_limiter(rate: float, burst: int):
    """Embedding limiter from settings; a non-positive rate disables limiting."""
    if rate <= 0:
        return NoopLimiter()
    return AsyncTokenBucket(rate, max(1, burst))
