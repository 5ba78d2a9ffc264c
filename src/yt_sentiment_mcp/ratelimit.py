"""Shared token-bucket limiter for outbound Gemini requests."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class RateLimiter:
    """Token bucket with a fixed refill interval, shared across tasks.

    With ``burst=1`` (the only size the pipeline uses) acquisitions are
    spaced at least ``interval`` seconds apart no matter how many tasks
    wait concurrently. Waiters are served in arrival order.

    Args:
        interval: Seconds between token refills.
        burst: Bucket capacity; the bucket starts full.
    """

    def __init__(self, interval: float, burst: int = 1) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        if burst < 1:
            raise ValueError("burst must be >= 1")
        self.interval = interval
        self.burst = burst
        self._tokens = float(burst)
        self._updated: float | None = None
        self._lock = asyncio.Lock()

    def _refill(self, now: float) -> None:
        if self._updated is not None:
            elapsed = now - self._updated
            self._tokens = min(float(self.burst), self._tokens + elapsed / self.interval)
        self._updated = now

    async def acquire(self) -> None:
        """Take one token, sleeping until one is available.

        The lock is held while sleeping, so later callers queue behind the
        current waiter. Cancellation raises ``asyncio.CancelledError`` and
        leaves the bucket untouched.
        """
        loop = asyncio.get_running_loop()
        async with self._lock:
            self._refill(loop.time())
            if self._tokens < 1.0:
                wait = (1.0 - self._tokens) * self.interval
                logger.debug("Rate limiter: waiting %.3fs for a slot", wait)
                await asyncio.sleep(wait)
                self._refill(loop.time())
            self._tokens = max(0.0, self._tokens - 1.0)
