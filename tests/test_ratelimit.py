"""Tests for the shared token-bucket rate limiter."""

from __future__ import annotations

import asyncio

import pytest

from yt_sentiment_mcp.ratelimit import RateLimiter


class TestRateLimiterInit:
    @pytest.mark.parametrize("interval", [0, -0.5])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError, match="interval"):
            RateLimiter(interval)

    def test_rejects_zero_burst(self):
        with pytest.raises(ValueError, match="burst"):
            RateLimiter(0.1, burst=0)


class TestAcquire:
    """Acquisitions are spaced by the refill interval."""

    async def test_first_acquire_is_immediate(self):
        limiter = RateLimiter(10.0)
        await asyncio.wait_for(limiter.acquire(), timeout=1.0)

    async def test_concurrent_acquires_are_spaced(self):
        interval = 0.05
        limiter = RateLimiter(interval)
        loop = asyncio.get_running_loop()
        stamps: list[float] = []

        async def _take():
            await limiter.acquire()
            stamps.append(loop.time())

        await asyncio.gather(*(_take() for _ in range(4)))

        stamps.sort()
        gaps = [b - a for a, b in zip(stamps, stamps[1:])]
        assert len(gaps) == 3
        # allow a little scheduler jitter below the nominal interval
        assert all(gap >= interval * 0.8 for gap in gaps)

    async def test_cancel_while_waiting_raises_cancelled(self):
        limiter = RateLimiter(5.0)
        await limiter.acquire()

        waiter = asyncio.create_task(limiter.acquire())
        await asyncio.sleep(0.01)
        waiter.cancel()

        with pytest.raises(asyncio.CancelledError):
            await waiter

    async def test_burst_allows_immediate_tokens(self):
        limiter = RateLimiter(10.0, burst=3)
        await asyncio.wait_for(
            asyncio.gather(*(limiter.acquire() for _ in range(3))), timeout=1.0,
        )
