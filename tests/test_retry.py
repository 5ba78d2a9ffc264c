"""Tests for bounded flat-delay retry."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from yt_sentiment_mcp.retry import RetryExhaustedError, retry_fixed


class TestRetryFixed:
    """retry_fixed runs at most max_attempts times with a flat sleep between."""

    @patch("yt_sentiment_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_success_first_attempt(self, mock_sleep):
        attempt_fn = AsyncMock(return_value="ok")

        result = await retry_fixed(attempt_fn, max_attempts=3, delay=2.0)

        assert result == "ok"
        attempt_fn.assert_awaited_once_with(1)
        mock_sleep.assert_not_awaited()

    @patch("yt_sentiment_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_succeeds_on_third_attempt(self, mock_sleep):
        attempt_fn = AsyncMock(side_effect=[RuntimeError("a"), RuntimeError("b"), "ok"])

        result = await retry_fixed(attempt_fn, max_attempts=3, delay=2.0)

        assert result == "ok"
        assert [c.args[0] for c in attempt_fn.await_args_list] == [1, 2, 3]
        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(2.0)

    @patch("yt_sentiment_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_exhaustion_never_runs_extra_attempt(self, mock_sleep):
        attempt_fn = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RetryExhaustedError) as exc_info:
            await retry_fixed(attempt_fn, max_attempts=3, delay=2.0)

        assert attempt_fn.await_count == 3
        assert mock_sleep.await_count == 2
        assert exc_info.value.attempts == 3
        assert str(exc_info.value.last_error) == "boom"
        assert exc_info.value.__cause__ is exc_info.value.last_error

    @patch("yt_sentiment_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_non_retryable_error_propagates_immediately(self, mock_sleep):
        attempt_fn = AsyncMock(side_effect=KeyError("nope"))

        with pytest.raises(KeyError):
            await retry_fixed(attempt_fn, max_attempts=3, delay=1.0, retry_on=(ValueError,))

        attempt_fn.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    @patch("yt_sentiment_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_cancellation_is_not_retried(self, mock_sleep):
        attempt_fn = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await retry_fixed(attempt_fn, max_attempts=3, delay=1.0)

        attempt_fn.assert_awaited_once()

    async def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError, match="max_attempts"):
            await retry_fixed(AsyncMock(), max_attempts=0, delay=0)

    async def test_cancel_during_sleep_stops_retrying(self):
        calls = 0

        async def _always_fail(attempt: int):
            nonlocal calls
            calls += 1
            raise RuntimeError("fail")

        task = asyncio.create_task(retry_fixed(_always_fail, max_attempts=3, delay=10.0))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls == 1
