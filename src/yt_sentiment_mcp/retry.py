"""Bounded, flat-delay retry for the sequential reduce phase."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Every attempt failed; ``__cause__`` is the last attempt's error."""

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(f"failed after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


async def retry_fixed(
    attempt_fn: Callable[[int], Awaitable[T]],
    *,
    max_attempts: int,
    delay: float,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    label: str = "operation",
) -> T:
    """Run *attempt_fn* until it succeeds, at most *max_attempts* times.

    Args:
        attempt_fn: Called with the 1-based attempt number; returns a fresh
            awaitable each time.
        max_attempts: Attempt ceiling (>= 1).
        delay: Seconds slept between attempts; no sleep after the last one.
        retry_on: Exception types that trigger another attempt. Anything
            else propagates immediately, as does ``asyncio.CancelledError``.
        label: Prefix for log lines.

    Returns:
        The first successful result.

    Raises:
        RetryExhaustedError: All attempts raised a retryable error.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await attempt_fn(attempt)
        except retry_on as exc:
            logger.warning("%s: attempt %d/%d failed: %s", label, attempt, max_attempts, exc)
            if attempt == max_attempts:
                raise RetryExhaustedError(max_attempts, exc) from exc
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")
