"""Reduce phase — synthesize chunk results into the final report, with retry."""

from __future__ import annotations

import logging
import time

from ..client import first_text
from ..errors import FormatError, ReductionError, TransportError
from ..models.video import VideoContext
from ..prompts.analysis import FINAL_REPORT
from ..retry import RetryExhaustedError, retry_fixed
from ..types import TextGenerator
from .sanitizer import FinalizedAnalysis, sanitize_analysis

logger = logging.getLogger(__name__)

REDUCE_MAX_ATTEMPTS = 3
REDUCE_RETRY_DELAY = 2.0


def build_reduce_prompt(video: VideoContext, partial_analyses: str) -> str:
    """Embed the video's raw metadata (no comments) and the partial array."""
    return FINAL_REPORT.format(
        video_json=video.model_dump_json(exclude={"comments"}),
        partial_analyses=partial_analyses,
    )


async def reduce_partials(
    generator: TextGenerator,
    video: VideoContext,
    partial_analyses: str,
    *,
    tracking_id: str,
    run_date: str,
    max_attempts: int = REDUCE_MAX_ATTEMPTS,
    delay: float = REDUCE_RETRY_DELAY,
) -> FinalizedAnalysis:
    """Generate, sanitize and validate the final report.

    Transport failures, empty responses and invalid JSON each cost one
    attempt; the first attempt that sanitizes cleanly wins.

    Raises:
        ReductionError: Every attempt failed; chained to the last cause.
    """
    prompt = build_reduce_prompt(video, partial_analyses)

    async def _attempt(attempt: int) -> FinalizedAnalysis:
        logger.info(
            "[%s] Attempt %d/%d: generating final analysis", tracking_id, attempt, max_attempts,
        )
        started = time.monotonic()
        try:
            response = await generator.generate(prompt)
        except Exception as exc:
            raise TransportError(f"Gemini API call failed: {exc}") from exc
        text = first_text(response)
        logger.info(
            "[%s] Received analysis from Gemini in %.1fs", tracking_id, time.monotonic() - started,
        )

        try:
            finalized = sanitize_analysis(text, tracking_id, run_date)
        except FormatError as exc:
            logger.warning("[%s] Invalid analysis JSON: %s. Raw response: %s", tracking_id, exc, text)
            raise
        logger.info("[%s] Parsed and validated Gemini response", tracking_id)
        return finalized

    try:
        return await retry_fixed(
            _attempt,
            max_attempts=max_attempts,
            delay=delay,
            retry_on=(TransportError, FormatError),
            label=f"[{tracking_id}] final analysis",
        )
    except RetryExhaustedError as exc:
        raise ReductionError(
            f"Failed to generate final analysis after {exc.attempts} attempt(s): {exc.last_error}"
        ) from exc.last_error
