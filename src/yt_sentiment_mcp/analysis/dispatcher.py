"""Map phase — one rate-limited Gemini request per comment chunk."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ..client import first_text
from ..errors import ChunkAnalysisError, EmptyResponseError
from ..models.video import Comment, VideoContext
from ..prompts.analysis import CHUNK_ANALYSIS
from ..ratelimit import RateLimiter
from ..types import TextGenerator

logger = logging.getLogger(__name__)

CHUNK_REQUEST_INTERVAL = 0.6


def build_chunk_prompt(video: VideoContext, chunk: Sequence[Comment]) -> str:
    """Embed the video metadata with only *chunk* as its comments."""
    return CHUNK_ANALYSIS.format(video_json=video.with_comments(tuple(chunk)).model_dump_json())


async def analyze_chunk(
    generator: TextGenerator,
    limiter: RateLimiter,
    video: VideoContext,
    chunk: Sequence[Comment],
    index: int,
    total: int,
    tracking_id: str,
) -> str:
    """Wait for a limiter slot, then analyze one chunk.

    Returns:
        The model's raw text for this chunk.

    Raises:
        ChunkAnalysisError: Transport failure or unusable response.
        asyncio.CancelledError: The run was cancelled while waiting or in flight.
    """
    await limiter.acquire()
    prompt = build_chunk_prompt(video, chunk)

    logger.info("[%s] Analyzing comment chunk %d/%d...", tracking_id, index + 1, total)
    try:
        response = await generator.generate(prompt)
    except Exception as exc:
        raise ChunkAnalysisError(index, f"Gemini error: {exc}") from exc

    try:
        return first_text(response)
    except EmptyResponseError as exc:
        raise ChunkAnalysisError(index, str(exc)) from exc


def dispatch_chunks(
    generator: TextGenerator,
    video: VideoContext,
    chunks: Sequence[Sequence[Comment]],
    *,
    limiter: RateLimiter,
    tracking_id: str,
) -> list[asyncio.Task[str]]:
    """Start one task per chunk; the caller is responsible for joining them."""
    base = video.without_comments()
    return [
        asyncio.create_task(
            analyze_chunk(generator, limiter, base, chunk, i, len(chunks), tracking_id),
            name=f"chunk-{i}",
        )
        for i, chunk in enumerate(chunks)
    ]
