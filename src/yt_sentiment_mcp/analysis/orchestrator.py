"""Map-reduce comment analysis — chunk, dispatch, aggregate, reduce."""

from __future__ import annotations

import logging

from ..errors import InvalidInputError
from ..models.video import VideoContext
from ..ratelimit import RateLimiter
from ..types import TextGenerator
from .aggregator import aggregate_partials
from .chunking import COMMENT_CHUNK_SIZE, chunk_comments
from .dispatcher import CHUNK_REQUEST_INTERVAL, dispatch_chunks
from .reducer import REDUCE_MAX_ATTEMPTS, REDUCE_RETRY_DELAY, reduce_partials
from .sanitizer import FinalizedAnalysis

logger = logging.getLogger(__name__)


class CommentAnalyzer:
    """Runs one video's comments through the map-reduce analysis.

    The generator handle is injected so tests can substitute a double. A
    fresh limiter is created per run unless one is supplied, in which case
    it is shared with whatever else holds it.

    Args:
        generator: Model-call handle used by both phases.
        limiter: Optional shared rate limiter for the map phase.
        chunk_size: Comments per chunk.
        max_attempts: Reduce-phase attempt ceiling.
        retry_delay: Flat delay between reduce attempts, in seconds.
    """

    def __init__(
        self,
        generator: TextGenerator,
        *,
        limiter: RateLimiter | None = None,
        chunk_size: int = COMMENT_CHUNK_SIZE,
        max_attempts: int = REDUCE_MAX_ATTEMPTS,
        retry_delay: float = REDUCE_RETRY_DELAY,
    ) -> None:
        self.generator = generator
        self.limiter = limiter
        self.chunk_size = chunk_size
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    async def analyze(self, video: VideoContext, tracking_id: str, run_date: str) -> FinalizedAnalysis:
        """Produce the finalized analysis record for *video*.

        Raises:
            InvalidInputError: Missing tracking id or run date.
            MapPhaseError: Any chunk failed.
            ReductionError: The final report could not be produced.
        """
        if not tracking_id:
            raise InvalidInputError("Missing tracking id")
        if not run_date:
            raise InvalidInputError("Missing run date")

        chunks = chunk_comments(video.comments, self.chunk_size)
        logger.info(
            "[%s] Split %d comments into %d chunk(s) of size %d",
            tracking_id, len(video.comments), len(chunks), self.chunk_size,
        )

        limiter = self.limiter or RateLimiter(CHUNK_REQUEST_INTERVAL, burst=1)
        tasks = dispatch_chunks(
            self.generator, video, chunks, limiter=limiter, tracking_id=tracking_id,
        )
        partials = await aggregate_partials(tasks, tracking_id=tracking_id)

        logger.info("[%s] Starting final reduction step", tracking_id)
        return await reduce_partials(
            self.generator,
            video,
            partials,
            tracking_id=tracking_id,
            run_date=run_date,
            max_attempts=self.max_attempts,
            delay=self.retry_delay,
        )
