"""Fan-in of map-phase tasks into the partial-analysis array."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ..errors import MapPhaseError

logger = logging.getLogger(__name__)


def combine_partials(fragments: Sequence[str]) -> str:
    """Join raw chunk texts into one JSON array literal."""
    return "[" + ",".join(fragments) + "]"


async def aggregate_partials(tasks: Sequence[asyncio.Task[str]], *, tracking_id: str) -> str:
    """Join every chunk task, then combine their texts.

    All-or-nothing: if any task failed, each failure is logged and a single
    MapPhaseError is raised, so no partial array escapes. Cancellation of
    any task (or of the caller) propagates as ``asyncio.CancelledError``.
    """
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    failures: list[BaseException] = []
    fragments: list[str] = []
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            failures.append(outcome)
        else:
            fragments.append(outcome)

    if failures:
        for exc in failures:
            logger.error("[%s] Error during chunk analysis: %s", tracking_id, exc)
        raise MapPhaseError(failures, len(outcomes))

    logger.info("[%s] All %d chunk(s) analyzed", tracking_id, len(fragments))
    return combine_partials(fragments)
