"""Three-step pipeline: fetch → analyze → ingest, plus the full run.

Each step reads its inputs from the snapshot store by tracking id and
returns a ``StepResult`` naming the step to run next, so steps can be
invoked independently (one MCP tool each) or chained by ``run_pipeline``.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import date

from .analysis import CommentAnalyzer
from .client import GeminiClient
from .config import ServerConfig, get_config
from .errors import InvalidInputError, SnapshotNotFoundError
from .models.analysis import AnalysisRecord
from .models.pipeline import StepResult
from .models.video import VideoContext
from .storage import LocalSnapshotStore, analysis_snapshot_key, raw_snapshot_key
from .types import ProgressCallback, SnapshotStore, VideoSource, Warehouse
from .warehouse import WeaviateWarehouse
from .youtube import YouTubeClient, extract_video_id

logger = logging.getLogger(__name__)


@dataclass
class PipelineServices:
    """Collaborator handles shared by the pipeline steps."""

    source: VideoSource
    store: SnapshotStore
    analyzer: CommentAnalyzer
    warehouse: Warehouse | None = None

    @classmethod
    def from_config(cls, cfg: ServerConfig | None = None) -> PipelineServices:
        """Build the production collaborators from configuration.

        The warehouse is left unset when ``WEAVIATE_URL`` is empty; the
        ingest step then fails with InvalidInputError.
        """
        cfg = cfg or get_config()
        return cls(
            source=YouTubeClient.from_config(cfg),
            store=LocalSnapshotStore.from_config(cfg),
            analyzer=CommentAnalyzer(GeminiClient.from_config(cfg)),
            warehouse=WeaviateWarehouse.from_config(cfg) if cfg.warehouse_enabled else None,
        )

    async def aclose(self) -> None:
        """Release the model client and warehouse connection."""
        for handle in (self.analyzer.generator, self.warehouse):
            close = getattr(handle, "aclose", None)
            if close is not None:
                await close()


def _elapsed(start: float) -> str:
    return f"{time.perf_counter() - start:.3f}s"


def _require_tracking_id(tracking_id: str) -> str:
    tracking_id = (tracking_id or "").strip()
    if not tracking_id:
        raise InvalidInputError("Missing tracking id")
    return tracking_id


async def fetch_step(
    services: PipelineServices, video_id: str, tracking_id: str | None = None,
) -> StepResult:
    """Fetch a video and its comments and store the raw snapshot.

    Args:
        services: Collaborator handles.
        video_id: YouTube video ID.
        tracking_id: Reuse an existing run id; a new UUID4 is generated when omitted.

    Returns:
        StepResult pointing at the ``analyze`` step.
    """
    start = time.perf_counter()
    if not video_id:
        raise InvalidInputError("Missing video id")
    tracking_id = tracking_id or str(uuid.uuid4())
    run_date = date.today().isoformat()
    logger.info("[%s] Fetching video %s", tracking_id, video_id)

    video = await services.source.fetch_video_and_comments(video_id, tracking_id, run_date)
    key = raw_snapshot_key(tracking_id)
    await services.store.store(key, video.model_dump_json().encode())

    logger.info("[%s] Stored %d comments under %s", tracking_id, len(video.comments), key)
    return StepResult(
        tracking_id=tracking_id,
        processing_time=_elapsed(start),
        message=f"Successfully fetched {len(video.comments)} comments.",
        next_action="analyze",
    )


async def analyze_step(services: PipelineServices, tracking_id: str) -> StepResult:
    """Run the map-reduce analysis over a stored raw snapshot.

    Raises:
        InvalidInputError: Empty tracking id.
        SnapshotNotFoundError: No raw snapshot for *tracking_id*.
        MapPhaseError: A chunk failed.
        ReductionError: The final report could not be produced.
    """
    start = time.perf_counter()
    tracking_id = _require_tracking_id(tracking_id)

    data = await services.store.load(raw_snapshot_key(tracking_id))
    video = VideoContext.model_validate_json(data)
    logger.info("[%s] Analyzing %d comments for video %s", tracking_id, len(video.comments), video.id)

    run_date = video.run_date or date.today().isoformat()
    result = await services.analyzer.analyze(video, tracking_id, run_date)

    key = analysis_snapshot_key(tracking_id)
    await services.store.store(key, result.payload)
    logger.info("[%s] Stored analysis under %s", tracking_id, key)
    return StepResult(
        tracking_id=tracking_id,
        processing_time=_elapsed(start),
        message=f"Successfully analyzed data and stored result as {key}",
        next_action="ingest",
    )


async def _ingest_raw(warehouse: Warehouse, store: SnapshotStore, tracking_id: str) -> list[str]:
    data = await store.load(raw_snapshot_key(tracking_id))
    video = VideoContext.model_validate_json(data)

    await warehouse.insert("videos", [video.video_row()])
    messages = [f"Successfully ingested video data for video ID {video.id}."]

    rows = video.comment_rows()
    if rows:
        await warehouse.insert("comments", rows)
        messages.append(f"Successfully ingested {len(rows)} comments.")
    return messages


async def ingest_step(services: PipelineServices, tracking_id: str) -> StepResult:
    """Load the raw and analyzed snapshots into the warehouse, once per run.

    Tables already holding rows for *tracking_id* are skipped, as is a
    missing analyzed snapshot. Status is ``skipped`` when nothing was
    inserted.
    """
    start = time.perf_counter()
    tracking_id = _require_tracking_id(tracking_id)
    warehouse = services.warehouse
    if warehouse is None:
        raise InvalidInputError("Warehouse not configured: set WEAVIATE_URL")

    messages: list[str] = []
    ingested = False

    if await warehouse.record_exists("videos", tracking_id):
        logger.info("[%s] Raw data already in warehouse, skipping", tracking_id)
        messages.append(f"Raw data for tracking ID {tracking_id} already exists in the warehouse. Skipping.")
    else:
        messages.extend(await _ingest_raw(warehouse, services.store, tracking_id))
        ingested = True

    if await warehouse.record_exists("analyzed", tracking_id):
        logger.info("[%s] Analyzed data already in warehouse, skipping", tracking_id)
        messages.append(f"Analyzed data for tracking ID {tracking_id} already exists in the warehouse. Skipping.")
    else:
        key = analysis_snapshot_key(tracking_id)
        try:
            data = await services.store.load(key)
        except SnapshotNotFoundError:
            logger.info("[%s] No analyzed snapshot %s, skipping", tracking_id, key)
            messages.append(f"Analyzed data file {key} not found. Skipping.")
        else:
            record = AnalysisRecord.model_validate_json(data)
            await warehouse.insert("analyzed", [record.model_dump()])
            logger.info("[%s] Ingested analyzed data", tracking_id)
            messages.append(f"Successfully ingested analyzed data for tracking ID {tracking_id}.")
            ingested = True

    return StepResult(
        tracking_id=tracking_id,
        processing_time=_elapsed(start),
        status="success" if ingested else "skipped",
        message=" ".join(messages),
    )


async def _noop_progress(status: str, message: str) -> None:
    return None


async def run_pipeline(
    services: PipelineServices, url: str, progress: ProgressCallback | None = None,
) -> list[StepResult]:
    """Run fetch, analyze and ingest for one video URL.

    *progress* receives ``(status, message)`` pairs: ``processing`` before
    each step, ``success`` after it, ``error`` when a step raises (the
    exception is then re-raised) and a final ``complete``.
    """
    report = progress or _noop_progress
    video_id = extract_video_id(url)
    await report("processing", f"Extracted Video ID: {video_id}")

    results: list[StepResult] = []

    await report("processing", "Step 1/3: Fetching YouTube data...")
    try:
        fetched = await fetch_step(services, video_id)
    except Exception as exc:
        await report("error", f"Step 1 failed: {exc}")
        raise
    results.append(fetched)
    tracking_id = fetched.tracking_id
    await report(
        "success",
        f"Step 1/3 succeeded: {fetched.message} (Tracking ID: {tracking_id}, Time: {fetched.processing_time})",
    )

    await report("processing", "Step 2/3: Analyzing data with Gemini...")
    try:
        analyzed = await analyze_step(services, tracking_id)
    except Exception as exc:
        await report("error", f"Step 2 failed: {exc}")
        raise
    results.append(analyzed)
    await report("success", f"Step 2/3 succeeded: {analyzed.message} (Time: {analyzed.processing_time})")

    await report("processing", "Step 3/3: Ingesting data into the warehouse...")
    try:
        ingested = await ingest_step(services, tracking_id)
    except Exception as exc:
        await report("error", f"Step 3 failed: {exc}")
        raise
    results.append(ingested)
    await report("success", f"Step 3/3 succeeded: {ingested.message} (Time: {ingested.processing_time})")

    await report("complete", "All steps completed successfully!")
    return results
