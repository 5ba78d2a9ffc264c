"""Pipeline tools — fetch, analyze, ingest, and the full run."""

from __future__ import annotations

import logging

from fastmcp import Context, FastMCP
from mcp.types import ToolAnnotations

from ..errors import make_tool_error
from ..pipeline import PipelineServices, analyze_step, fetch_step, ingest_step, run_pipeline
from ..tracing import tag_run, trace
from ..types import TrackingId, YouTubeUrl
from ..youtube import extract_video_id

logger = logging.getLogger(__name__)
pipeline_server = FastMCP("pipeline")

_services: PipelineServices | None = None

_PIPELINE_STEPS = 3


def get_services() -> PipelineServices:
    """Return the shared collaborator set, building it on first use."""
    global _services
    if _services is None:
        _services = PipelineServices.from_config()
    return _services


async def close_services() -> bool:
    """Close and forget the shared collaborators. Returns True if any were open."""
    global _services
    services, _services = _services, None
    if services is None:
        return False
    await services.aclose()
    return True


@pipeline_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="youtube_fetch", span_type="TOOL")
async def youtube_fetch(url: YouTubeUrl) -> dict:
    """Fetch a video's metadata and comments and store them as a snapshot.

    Fetches up to MAX_COMMENTS_TO_FETCH comments (replies included) sorted
    by relevance. Costs YouTube API units only.

    Args:
        url: YouTube video URL or bare video ID.

    Returns:
        Dict with tracking_id, processing_time, status, message and
        next_action ("analyze"), or error via make_tool_error().
    """
    try:
        video_id = extract_video_id(url)
        result = await fetch_step(get_services(), video_id)
        tag_run(result.tracking_id, step="fetch")
        return result.model_dump()
    except Exception as exc:
        return make_tool_error(exc)


@pipeline_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="comments_analyze", span_type="TOOL")
async def comments_analyze(tracking_id: TrackingId) -> dict:
    """Analyze a fetched snapshot's comments with Gemini (map-reduce).

    Comments are analyzed in chunks of 100, then reduced into a single
    marketing and sentiment report stored next to the raw snapshot.

    Args:
        tracking_id: Tracking ID returned by youtube_fetch.

    Returns:
        Dict with tracking_id, processing_time, status, message and
        next_action ("ingest"), or error via make_tool_error().
    """
    try:
        result = await analyze_step(get_services(), tracking_id)
        tag_run(result.tracking_id, step="analyze")
        return result.model_dump()
    except Exception as exc:
        return make_tool_error(exc)


@pipeline_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
    )
)
@trace(name="warehouse_ingest", span_type="TOOL")
async def warehouse_ingest(tracking_id: TrackingId) -> dict:
    """Load a run's raw and analyzed snapshots into the Weaviate warehouse.

    Safe to repeat: tables that already hold rows for the tracking id are
    skipped. Requires WEAVIATE_URL.

    Args:
        tracking_id: Tracking ID returned by youtube_fetch.

    Returns:
        Dict with status "success" or "skipped" and a summary message,
        or error via make_tool_error().
    """
    try:
        result = await ingest_step(get_services(), tracking_id)
        tag_run(result.tracking_id, step="ingest")
        return result.model_dump()
    except Exception as exc:
        return make_tool_error(exc)


@pipeline_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="pipeline_run", span_type="TOOL")
async def pipeline_run(url: YouTubeUrl, ctx: Context) -> dict:
    """Run fetch, analyze and ingest for one video, reporting progress.

    Args:
        url: YouTube video URL or bare video ID.

    Returns:
        Dict with tracking_id and the per-step results, or error via
        make_tool_error().
    """
    completed = 0

    async def _progress(status: str, message: str) -> None:
        nonlocal completed
        if status == "error":
            await ctx.error(message)
            return
        await ctx.info(message)
        if status == "success":
            completed += 1
            await ctx.report_progress(completed, _PIPELINE_STEPS)

    try:
        results = await run_pipeline(get_services(), url, progress=_progress)
    except Exception as exc:
        return make_tool_error(exc)
    tag_run(results[0].tracking_id, step="run")
    return {
        "tracking_id": results[0].tracking_id,
        "steps": [r.model_dump() for r in results],
    }
