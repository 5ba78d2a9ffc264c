"""Collaborator protocols and shared type aliases for tool parameters."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated, Any, Protocol

from google.genai import types
from pydantic import Field

from .models.video import VideoContext

# ── Collaborator protocols ───────────────────────────────────────────────────


class TextGenerator(Protocol):
    """Model-call abstraction; must tolerate concurrent invocation."""

    async def generate(self, prompt: str) -> types.GenerateContentResponse: ...


class VideoSource(Protocol):
    async def fetch_video_and_comments(
        self, video_id: str, tracking_id: str, run_date: str,
    ) -> VideoContext: ...


class SnapshotStore(Protocol):
    async def store(self, key: str, data: bytes) -> None: ...

    async def load(self, key: str) -> bytes: ...


class Warehouse(Protocol):
    async def record_exists(self, table: str, tracking_id: str) -> bool: ...

    async def insert(self, table: str, rows: list[dict[str, Any]]) -> None: ...


ProgressCallback = Callable[[str, str], Awaitable[None]]
"""``(status, message)`` hook used by run_pipeline to report progress."""

# ── Annotated aliases ────────────────────────────────────────────────────────

YouTubeUrl = Annotated[str, Field(
    min_length=5,
    description="YouTube video URL (youtube.com or youtu.be) or bare video ID",
)]
TrackingId = Annotated[str, Field(
    min_length=1,
    description="Tracking ID returned by youtube_fetch",
)]
