"""Video snapshot models — metadata and comments fetched from YouTube.

Populated by YouTubeClient from Data API v3 responses and persisted as the
raw ``<tracking_id>.json`` snapshot. Both models are frozen: a run never
mutates the fetched data, it derives copies via ``model_copy``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Comment(BaseModel):
    """A top-level comment or a reply (``parent_id`` set) on a video."""

    model_config = ConfigDict(frozen=True)

    id: str
    parent_id: str = ""
    channel_id: str = ""
    text: str = ""
    like_count: int = 0
    reply_count: int = 0
    tracking_id: str = ""
    run_date: str = ""

    @property
    def is_reply(self) -> bool:
        return bool(self.parent_id)


class VideoContext(BaseModel):
    """Immutable snapshot of one video plus its comments, in relevance order.

    Shared read-only by every chunk prompt and by the final reduction.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    channel_id: str = ""
    channel_title: str = ""
    tracking_id: str = ""
    run_date: str = ""
    title: str = ""
    description: str = ""
    thumbnail_url: str = ""
    duration: str = ""
    category_id: str = ""
    view_count: int = 0
    like_count: int = 0
    favorite_count: int = 0
    comment_count: int = 0
    comments: tuple[Comment, ...] = Field(default_factory=tuple)

    def without_comments(self) -> VideoContext:
        """Return a copy carrying metadata only."""
        return self.model_copy(update={"comments": ()})

    def with_comments(self, comments: tuple[Comment, ...]) -> VideoContext:
        """Return a copy whose comments are replaced by *comments*."""
        return self.model_copy(update={"comments": tuple(comments)})

    def video_row(self) -> dict:
        """Warehouse row for the ``videos`` table (no comments)."""
        return self.model_dump(exclude={"comments"})

    def comment_rows(self) -> list[dict]:
        """Warehouse rows for the ``comments`` table, tagged with the video id."""
        return [{"video_id": self.id, **c.model_dump()} for c in self.comments]
