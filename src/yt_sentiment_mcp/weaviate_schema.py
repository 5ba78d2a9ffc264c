"""Weaviate collection definitions for the warehouse tables.

Each logical table (``videos``, ``comments``, ``analyzed``) maps to one
collection. Collections are created idempotently by
``weaviate_client.ensure_collections()`` on first connection.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PropertyDef:
    """Single property in a Weaviate collection."""

    name: str
    data_type: str
    description: str = ""
    index_filterable: bool = True
    index_range_filters: bool = False
    index_searchable: bool | None = None  # None = Weaviate default (True for text)


@dataclass
class CollectionDef:
    """A Weaviate collection backing one warehouse table."""

    table: str
    name: str
    description: str = ""
    properties: list[PropertyDef] = field(default_factory=list)

    @property
    def property_names(self) -> set[str]:
        return {p.name for p in self.properties}


def _keyword(name: str, description: str) -> PropertyDef:
    """Exact-match text property (filterable, not tokenized for search)."""
    return PropertyDef(name, "text", description, index_searchable=False)


def _count(name: str, description: str) -> PropertyDef:
    return PropertyDef(name, "int", description, index_range_filters=True)


VIDEOS = CollectionDef(
    table="videos",
    name="YouTubeVideos",
    description="One row per fetched video (metadata and statistics)",
    properties=[
        _keyword("video_id", "YouTube video ID"),
        _keyword("channel_id", "Owning channel ID"),
        PropertyDef("channel_title", "text", "Channel display name"),
        _keyword("tracking_id", "Pipeline run tracking ID"),
        _keyword("run_date", "Run date (YYYY-MM-DD)"),
        PropertyDef("title", "text", "Video title"),
        PropertyDef("description", "text", "Video description"),
        _keyword("thumbnail_url", "Best available thumbnail URL"),
        _keyword("duration", "ISO 8601 duration"),
        _keyword("category_id", "YouTube category ID"),
        _count("view_count", "View count at fetch time"),
        _count("like_count", "Like count at fetch time"),
        _count("favorite_count", "Favorite count at fetch time"),
        _count("comment_count", "Comment count at fetch time"),
    ],
)

COMMENTS = CollectionDef(
    table="comments",
    name="YouTubeComments",
    description="Top-level comments and replies fetched for a video",
    properties=[
        _keyword("video_id", "Video the comment belongs to"),
        _keyword("comment_id", "YouTube comment ID"),
        _keyword("parent_id", "Parent comment ID, empty for top-level comments"),
        _keyword("channel_id", "Channel of the commented video"),
        PropertyDef("text", "text", "Comment text"),
        _count("like_count", "Likes on the comment"),
        _count("reply_count", "Replies to the comment"),
        _keyword("tracking_id", "Pipeline run tracking ID"),
        _keyword("run_date", "Run date (YYYY-MM-DD)"),
    ],
)

ANALYSES = CollectionDef(
    table="analyzed",
    name="CommentAnalyses",
    description="Final marketing and sentiment report per pipeline run",
    properties=[
        _keyword("tracking_id", "Pipeline run tracking ID"),
        _keyword("run_date", "Run date (YYYY-MM-DD)"),
        PropertyDef("executive_summary", "text", "Executive summary"),
        _keyword("sentiment_label", "Overall sentiment label"),
        _count("positive_comments", "Summed positive comment count"),
        _count("negative_comments", "Summed negative comment count"),
        _count("neutral_comments", "Summed neutral comment count"),
        PropertyDef("key_themes", "text[]", "Theme titles"),
        PropertyDef("raw_result", "text", "Full analysis record as JSON", index_searchable=False),
    ],
)

ALL_COLLECTIONS: list[CollectionDef] = [VIDEOS, COMMENTS, ANALYSES]

COLLECTIONS_BY_TABLE: dict[str, CollectionDef] = {c.table: c for c in ALL_COLLECTIONS}
