"""YouTube Data API v3 client — video details plus relevance-ordered comments.

Thin async wrapper around google-api-python-client (sync), with every
request run in ``asyncio.to_thread()``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from urllib.parse import parse_qs, urlparse

from googleapiclient.errors import HttpError

from .config import ServerConfig, get_config
from .errors import InvalidInputError, TransportError, VideoNotFoundError
from .models.video import Comment, VideoContext

logger = logging.getLogger(__name__)

_BARE_VIDEO_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")


def _is_youtube_host(host: str) -> bool:
    host = host.lower().split(":", 1)[0]
    return host == "youtube.com" or host.endswith(".youtube.com")


def _is_youtu_be_host(host: str) -> bool:
    host = host.lower().split(":", 1)[0]
    return host in ("youtu.be", "www.youtu.be")


def extract_video_id(url_or_id: str) -> str:
    """Return the video ID from a YouTube URL, or pass through a bare ID.

    Handles youtu.be/<id>, youtube.com/watch?v=<id> and the
    /shorts/, /embed/ and /live/ path forms.

    Raises:
        InvalidInputError: If no video ID can be extracted.
    """
    value = url_or_id.strip().replace("\\", "")
    if _BARE_VIDEO_ID.match(value):
        return value

    parsed = urlparse(value)
    host = parsed.netloc
    video_id: str | None = None
    if _is_youtu_be_host(host):
        video_id = parsed.path.strip("/").split("/", 1)[0] or None
    elif _is_youtube_host(host):
        video_id = parse_qs(parsed.query).get("v", [None])[0]
        if not video_id:
            parts = [p for p in parsed.path.split("/") if p]
            if len(parts) >= 2 and parts[0] in {"shorts", "embed", "live"}:
                video_id = parts[1]

    if not video_id:
        raise InvalidInputError(f"Could not find video ID in URL: {url_or_id}")
    return video_id.split("&")[0].split("?")[0]


def _thumbnail_url(thumbnails: dict) -> str:
    """Pick the best available thumbnail: maxres, then standard, then high."""
    for size in ("maxres", "standard", "high"):
        if thumbnails.get(size):
            return thumbnails[size].get("url", "")
    return ""


def _is_quota_exceeded(exc: HttpError) -> bool:
    content = exc.content.decode(errors="replace") if isinstance(exc.content, bytes) else str(exc.content)
    return "quotaExceeded" in content or "quotaExceeded" in str(exc)


class YouTubeClient:
    """YouTube Data API v3 handle.

    Args:
        api_key: Data API key.
        max_comments: Cap on comments (top-level plus replies) per video.
    """

    def __init__(self, api_key: str, max_comments: int = 5000) -> None:
        if not api_key:
            raise InvalidInputError("No YouTube API key — set YOUTUBE_API_KEY")
        self.api_key = api_key
        self.max_comments = max_comments
        self._service = None

    @classmethod
    def from_config(cls, cfg: ServerConfig | None = None) -> YouTubeClient:
        cfg = cfg or get_config()
        return cls(cfg.youtube_api_key or cfg.gemini_api_key, cfg.max_comments_to_fetch)

    @property
    def service(self):
        """Lazily built discovery service."""
        if self._service is None:
            from googleapiclient.discovery import build

            self._service = build(
                "youtube", "v3", developerKey=self.api_key, cache_discovery=False,
            )
        return self._service

    async def fetch_video_and_comments(
        self, video_id: str, tracking_id: str, run_date: str,
    ) -> VideoContext:
        """Fetch video details and up to ``max_comments`` comments.

        Raises:
            VideoNotFoundError: The API returned no item for *video_id*.
            TransportError: Any other API failure (except a quota signal
                while paging comments, which stops paging early).
        """
        try:
            resp = await asyncio.to_thread(self._fetch_video, video_id)
        except HttpError as exc:
            raise TransportError(f"Error fetching video details: {exc}") from exc

        items = resp.get("items", [])
        if not items:
            raise VideoNotFoundError(f"Video not found: {video_id}")
        item = items[0]
        snippet = item.get("snippet", {})
        details = item.get("contentDetails", {})
        stats = item.get("statistics", {})
        logger.info("[%s] Fetched video details for %s", tracking_id, video_id)

        channel_id = snippet.get("channelId", "")
        logger.info("[%s] Fetching comments ordered by relevance", tracking_id)
        comments = await asyncio.to_thread(
            self._fetch_comments, video_id, channel_id, tracking_id, run_date,
        )
        replies = sum(1 for c in comments if c.is_reply)
        logger.info(
            "[%s] Fetched %d comments (%d replies) for %s",
            tracking_id, len(comments), replies, video_id,
        )

        return VideoContext(
            id=item.get("id", video_id),
            channel_id=channel_id,
            channel_title=snippet.get("channelTitle", ""),
            tracking_id=tracking_id,
            run_date=run_date,
            title=snippet.get("title", ""),
            description=snippet.get("description", ""),
            thumbnail_url=_thumbnail_url(snippet.get("thumbnails", {})),
            duration=details.get("duration", ""),
            category_id=snippet.get("categoryId", ""),
            view_count=int(stats.get("viewCount", 0)),
            like_count=int(stats.get("likeCount", 0)),
            favorite_count=int(stats.get("favoriteCount", 0)),
            comment_count=int(stats.get("commentCount", 0)),
            comments=tuple(comments),
        )

    def _fetch_video(self, video_id: str) -> dict:
        return self.service.videos().list(
            part="snippet,contentDetails,statistics",
            id=video_id,
        ).execute()

    def _fetch_comments(
        self, video_id: str, channel_id: str, tracking_id: str, run_date: str,
    ) -> list[Comment]:
        """Page through comment threads, replies following their parent."""
        threads = self.service.commentThreads()
        comments: list[Comment] = []
        request = threads.list(
            part="snippet,replies",
            videoId=video_id,
            textFormat="plainText",
            maxResults=100,
            order="relevance",
        )
        while request is not None:
            try:
                response = request.execute()
            except HttpError as exc:
                if _is_quota_exceeded(exc):
                    logger.warning(
                        "[%s] YouTube quota exceeded while fetching comments; "
                        "proceeding with %d fetched",
                        tracking_id, len(comments),
                    )
                    break
                raise TransportError(f"Error fetching comments: {exc}") from exc

            for item in response.get("items", []):
                thread = item.get("snippet", {})
                top = thread.get("topLevelComment", {})
                top_snip = top.get("snippet", {})
                comments.append(Comment(
                    id=top.get("id", ""),
                    channel_id=channel_id,
                    text=top_snip.get("textDisplay", ""),
                    like_count=top_snip.get("likeCount", 0),
                    reply_count=thread.get("totalReplyCount", 0),
                    tracking_id=tracking_id,
                    run_date=run_date,
                ))
                for reply in item.get("replies", {}).get("comments", []):
                    comments.append(Comment(
                        id=reply.get("id", ""),
                        parent_id=top.get("id", ""),
                        channel_id=channel_id,
                        text=reply.get("snippet", {}).get("textDisplay", ""),
                        like_count=reply.get("snippet", {}).get("likeCount", 0),
                        tracking_id=tracking_id,
                        run_date=run_date,
                    ))
                if len(comments) >= self.max_comments:
                    logger.info(
                        "[%s] Reached comment fetch limit (%d)", tracking_id, self.max_comments,
                    )
                    return comments[:self.max_comments]

            request = threads.list_next(request, response)
        return comments
