"""Shared test fixtures for yt-sentiment-mcp."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import types

from yt_sentiment_mcp.models.video import Comment, VideoContext


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Make FunctionTool objects in the tool modules directly awaitable."""
    import importlib
    import pkgutil

    import yt_sentiment_mcp.tools as tools_pkg

    for info in pkgutil.walk_packages(tools_pkg.__path__, tools_pkg.__name__ + "."):
        mod = importlib.import_module(info.name)
        for name in list(vars(mod)):
            obj = getattr(mod, name, None)
            if obj is not None and hasattr(obj, "fn") and not callable(obj):
                setattr(mod, name, obj.fn)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit real Gemini or YouTube APIs."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")
    monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)
    monkeypatch.delenv("WEAVIATE_URL", raising=False)
    monkeypatch.delenv("WEAVIATE_API_KEY", raising=False)


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    """Disable MLflow tracing so no test talks to a tracking server."""
    monkeypatch.setenv("YT_SENTIMENT_TRACING_ENABLED", "false")
    monkeypatch.delenv("MLFLOW_TRACKING_URI", raising=False)


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/yt-sentiment-mcp/.env."""
    monkeypatch.setattr(
        "yt_sentiment_mcp.config.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def _isolate_snapshots(tmp_path, monkeypatch):
    """Point the snapshot store at a per-test directory."""
    monkeypatch.setenv("SNAPSHOT_DIR", str(tmp_path / "snapshots"))


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton between tests."""
    import yt_sentiment_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


# ── Builders ─────────────────────────────────────────────────────────────────


@pytest.fixture()
def text_response():
    """Build a GenerateContentResponse whose single candidate carries *text*."""

    def _build(text: str) -> types.GenerateContentResponse:
        return types.GenerateContentResponse(
            candidates=[
                types.Candidate(
                    content=types.Content(role="model", parts=[types.Part(text=text)]),
                )
            ]
        )

    return _build


@pytest.fixture()
def make_video():
    """Build a VideoContext with *n* numbered top-level comments."""

    def _build(n: int = 0, video_id: str = "dQw4w9WgXcQ") -> VideoContext:
        return VideoContext(
            id=video_id,
            channel_id="UC123",
            channel_title="Test Channel",
            tracking_id="tid-1",
            run_date="2025-01-15",
            title="Test Video",
            description="A video used in tests",
            view_count=10000,
            like_count=500,
            comment_count=n,
            comments=tuple(
                Comment(id=f"c{i}", channel_id="UC123", text=f"comment {i}", like_count=i)
                for i in range(n)
            ),
        )

    return _build


@pytest.fixture()
def report_dict() -> dict:
    """A complete, schema-valid final report as the model would emit it."""
    return {
        "tracking_id": "model-invented",
        "run_date": "1999-01-01",
        "executive_summary": "Viewers love the pacing but want better audio.",
        "performance_metrics": {
            "video_statistics": {"view_count": 10000, "like_count": 500, "comment_count": 250},
            "engagement_ratios": {"like_to_view_ratio": 0.05, "comment_to_view_ratio": 0.025},
            "interpretation": "Healthy engagement for the niche.",
        },
        "audience_analysis": {
            "sentiment_label": "Positive",
            "summary": "Mostly upbeat.",
            "positive_comments": 180,
            "negative_comments": 20,
            "neutral_comments": 50,
            "audience_persona": "Hobbyist builders.",
        },
        "content_feedback": {
            "positive_feedback": [{"point": "Clear steps", "representative_comment": "so clear!"}],
            "constructive_criticism": [{"point": "Audio", "representative_comment": "mic is quiet"}],
            "unanswered_questions": [{"question": "Which glue?", "representative_comment": "what glue?"}],
        },
        "key_themes": [
            {"theme_title": "Pacing", "summary": "Well paced.", "representative_comment": "never boring"},
            {"theme_title": "Audio", "summary": "Too quiet.", "representative_comment": "turn it up"},
        ],
        "engagement_highlights": [
            {"comment_text": "best tutorial", "engagement_count": 120, "reason_for_engagement": "Praise"},
        ],
        "swot_analysis": {
            "strengths": "Clarity",
            "weaknesses": "Audio",
            "opportunities": "Series",
            "threats": "Competitors",
        },
        "actionable_recommendations": {
            "content_strategy": [{"idea": "Part 2", "reason": "Requested often"}],
            "video_improvements": [{"suggestion": "New mic", "reason": "Audio complaints"}],
            "community_management": "Pin an FAQ comment.",
            "monetization_opportunities": [{"category": "Tools", "products": ["glue gun"]}],
        },
    }


@pytest.fixture()
def report_json(report_dict) -> str:
    return json.dumps(report_dict)


@pytest.fixture()
def mock_generator():
    """A TextGenerator double whose ``generate`` is an AsyncMock."""
    generator = MagicMock()
    generator.generate = AsyncMock()
    return generator
