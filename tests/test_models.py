"""Tests for the video snapshot, analysis record and step result models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from yt_sentiment_mcp.models.analysis import AnalysisRecord, KeyTheme
from yt_sentiment_mcp.models.pipeline import StepResult
from yt_sentiment_mcp.models.video import Comment, VideoContext


class TestVideoContext:
    def test_frozen(self, make_video):
        video = make_video(1)
        with pytest.raises(ValidationError):
            video.title = "changed"

    def test_without_comments_keeps_metadata(self, make_video):
        video = make_video(4)
        bare = video.without_comments()

        assert bare.comments == ()
        assert bare.title == video.title
        assert len(video.comments) == 4

    def test_with_comments(self, make_video):
        video = make_video(4)
        assert [c.id for c in video.without_comments().with_comments(video.comments[:2]).comments] == ["c0", "c1"]

    def test_video_row_excludes_comments(self, make_video):
        row = make_video(2).video_row()
        assert "comments" not in row
        assert row["id"] == "dQw4w9WgXcQ"

    def test_comment_rows_tagged_with_video_id(self, make_video):
        rows = make_video(2).comment_rows()
        assert [r["video_id"] for r in rows] == ["dQw4w9WgXcQ", "dQw4w9WgXcQ"]
        assert [r["id"] for r in rows] == ["c0", "c1"]

    def test_json_round_trip(self, make_video):
        video = make_video(3)
        assert VideoContext.model_validate_json(video.model_dump_json()) == video

    def test_reply_flag(self):
        assert Comment(id="r", parent_id="p").is_reply
        assert not Comment(id="t").is_reply


class TestAnalysisRecord:
    def test_valid_report(self, report_dict):
        record = AnalysisRecord.model_validate(report_dict)
        assert record.key_themes[0].theme_title == "Pacing"

    def test_sections_are_required(self, report_dict):
        del report_dict["executive_summary"]
        with pytest.raises(ValidationError):
            AnalysisRecord.model_validate(report_dict)

    def test_unknown_fields_forbidden(self):
        with pytest.raises(ValidationError):
            KeyTheme(theme_title="x", sentiment="positive")

    def test_provenance_optional(self, report_dict):
        del report_dict["tracking_id"]
        del report_dict["run_date"]
        record = AnalysisRecord.model_validate(report_dict)
        assert record.tracking_id == ""


class TestStepResult:
    def test_defaults(self):
        result = StepResult(tracking_id="tid")
        assert result.status == "success"
        assert result.next_action == ""

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            StepResult(tracking_id="tid", status="processing")
