"""Tests for the reduce phase and its bounded retry."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from google.genai import types

from yt_sentiment_mcp.analysis.reducer import build_reduce_prompt, reduce_partials
from yt_sentiment_mcp.errors import EmptyResponseError, FormatError, ReductionError, TransportError


class TestBuildReducePrompt:
    def test_embeds_metadata_without_comments(self, make_video):
        prompt = build_reduce_prompt(make_video(5), '[{"n":1}]')

        assert '"comments"' not in prompt
        assert '"title":"Test Video"' in prompt
        assert '[{"n":1}]' in prompt


@patch("yt_sentiment_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
class TestReducePartials:
    """Up to three attempts with a flat 2 s delay; first clean parse wins."""

    async def test_first_attempt_success(self, mock_sleep, make_video, mock_generator, text_response, report_json):
        mock_generator.generate.return_value = text_response(report_json)

        finalized = await reduce_partials(
            mock_generator, make_video(0), "[]", tracking_id="tid", run_date="2025-01-15",
        )

        assert finalized.record.tracking_id == "tid"
        mock_generator.generate.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    async def test_two_malformed_then_success(
        self, mock_sleep, make_video, mock_generator, text_response, report_json,
    ):
        mock_generator.generate.side_effect = [
            text_response("not json at all"),
            text_response('{"executive_summary": "incomplete"}'),
            text_response(report_json),
        ]

        finalized = await reduce_partials(
            mock_generator, make_video(0), "[]", tracking_id="tid", run_date="2025-01-15",
        )

        assert finalized.record.run_date == "2025-01-15"
        assert mock_generator.generate.await_count == 3
        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(2.0)

    async def test_transport_failures_exhaust_attempts(self, mock_sleep, make_video, mock_generator):
        mock_generator.generate.side_effect = ConnectionError("503 unavailable")

        with pytest.raises(ReductionError, match="after 3 attempt") as exc_info:
            await reduce_partials(
                mock_generator, make_video(0), "[]", tracking_id="tid", run_date="2025-01-15",
            )

        assert mock_generator.generate.await_count == 3
        assert mock_sleep.await_count == 2
        assert isinstance(exc_info.value.__cause__, TransportError)

    async def test_empty_responses_are_retried(self, mock_sleep, make_video, mock_generator, text_response, report_json):
        mock_generator.generate.side_effect = [
            types.GenerateContentResponse(candidates=[]),
            text_response(report_json),
        ]

        finalized = await reduce_partials(
            mock_generator, make_video(0), "[]", tracking_id="tid", run_date="2025-01-15",
        )

        assert finalized.record.executive_summary
        assert mock_generator.generate.await_count == 2

    async def test_last_cause_is_chained(self, mock_sleep, make_video, mock_generator, text_response):
        mock_generator.generate.side_effect = [
            ConnectionError("down"),
            types.GenerateContentResponse(candidates=[]),
            text_response("{}"),
        ]

        with pytest.raises(ReductionError) as exc_info:
            await reduce_partials(
                mock_generator, make_video(0), "[]", tracking_id="tid", run_date="2025-01-15",
            )

        assert isinstance(exc_info.value.__cause__, FormatError)

    async def test_no_fourth_attempt(self, mock_sleep, make_video, mock_generator, text_response, report_json):
        mock_generator.generate.side_effect = [
            text_response("bad"),
            text_response("bad"),
            text_response("bad"),
            text_response(report_json),
        ]

        with pytest.raises(ReductionError):
            await reduce_partials(
                mock_generator, make_video(0), "[]", tracking_id="tid", run_date="2025-01-15",
            )

        assert mock_generator.generate.await_count == 3

    async def test_custom_attempts_and_delay(self, mock_sleep, make_video, mock_generator):
        mock_generator.generate.side_effect = EmptyResponseError("empty")

        with pytest.raises(ReductionError):
            await reduce_partials(
                mock_generator, make_video(0), "[]",
                tracking_id="tid", run_date="2025-01-15", max_attempts=2, delay=0.5,
            )

        assert mock_generator.generate.await_count == 2
        mock_sleep.assert_awaited_once_with(0.5)

    async def test_payload_is_finalized_json(self, mock_sleep, make_video, mock_generator, text_response, report_json):
        mock_generator.generate.return_value = text_response(f"```json\n{report_json}\n```")

        finalized = await reduce_partials(
            mock_generator, make_video(0), "[]", tracking_id="tid-9", run_date="2025-03-03",
        )

        payload = json.loads(finalized.payload)
        assert payload["tracking_id"] == "tid-9"
        assert payload["run_date"] == "2025-03-03"
