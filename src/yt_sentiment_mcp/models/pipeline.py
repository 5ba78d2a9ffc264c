"""Pipeline step result — returned by each stage and its MCP tool."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

StepStatus = Literal["success", "skipped", "error"]


class StepResult(BaseModel):
    """Outcome of one pipeline step (fetch, analyze, ingest).

    ``next_action`` names the step that should run next; empty once the
    pipeline is complete.
    """

    tracking_id: str
    processing_time: str = ""
    status: StepStatus = "success"
    message: str = ""
    next_action: str = ""
