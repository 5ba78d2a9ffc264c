"""Extract and strictly validate the JSON report embedded in a model reply.

Known fragility: the object is bounded by the first ``{`` and the LAST
``}`` in the text, so trailing commentary that itself contains braces can
widen the slice. ``raw_decode`` then stops at the end of the first complete
value, which drops trailing garbage inside the slice but cannot recover an
object whose closing brace was mis-chosen.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from pydantic import ValidationError

from ..errors import FormatError
from ..models.analysis import AnalysisRecord

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class FinalizedAnalysis:
    """Validated record with orchestrator provenance, plus its JSON bytes."""

    record: AnalysisRecord
    payload: bytes


def extract_json_object(raw: str) -> str:
    """Slice *raw* from the first ``{`` to the last ``}`` inclusive.

    Raises:
        FormatError: No opening/closing brace, or the last ``}`` precedes
            the first ``{``.
    """
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise FormatError(f"could not find valid JSON object in response: {raw[:200]!r}")
    return raw[start:end + 1]


def sanitize_analysis(raw: str, tracking_id: str, run_date: str) -> FinalizedAnalysis:
    """Turn raw model text into a finalized AnalysisRecord.

    Unknown keys, missing sections and type mismatches are hard failures.
    ``tracking_id`` and ``run_date`` are always replaced by the caller's
    values, whatever the model echoed.

    Raises:
        FormatError: No object found, invalid JSON, or schema violation.
    """
    candidate = extract_json_object(raw)
    try:
        _, end = _decoder.raw_decode(candidate)
    except json.JSONDecodeError as exc:
        raise FormatError(f"cleaned JSON is not valid: {exc}") from exc

    try:
        record = AnalysisRecord.model_validate_json(candidate[:end], strict=True)
    except ValidationError as exc:
        raise FormatError(f"JSON does not match the analysis record: {exc}") from exc

    record = record.model_copy(update={"tracking_id": tracking_id, "run_date": run_date})
    return FinalizedAnalysis(record=record, payload=record.model_dump_json().encode())
