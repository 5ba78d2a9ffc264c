"""Pipeline exception taxonomy, error classification, and tool error model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class PipelineError(Exception):
    """Base class for every error raised by the analysis pipeline."""


class InvalidInputError(PipelineError):
    """A required input (video id, tracking id) is missing or malformed."""


class TransportError(PipelineError):
    """Talking to an external service failed."""


class EmptyResponseError(TransportError):
    """The model answered without a usable text candidate."""


class ChunkAnalysisError(TransportError):
    """A single comment chunk could not be analyzed."""

    def __init__(self, chunk_index: int, message: str) -> None:
        super().__init__(f"chunk {chunk_index}: {message}")
        self.chunk_index = chunk_index


class FormatError(PipelineError):
    """Model output is not a valid analysis record."""


class MapPhaseError(PipelineError):
    """One or more chunk analyses failed; the run produced no partials."""

    def __init__(self, failures: list[BaseException], total: int) -> None:
        super().__init__(f"{len(failures)} of {total} chunk(s) failed analysis")
        self.failures = failures
        self.total = total


class ReductionError(PipelineError):
    """The final reduction exhausted its attempts."""


class VideoNotFoundError(PipelineError):
    """The video platform has no video for the requested id."""


class SnapshotNotFoundError(PipelineError):
    """No stored snapshot exists under the requested key."""


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    INVALID_INPUT = "INVALID_INPUT"
    VIDEO_NOT_FOUND = "VIDEO_NOT_FOUND"
    SNAPSHOT_NOT_FOUND = "SNAPSHOT_NOT_FOUND"
    API_PERMISSION_DENIED = "API_PERMISSION_DENIED"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    NETWORK_ERROR = "NETWORK_ERROR"
    CHUNK_ANALYSIS_FAILED = "CHUNK_ANALYSIS_FAILED"
    REDUCTION_FAILED = "REDUCTION_FAILED"
    SCHEMA_VALIDATION_FAILED = "SCHEMA_VALIDATION_FAILED"
    WAREHOUSE_UNAVAILABLE = "WAREHOUSE_UNAVAILABLE"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, InvalidInputError):
        return (ErrorCategory.INVALID_INPUT, "Check the video URL or tracking id")
    if isinstance(error, VideoNotFoundError):
        return (
            ErrorCategory.VIDEO_NOT_FOUND,
            "Video not found — deleted, private, or invalid ID",
        )
    if isinstance(error, SnapshotNotFoundError):
        return (
            ErrorCategory.SNAPSHOT_NOT_FOUND,
            "No stored data for this tracking id — run youtube_fetch first",
        )
    if isinstance(error, MapPhaseError):
        return (
            ErrorCategory.CHUNK_ANALYSIS_FAILED,
            "One or more chunks failed analysis — see server logs for details",
        )
    if isinstance(error, ReductionError):
        return (
            ErrorCategory.REDUCTION_FAILED,
            "Final report could not be generated — retry the analysis step",
        )
    if isinstance(error, FormatError):
        return (
            ErrorCategory.SCHEMA_VALIDATION_FAILED,
            "Model output did not match the analysis record schema",
        )

    s = str(error).lower()
    if "weaviate" in s or "warehouse" in s:
        return (
            ErrorCategory.WAREHOUSE_UNAVAILABLE,
            "Cannot reach the warehouse — check WEAVIATE_URL and network connectivity",
        )
    if "403" in s or "permission" in s:
        return (
            ErrorCategory.API_PERMISSION_DENIED,
            "API key lacks permission — check YOUTUBE_API_KEY / GEMINI_API_KEY scopes",
        )
    if "429" in s or "quota" in s or "resource_exhausted" in s:
        return (
            ErrorCategory.API_QUOTA_EXCEEDED,
            "Rate limit hit — wait and retry",
        )
    if (
        "timeout" in s
        or "timed out" in s
        or isinstance(error, (TransportError, TimeoutError, ConnectionError))
    ):
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request failed in transit — try again or check connectivity",
        )

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    retryable = cat in {
        ErrorCategory.API_QUOTA_EXCEEDED,
        ErrorCategory.NETWORK_ERROR,
        ErrorCategory.CHUNK_ANALYSIS_FAILED,
        ErrorCategory.REDUCTION_FAILED,
        ErrorCategory.WAREHOUSE_UNAVAILABLE,
    }
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.API_QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
