"""Final analysis record — the fixed output contract of the reduction step.

Every model forbids unknown fields, so a model reply that invents or
renames a key fails validation instead of drifting the warehouse schema.
The eight analytic sections are required; ``tracking_id`` and ``run_date``
are owned by the orchestrator and always overwritten after validation.
A JSON ``null`` counts as an omitted field.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # null falls back to the field default; required fields stay required
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class VideoStatistics(_Strict):
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0


class EngagementRatios(_Strict):
    like_to_view_ratio: float = 0.0
    comment_to_view_ratio: float = 0.0


class PerformanceMetrics(_Strict):
    video_statistics: VideoStatistics = Field(default_factory=VideoStatistics)
    engagement_ratios: EngagementRatios = Field(default_factory=EngagementRatios)
    interpretation: str = ""


class AudienceAnalysis(_Strict):
    sentiment_label: str = ""
    summary: str = ""
    positive_comments: int = 0
    negative_comments: int = 0
    neutral_comments: int = 0
    audience_persona: str = ""


class FeedbackPoint(_Strict):
    point: str = ""
    representative_comment: str = ""


class QuestionPoint(_Strict):
    question: str = ""
    representative_comment: str = ""


class ContentFeedback(_Strict):
    positive_feedback: list[FeedbackPoint] = Field(default_factory=list)
    constructive_criticism: list[FeedbackPoint] = Field(default_factory=list)
    unanswered_questions: list[QuestionPoint] = Field(default_factory=list)


class KeyTheme(_Strict):
    theme_title: str = ""
    summary: str = ""
    representative_comment: str = ""


class EngagementHighlight(_Strict):
    comment_text: str = ""
    engagement_count: int = 0
    reason_for_engagement: str = ""


class SWOTAnalysis(_Strict):
    strengths: str = ""
    weaknesses: str = ""
    opportunities: str = ""
    threats: str = ""


class ContentStrategyIdea(_Strict):
    idea: str = ""
    reason: str = ""


class VideoImprovement(_Strict):
    suggestion: str = ""
    reason: str = ""


class MonetizationOpportunity(_Strict):
    category: str = ""
    products: list[str] = Field(default_factory=list)


class ActionableRecommendations(_Strict):
    content_strategy: list[ContentStrategyIdea] = Field(default_factory=list)
    video_improvements: list[VideoImprovement] = Field(default_factory=list)
    community_management: str = ""
    monetization_opportunities: list[MonetizationOpportunity] = Field(default_factory=list)


class AnalysisRecord(_Strict):
    """Marketing and sentiment report for one video, one row in ``analyzed``."""

    tracking_id: str = ""
    run_date: str = ""
    executive_summary: str
    performance_metrics: PerformanceMetrics
    audience_analysis: AudienceAnalysis
    content_feedback: ContentFeedback
    key_themes: list[KeyTheme]
    engagement_highlights: list[EngagementHighlight]
    swot_analysis: SWOTAnalysis
    actionable_recommendations: ActionableRecommendations
