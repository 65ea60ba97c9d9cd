from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CommentType = Literal["strength", "concern", "observation", "question"]
Importance = Literal["low", "medium", "high"]
Recommendation = Literal["strong-hire", "hire", "maybe", "no-hire", "strong-no-hire"]
Confidence = Annotated[int, Field(ge=1, le=5)]

RECOMMENDATIONS: tuple[Recommendation, ...] = (
    "strong-hire",
    "hire",
    "maybe",
    "no-hire",
    "strong-no-hire",
)

_RECOMMENDATION_LABELS: dict[str, str] = {
    "strong-hire": "Strong Hire",
    "hire": "Hire",
    "maybe": "Maybe",
    "no-hire": "No Hire",
    "strong-no-hire": "Strong No Hire",
}


def recommendation_label(recommendation: str) -> str:
    """Return the display label for a recommendation value."""
    return _RECOMMENDATION_LABELS.get(recommendation, recommendation)


class RatingInput(BaseModel):
    """Single criterion rating captured in a feedback form."""

    criterion_id: str = Field(min_length=1)
    value: float | str
    confidence: Confidence
    notes: str | None = None

    model_config = ConfigDict(extra="forbid")


class CommentInput(BaseModel):
    """Structured comment as submitted by a reviewer."""

    type: CommentType
    category: str = ""
    content: str
    importance: Importance = "medium"

    model_config = ConfigDict(extra="forbid")

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be empty")
        return value


class StructuredComment(CommentInput):
    """Comment owned by a feedback record, immutable once created."""

    id: str
    created_at: datetime

    model_config = ConfigDict(extra="forbid", frozen=True)


class FeedbackSubmission(BaseModel):
    """Reviewer feedback before the store assigns ids and timestamps."""

    candidate_id: str = Field(min_length=1)
    application_id: str | None = None
    interview_id: str | None = None
    reviewer_id: str = Field(min_length=1)
    reviewer_name: str = ""
    reviewer_role: str = ""
    ratings: list[RatingInput] = Field(default_factory=list)
    comments: list[CommentInput] = Field(default_factory=list)
    overall_score: float = Field(ge=0, le=100)
    recommendation: Recommendation
    confidence: Confidence

    model_config = ConfigDict(extra="forbid")


class TeamMemberFeedback(FeedbackSubmission):
    """Persisted feedback record."""

    id: str
    comments: list[StructuredComment] = Field(default_factory=list)
    submitted_at: datetime
    updated_at: datetime
