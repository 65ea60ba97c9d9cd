"""Pydantic schema definitions for consensus records."""

from __future__ import annotations

from .criteria import DEFAULT_CRITERIA, RatingCriterion, RatingCriterionInput
from .decision import DecisionHistoryEntry, DecisionInput
from .feedback import (
    RECOMMENDATIONS,
    CommentInput,
    FeedbackSubmission,
    RatingInput,
    StructuredComment,
    TeamMemberFeedback,
    recommendation_label,
)
from .vote import HiringVote, VoteInput

__all__ = [
    "DEFAULT_CRITERIA",
    "RECOMMENDATIONS",
    "CommentInput",
    "DecisionHistoryEntry",
    "DecisionInput",
    "FeedbackSubmission",
    "HiringVote",
    "RatingCriterion",
    "RatingCriterionInput",
    "RatingInput",
    "StructuredComment",
    "TeamMemberFeedback",
    "VoteInput",
    "recommendation_label",
]
