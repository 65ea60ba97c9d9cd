"""Aggregate statistics across all submitted feedback."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from ..schemas import RECOMMENDATIONS, TeamMemberFeedback, recommendation_label

SCORE_BUCKETS: tuple[tuple[str, float], ...] = (
    ("0-20", 20),
    ("21-40", 40),
    ("41-60", 60),
    ("61-80", 80),
    ("81-100", 100),
)


@dataclass(slots=True)
class FeedbackStatistics:
    total_feedbacks: int
    unique_reviewers: int
    average_score: float
    average_comments: float
    recommendation_breakdown: dict[str, int]
    score_distribution: dict[str, int]
    role_breakdown: dict[str, int]
    comment_types: dict[str, int]


def summarize_feedback(feedback: Sequence[TeamMemberFeedback]) -> FeedbackStatistics:
    """Summarize feedback for dashboards.

    Scores fall into the first bucket whose upper bound is not below the
    score, so 20.5 is counted under ``21-40``.
    """
    total = len(feedback)
    breakdown = {recommendation_label(value): 0 for value in RECOMMENDATIONS}
    distribution = {label: 0 for label, _ in SCORE_BUCKETS}
    roles: dict[str, int] = {}
    comment_types: dict[str, int] = {}

    for item in feedback:
        label = recommendation_label(item.recommendation)
        breakdown[label] = breakdown.get(label, 0) + 1
        for bucket, upper in SCORE_BUCKETS:
            if item.overall_score <= upper:
                distribution[bucket] += 1
                break
        roles[item.reviewer_role] = roles.get(item.reviewer_role, 0) + 1
        for comment in item.comments:
            comment_types[comment.type] = comment_types.get(comment.type, 0) + 1

    if total:
        average_score = math.fsum(item.overall_score for item in feedback) / total
        average_comments = sum(len(item.comments) for item in feedback) / total
    else:
        average_score = average_comments = 0.0

    return FeedbackStatistics(
        total_feedbacks=total,
        unique_reviewers=len({item.reviewer_id for item in feedback}),
        average_score=average_score,
        average_comments=average_comments,
        recommendation_breakdown=breakdown,
        score_distribution=distribution,
        role_breakdown=roles,
        comment_types=comment_types,
    )
