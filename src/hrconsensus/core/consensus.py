"""Consensus computation over feedback, votes and criteria."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Sequence

import structlog

from ..clock import Clock, utcnow
from ..schemas import HiringVote, RatingCriterion, TeamMemberFeedback

if TYPE_CHECKING:
    from .criteria import CriteriaRegistry
    from .feedback import FeedbackStore
    from .votes import VoteStore

# Leading numeric prefix, e.g. "7", "7.5/10", " -2e1 pts".
_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(slots=True)
class VoteResults:
    """Tally of live votes."""

    hire: int = 0
    no_hire: int = 0
    abstain: int = 0


@dataclass(slots=True)
class ConsensusMetrics:
    """Derived consensus view for one candidate. Never persisted."""

    candidate_id: str
    total_feedbacks: int
    average_score: float
    score_std_dev: float
    agreement_level: float
    criteria_averages: dict[str, float]
    recommendation_distribution: dict[str, int]
    vote_results: VoteResults
    top_strengths: list[str]
    top_concerns: list[str]
    last_updated: datetime


def compute_metrics(
    candidate_id: str,
    *,
    criteria: Sequence[RatingCriterion],
    feedback: Sequence[TeamMemberFeedback],
    votes: Iterable[HiringVote],
    now: datetime,
    top_comments: int = 5,
    comment_key_length: int = 50,
) -> ConsensusMetrics:
    """Pure consensus computation for one candidate's records.

    Without feedback the zero-value metrics are returned; the vote tally is
    zeroed as well, even when votes exist.
    """
    if not feedback:
        return ConsensusMetrics(
            candidate_id=candidate_id,
            total_feedbacks=0,
            average_score=0.0,
            score_std_dev=0.0,
            agreement_level=0.0,
            criteria_averages={},
            recommendation_distribution={},
            vote_results=VoteResults(),
            top_strengths=[],
            top_concerns=[],
            last_updated=now,
        )

    scores = [item.overall_score for item in feedback]
    average = math.fsum(scores) / len(scores)
    variance = math.fsum((score - average) ** 2 for score in scores) / len(scores)
    std_dev = math.sqrt(variance)
    agreement = max(0.0, 1 - std_dev / average) if average > 0 else 0.0

    criteria_averages: dict[str, float] = {}
    ratings = [rating for item in feedback for rating in item.ratings]
    for criterion in criteria:
        values = [
            parse_rating_value(rating.value)
            for rating in ratings
            if rating.criterion_id == criterion.id
        ]
        if values:
            criteria_averages[criterion.id] = math.fsum(values) / len(values)

    distribution: dict[str, int] = {}
    for item in feedback:
        distribution[item.recommendation] = distribution.get(item.recommendation, 0) + 1

    strengths: dict[str, int] = {}
    concerns: dict[str, int] = {}
    for item in feedback:
        for comment in item.comments:
            bucket = {"strength": strengths, "concern": concerns}.get(comment.type)
            if bucket is None:
                continue
            key = comment.content[:comment_key_length]
            bucket[key] = bucket.get(key, 0) + 1

    return ConsensusMetrics(
        candidate_id=candidate_id,
        total_feedbacks=len(feedback),
        average_score=average,
        score_std_dev=std_dev,
        agreement_level=agreement,
        criteria_averages=criteria_averages,
        recommendation_distribution=distribution,
        vote_results=_tally_votes(votes),
        top_strengths=_top_keys(strengths, top_comments),
        top_concerns=_top_keys(concerns, top_comments),
        last_updated=now,
    )


def parse_rating_value(value: float | str) -> float:
    """Numeric value of a rating; unparseable or non-finite values count as 0."""
    if isinstance(value, (int, float)):
        parsed = float(value)
    else:
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return 0.0
        parsed = float(match.group(0))
    return parsed if math.isfinite(parsed) else 0.0


def _tally_votes(votes: Iterable[HiringVote]) -> VoteResults:
    results = VoteResults()
    for vote in votes:
        if vote.decision == "hire":
            results.hire += 1
        elif vote.decision == "no-hire":
            results.no_hire += 1
        elif vote.decision == "abstain":
            results.abstain += 1
    return results


def _top_keys(counts: dict[str, int], limit: int) -> list[str]:
    # sorted() is stable, so equal counts keep first-seen order.
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [key for key, _ in ranked[:limit]]


class ConsensusEngine:
    """Recomputes consensus from the live stores on every call."""

    def __init__(
        self,
        *,
        criteria: CriteriaRegistry,
        feedback: FeedbackStore,
        votes: VoteStore,
        top_comments: int = 5,
        comment_key_length: int = 50,
        clock: Clock = utcnow,
    ) -> None:
        self._criteria = criteria
        self._feedback = feedback
        self._votes = votes
        self._top_comments = top_comments
        self._comment_key_length = comment_key_length
        self._clock = clock
        self._logger = structlog.get_logger(__name__)

    def compute(self, candidate_id: str) -> ConsensusMetrics:
        metrics = compute_metrics(
            candidate_id,
            criteria=self._criteria.list(),
            feedback=self._feedback.list_by_candidate(candidate_id),
            votes=self._votes.list_by_candidate(candidate_id),
            now=self._clock(),
            top_comments=self._top_comments,
            comment_key_length=self._comment_key_length,
        )
        self._logger.debug(
            "consensus.computed",
            candidate_id=candidate_id,
            total_feedbacks=metrics.total_feedbacks,
            average_score=metrics.average_score,
            agreement_level=metrics.agreement_level,
        )
        return metrics
