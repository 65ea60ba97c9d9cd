"""Core consensus engine components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .comparison import (
    CandidateComparison,
    CandidateDirectory,
    CandidateInfo,
    ComparisonReportGenerator,
    StaticCandidateDirectory,
)
from .consensus import ConsensusEngine, ConsensusMetrics, VoteResults, compute_metrics
from .criteria import CriteriaRegistry
from .decisions import DecisionHistoryLog
from .feedback import FeedbackStore
from .statistics import FeedbackStatistics, summarize_feedback
from .votes import VoteStore

__all__ = [
    "CandidateComparison",
    "CandidateDirectory",
    "CandidateInfo",
    "ComparisonReportGenerator",
    "ConsensusEngine",
    "ConsensusMetrics",
    "CriteriaRegistry",
    "DecisionHistoryLog",
    "FeedbackStatistics",
    "FeedbackStore",
    "StaticCandidateDirectory",
    "VoteResults",
    "VoteStore",
    "compute_metrics",
    "summarize_feedback",
]
