"""Side-by-side comparison reports across candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Protocol, runtime_checkable

import structlog

from ..schemas import DecisionHistoryEntry, HiringVote, TeamMemberFeedback
from .consensus import ConsensusMetrics

if TYPE_CHECKING:
    from .consensus import ConsensusEngine
    from .decisions import DecisionHistoryLog
    from .feedback import FeedbackStore
    from .votes import VoteStore

PLACEHOLDER_JOB_TITLE = "Position"


@dataclass(slots=True)
class CandidateInfo:
    name: str
    job_title: str = PLACEHOLDER_JOB_TITLE


@runtime_checkable
class CandidateDirectory(Protocol):
    """Resolves display data for a candidate id."""

    def lookup(self, candidate_id: str) -> CandidateInfo | None:
        """Return candidate display data, or None when unknown."""


class StaticCandidateDirectory:
    """Directory backed by an in-memory mapping."""

    def __init__(self, entries: Mapping[str, CandidateInfo | Mapping[str, Any]] | None = None):
        self._entries: dict[str, CandidateInfo] = {}
        for candidate_id, entry in (entries or {}).items():
            if isinstance(entry, CandidateInfo):
                self._entries[candidate_id] = entry
            else:
                self._entries[candidate_id] = CandidateInfo(
                    name=entry["name"],
                    job_title=entry.get("job_title") or PLACEHOLDER_JOB_TITLE,
                )

    def lookup(self, candidate_id: str) -> CandidateInfo | None:
        return self._entries.get(candidate_id)


@dataclass(slots=True)
class CandidateComparison:
    """Ephemeral per-candidate snapshot for ranking and export."""

    candidate_id: str
    candidate_name: str
    job_title: str
    consensus_metrics: ConsensusMetrics
    feedback: list[TeamMemberFeedback]
    votes: list[HiringVote]
    decision_history: list[DecisionHistoryEntry]


class ComparisonReportGenerator:
    """Fans consensus computation out over a list of candidates."""

    def __init__(
        self,
        *,
        engine: ConsensusEngine,
        feedback: FeedbackStore,
        votes: VoteStore,
        decisions: DecisionHistoryLog,
        directory: CandidateDirectory | None = None,
    ) -> None:
        self._engine = engine
        self._feedback = feedback
        self._votes = votes
        self._decisions = decisions
        self._directory = directory
        self._logger = structlog.get_logger(__name__)

    def compare(self, candidate_ids: Iterable[str]) -> list[CandidateComparison]:
        """Build comparisons in input order."""
        return [self._build(candidate_id) for candidate_id in candidate_ids]

    def _build(self, candidate_id: str) -> CandidateComparison:
        info = self._resolve(candidate_id)
        return CandidateComparison(
            candidate_id=candidate_id,
            candidate_name=info.name,
            job_title=info.job_title,
            consensus_metrics=self._engine.compute(candidate_id),
            feedback=self._feedback.list_by_candidate(candidate_id),
            votes=self._votes.list_by_candidate(candidate_id),
            decision_history=self._decisions.list_by_candidate(candidate_id),
        )

    def _resolve(self, candidate_id: str) -> CandidateInfo:
        info: CandidateInfo | None = None
        if self._directory is not None:
            try:
                info = self._directory.lookup(candidate_id)
            except Exception as exc:  # noqa: BLE001
                self._logger.warning(
                    "comparison.directory_failed",
                    candidate_id=candidate_id,
                    error=str(exc),
                )
        if info is None:
            return CandidateInfo(name=f"Candidate {candidate_id}")
        return info
