"""Vote store with one live vote per (candidate, voter)."""

from __future__ import annotations

from typing import Any, Mapping

import structlog
from pydantic import ValidationError as PydanticValidationError

from ..clock import Clock, new_id, utcnow
from ..errors import ValidationError
from ..schemas import HiringVote, VoteInput
from ..storage import Journal, KeyedCollection


class VoteStore:
    """Current hire/no-hire/abstain decisions.

    ``cast_vote`` supersedes a previous vote from the same voter for the same
    candidate. The (candidate_id, voter_id) lock is held across lookup,
    timestamping and the swap, so concurrent votes from one voter serialize
    and the last one stamped survives.
    """

    def __init__(self, *, journal: Journal | None = None, clock: Clock = utcnow) -> None:
        self._votes: KeyedCollection[HiringVote] = KeyedCollection(HiringVote, journal=journal)
        self._clock = clock
        self._logger = structlog.get_logger(__name__)

    def cast_vote(self, vote: VoteInput | Mapping[str, Any]) -> HiringVote:
        if isinstance(vote, VoteInput):
            vote = vote.model_dump()
        try:
            payload = VoteInput.model_validate(vote)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

        key = (payload.candidate_id, payload.voter_id)
        with self._votes.locks(key):
            previous = self._find(*key)
            record = HiringVote(**payload.model_dump(), id=new_id(), voted_at=self._clock())
            self._votes.swap(previous.id if previous else None, record)

        self._logger.info(
            "vote.cast",
            vote_id=record.id,
            candidate_id=record.candidate_id,
            voter_id=record.voter_id,
            decision=record.decision,
            superseded=previous.id if previous else None,
        )
        return record

    def list_by_candidate(self, candidate_id: str) -> list[HiringVote]:
        return self._votes.by_candidate(candidate_id)

    def get_vote(self, candidate_id: str, voter_id: str) -> HiringVote | None:
        return self._find(candidate_id, voter_id)

    def _find(self, candidate_id: str, voter_id: str) -> HiringVote | None:
        for vote in self._votes.by_candidate(candidate_id):
            if vote.voter_id == voter_id:
                return vote
        return None
