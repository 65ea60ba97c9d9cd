from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

VoteDecision = Literal["hire", "no-hire", "abstain"]


class VoteInput(BaseModel):
    """Vote payload as cast by a team member."""

    candidate_id: str = Field(min_length=1)
    voter_id: str = Field(min_length=1)
    voter_name: str = ""
    voter_avatar: str | None = None
    decision: VoteDecision
    reasoning: str = ""

    model_config = ConfigDict(extra="forbid")


class HiringVote(VoteInput):
    """Live vote; at most one per (candidate_id, voter_id)."""

    id: str
    voted_at: datetime
