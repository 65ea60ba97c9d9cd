from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DecisionInput(BaseModel):
    """Finalized decision event before it is stamped."""

    candidate_id: str = Field(min_length=1)
    decided_by: str = Field(min_length=1)
    outcome: str = Field(min_length=1)
    rationale: str = ""

    model_config = ConfigDict(extra="forbid")


class DecisionHistoryEntry(DecisionInput):
    """Audit trail entry. Frozen: entries are never edited after append."""

    id: str
    decided_at: datetime

    model_config = ConfigDict(extra="forbid", frozen=True)
