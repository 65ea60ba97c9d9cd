"""Append-only decision history."""

from __future__ import annotations

from typing import Any, Mapping

import structlog
from pydantic import ValidationError as PydanticValidationError

from ..clock import Clock, new_id, utcnow
from ..errors import ValidationError
from ..schemas import DecisionHistoryEntry, DecisionInput
from ..storage import Journal, KeyedCollection


class DecisionHistoryLog:
    """Audit trail of finalized hiring decisions.

    Independent of the live vote tally. There is intentionally no update or
    delete operation, and entries are frozen models.
    """

    def __init__(self, *, journal: Journal | None = None, clock: Clock = utcnow) -> None:
        self._entries: KeyedCollection[DecisionHistoryEntry] = KeyedCollection(
            DecisionHistoryEntry, journal=journal
        )
        self._clock = clock
        self._logger = structlog.get_logger(__name__)

    def append(self, entry: DecisionInput | Mapping[str, Any]) -> DecisionHistoryEntry:
        if isinstance(entry, DecisionInput):
            entry = entry.model_dump()
        try:
            payload = DecisionInput.model_validate(entry)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

        record = DecisionHistoryEntry(
            **payload.model_dump(), id=new_id(), decided_at=self._clock()
        )
        self._entries.put(record)
        self._logger.info(
            "decision.appended",
            decision_id=record.id,
            candidate_id=record.candidate_id,
            outcome=record.outcome,
            decided_by=record.decided_by,
        )
        return record

    def list_by_candidate(self, candidate_id: str) -> list[DecisionHistoryEntry]:
        return self._entries.by_candidate(candidate_id)
