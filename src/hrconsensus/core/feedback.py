"""Feedback store: validated reviewer feedback per candidate."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

import structlog
from pydantic import ValidationError as PydanticValidationError

from ..clock import Clock, new_id, utcnow
from ..errors import AuthorizationError, NotFoundError, ValidationError
from ..schemas import FeedbackSubmission, StructuredComment, TeamMemberFeedback
from ..storage import Journal, KeyedCollection

_PROTECTED_FIELDS = frozenset({"id", "reviewer_id", "submitted_at", "updated_at"})


class FeedbackStore:
    """Holds feedback records; several per (candidate, reviewer) are allowed."""

    def __init__(self, *, journal: Journal | None = None, clock: Clock = utcnow) -> None:
        self._feedback: KeyedCollection[TeamMemberFeedback] = KeyedCollection(
            TeamMemberFeedback, journal=journal
        )
        self._clock = clock
        self._logger = structlog.get_logger(__name__)

    def submit(self, feedback: FeedbackSubmission | Mapping[str, Any]) -> TeamMemberFeedback:
        submission = _parse_submission(feedback)
        now = self._clock()
        payload = submission.model_dump()
        comments = payload.pop("comments")
        record = TeamMemberFeedback(
            **payload,
            id=new_id(),
            comments=[_stamp_comment(comment, now) for comment in comments],
            submitted_at=now,
            updated_at=now,
        )
        self._feedback.put(record)
        self._logger.info(
            "feedback.submitted",
            feedback_id=record.id,
            candidate_id=record.candidate_id,
            reviewer_id=record.reviewer_id,
            overall_score=record.overall_score,
        )
        return record

    def update(
        self,
        feedback_id: str,
        changes: Mapping[str, Any],
        *,
        actor_id: str | None = None,
    ) -> TeamMemberFeedback:
        """Replace the given fields and refresh ``updated_at``.

        New comments (those without an ``id``) are stamped like at submit
        time; comments that already carry an id are kept as they are.
        """
        protected = sorted(_PROTECTED_FIELDS.intersection(changes))
        if protected:
            raise ValidationError({name: "field cannot be changed" for name in protected})

        with self._feedback.locks(feedback_id):
            current = self._require(feedback_id, actor_id)
            now = self._clock()
            merged = current.model_dump()
            merged.update(changes)
            if "comments" in changes:
                merged["comments"] = _merge_comments(changes["comments"], now)
            merged["updated_at"] = now
            try:
                record = TeamMemberFeedback.model_validate(merged)
            except PydanticValidationError as exc:
                raise ValidationError.from_pydantic(exc) from exc
            if not self._feedback.replace(record):
                raise NotFoundError("feedback", feedback_id)

        self._logger.info(
            "feedback.updated",
            feedback_id=feedback_id,
            candidate_id=record.candidate_id,
            fields=sorted(changes),
        )
        return record

    def delete(self, feedback_id: str, *, actor_id: str | None = None) -> TeamMemberFeedback:
        with self._feedback.locks(feedback_id):
            current = self._require(feedback_id, actor_id)
            self._feedback.remove(feedback_id)
        self._logger.info(
            "feedback.deleted", feedback_id=feedback_id, candidate_id=current.candidate_id
        )
        return current

    def get(self, feedback_id: str) -> TeamMemberFeedback | None:
        return self._feedback.get(feedback_id)

    def list_by_candidate(self, candidate_id: str) -> list[TeamMemberFeedback]:
        return self._feedback.by_candidate(candidate_id)

    def list_all(self) -> list[TeamMemberFeedback]:
        return self._feedback.values()

    def _require(self, feedback_id: str, actor_id: str | None) -> TeamMemberFeedback:
        current = self._feedback.get(feedback_id)
        if current is None:
            raise NotFoundError("feedback", feedback_id)
        if actor_id is not None and actor_id != current.reviewer_id:
            raise AuthorizationError(feedback_id, actor_id)
        return current


def _parse_submission(feedback: FeedbackSubmission | Mapping[str, Any]) -> FeedbackSubmission:
    if isinstance(feedback, FeedbackSubmission):
        feedback = feedback.model_dump()
    try:
        return FeedbackSubmission.model_validate(feedback)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def _stamp_comment(comment: Mapping[str, Any], now: datetime) -> StructuredComment:
    return StructuredComment(**comment, id=new_id(), created_at=now)


def _merge_comments(comments: Any, now: datetime) -> Any:
    if not isinstance(comments, list):
        return comments
    merged: list[Any] = []
    for comment in comments:
        if isinstance(comment, StructuredComment):
            merged.append(comment)
        elif hasattr(comment, "model_dump"):
            merged.append({**comment.model_dump(), "id": new_id(), "created_at": now})
        elif isinstance(comment, Mapping) and not comment.get("id"):
            merged.append({**comment, "id": new_id(), "created_at": now})
        else:
            merged.append(comment)
    return merged
