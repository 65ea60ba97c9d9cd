from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from hrconsensus.errors import AuthorizationError, NotFoundError, ValidationError
from hrconsensus.core import FeedbackStore


def ticking_clock(start: datetime | None = None):
    base = start or datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    counter = itertools.count()
    return lambda: base + timedelta(seconds=next(counter))


def build_feedback(**kwargs: Any) -> dict[str, Any]:
    defaults: dict[str, Any] = {
        "candidate_id": "c1",
        "reviewer_id": "r1",
        "reviewer_name": "Rita Reviewer",
        "reviewer_role": "Engineer",
        "ratings": [{"criterion_id": "1", "value": 8, "confidence": 4}],
        "comments": [
            {
                "type": "strength",
                "category": "technical",
                "content": "Strong system design",
                "importance": "high",
            }
        ],
        "overall_score": 80,
        "recommendation": "hire",
        "confidence": 4,
    }
    defaults.update(kwargs)
    return defaults


def test_submit_assigns_ids_and_timestamps():
    store = FeedbackStore(clock=ticking_clock())

    record = store.submit(build_feedback())

    assert record.id
    assert record.submitted_at == record.updated_at
    assert record.comments[0].id
    assert record.comments[0].created_at == record.submitted_at
    assert store.list_by_candidate("c1") == [record]


def test_submit_rejects_invalid_fields_and_persists_nothing():
    store = FeedbackStore()
    payload = build_feedback(
        overall_score=120,
        confidence=0,
        recommendation="yes",
        ratings=[{"criterion_id": "1", "value": 8, "confidence": 6}],
        comments=[{"type": "strength", "content": "   ", "importance": "high"}],
    )

    with pytest.raises(ValidationError) as exc:
        store.submit(payload)

    assert {
        "overall_score",
        "confidence",
        "recommendation",
        "ratings.0.confidence",
        "comments.0.content",
    } <= set(exc.value.fields)
    assert store.list_all() == []


def test_submit_rejects_unknown_comment_type_and_importance():
    store = FeedbackStore()
    payload = build_feedback(
        comments=[{"type": "praise", "content": "Nice", "importance": "urgent"}]
    )

    with pytest.raises(ValidationError) as exc:
        store.submit(payload)

    assert "comments.0.type" in exc.value.fields
    assert "comments.0.importance" in exc.value.fields


def test_submit_accepts_ratings_for_unknown_criteria():
    store = FeedbackStore()

    record = store.submit(
        build_feedback(ratings=[{"criterion_id": "deleted-long-ago", "value": "7", "confidence": 3}])
    )

    assert record.ratings[0].criterion_id == "deleted-long-ago"


def test_same_reviewer_may_submit_per_interview():
    store = FeedbackStore()

    store.submit(build_feedback(interview_id="i1"))
    store.submit(build_feedback(interview_id="i2"))

    assert [item.interview_id for item in store.list_by_candidate("c1")] == ["i1", "i2"]


def test_update_replaces_fields_and_refreshes_updated_at():
    store = FeedbackStore(clock=ticking_clock())
    record = store.submit(build_feedback())

    updated = store.update(record.id, {"overall_score": 55, "recommendation": "maybe"})

    assert updated.overall_score == 55
    assert updated.recommendation == "maybe"
    assert updated.submitted_at == record.submitted_at
    assert updated.updated_at > record.updated_at
    assert store.get(record.id) == updated


def test_update_validates_changed_fields():
    store = FeedbackStore()
    record = store.submit(build_feedback())

    with pytest.raises(ValidationError) as exc:
        store.update(record.id, {"overall_score": 150})

    assert exc.value.fields == ["overall_score"]
    assert store.get(record.id).overall_score == 80


def test_update_rejects_protected_fields():
    store = FeedbackStore()
    record = store.submit(build_feedback())

    with pytest.raises(ValidationError) as exc:
        store.update(record.id, {"id": "other", "reviewer_id": "r2"})

    assert exc.value.fields == ["id", "reviewer_id"]


def test_update_stamps_new_comments_and_keeps_existing():
    store = FeedbackStore(clock=ticking_clock())
    record = store.submit(build_feedback())
    existing = record.comments[0]

    updated = store.update(
        record.id,
        {
            "comments": [
                existing.model_dump(),
                {"type": "concern", "content": "Limited testing experience", "importance": "medium"},
            ]
        },
    )

    assert updated.comments[0] == existing
    assert updated.comments[1].id and updated.comments[1].id != existing.id
    assert updated.comments[1].created_at == updated.updated_at


def test_update_and_delete_unknown_id_raise_not_found():
    store = FeedbackStore()

    with pytest.raises(NotFoundError):
        store.update("missing", {"overall_score": 10})
    with pytest.raises(NotFoundError):
        store.delete("missing")


def test_only_author_may_update_or_delete():
    store = FeedbackStore()
    record = store.submit(build_feedback())

    with pytest.raises(AuthorizationError):
        store.update(record.id, {"overall_score": 10}, actor_id="intruder")
    with pytest.raises(AuthorizationError):
        store.delete(record.id, actor_id="intruder")

    assert store.update(record.id, {"overall_score": 10}, actor_id="r1").overall_score == 10


def test_delete_removes_record():
    store = FeedbackStore()
    first = store.submit(build_feedback())
    second = store.submit(build_feedback(reviewer_id="r2"))

    store.delete(first.id)

    assert store.list_by_candidate("c1") == [second]
    assert store.get(first.id) is None
