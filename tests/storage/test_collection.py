from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from hrconsensus.errors import PersistenceError
from hrconsensus.schemas import HiringVote
from hrconsensus.storage import KeyedCollection, KeyedLocks, MemoryJournal

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def build_vote(vote_id: str, candidate_id: str = "c1", voter_id: str = "v1") -> HiringVote:
    return HiringVote(
        id=vote_id,
        candidate_id=candidate_id,
        voter_id=voter_id,
        decision="hire",
        voted_at=NOW,
    )


def test_put_keeps_insertion_order_and_candidate_index():
    collection = KeyedCollection(HiringVote)
    collection.put(build_vote("a"))
    collection.put(build_vote("b", candidate_id="c2"))
    collection.put(build_vote("c"))

    assert [vote.id for vote in collection.values()] == ["a", "b", "c"]
    assert [vote.id for vote in collection.by_candidate("c1")] == ["a", "c"]
    assert collection.by_candidate("unknown") == []
    assert len(collection) == 3 and "b" in collection


def test_put_existing_id_replaces_in_place_and_moves_index():
    collection = KeyedCollection(HiringVote)
    collection.put(build_vote("a"))
    collection.put(build_vote("b"))

    collection.put(build_vote("a", candidate_id="c2"))

    assert [vote.id for vote in collection.values()] == ["a", "b"]
    assert [vote.id for vote in collection.by_candidate("c1")] == ["b"]
    assert [vote.id for vote in collection.by_candidate("c2")] == ["a"]


def test_swap_and_remove():
    collection = KeyedCollection(HiringVote)
    collection.put(build_vote("a"))
    collection.put(build_vote("b", voter_id="v2"))

    collection.swap("a", build_vote("a2"))
    removed = collection.remove("b")

    assert removed.id == "b"
    assert collection.remove("missing") is None
    assert [vote.id for vote in collection.by_candidate("c1")] == ["a2"]


def test_restore_rejects_unknown_operation():
    journal = MemoryJournal()
    journal.append({"op": "truncate"})

    with pytest.raises(PersistenceError):
        KeyedCollection(HiringVote, journal=journal)


def test_keyed_locks_drop_entries_once_released():
    locks = KeyedLocks()

    with locks(("c1", "v1")):
        with locks(("c1", "v2")):
            assert len(locks) == 2
        assert len(locks) == 1

    assert len(locks) == 0


def test_keyed_locks_serialize_same_key():
    locks = KeyedLocks()
    entered = threading.Event()
    order: list[str] = []

    def contender() -> None:
        entered.set()
        with locks("f1"):
            order.append("contender")

    with locks("f1"):
        worker = threading.Thread(target=contender)
        worker.start()
        entered.wait(timeout=5)
        worker.join(timeout=0.2)
        order.append("holder")

    worker.join(timeout=5)
    assert order == ["holder", "contender"]
    assert len(locks) == 0


def test_replace_only_touches_existing_records():
    collection = KeyedCollection(HiringVote)
    collection.put(build_vote("a"))

    assert collection.replace(build_vote("a", voter_id="v9")) is True
    assert collection.replace(build_vote("gone")) is False
    assert [vote.voter_id for vote in collection.values()] == ["v9"]
    assert "gone" not in collection


def test_has_history_survives_removing_every_record():
    journal = MemoryJournal()
    collection = KeyedCollection(HiringVote, journal=journal)
    assert not collection.has_history

    collection.put(build_vote("a"))
    collection.remove("a")

    assert len(collection) == 0
    assert collection.has_history
    assert KeyedCollection(HiringVote, journal=journal).has_history
    assert not KeyedCollection(HiringVote, journal=MemoryJournal()).has_history


def test_restore_wraps_invalid_records():
    journal = MemoryJournal()
    journal.append({"op": "put", "record": build_vote("a").model_dump(mode="json")})
    journal.append({"op": "put", "record": {"id": "x"}})

    with pytest.raises(PersistenceError, match="event 2"):
        KeyedCollection(HiringVote, journal=journal)


def test_restore_wraps_events_missing_fields():
    journal = MemoryJournal()
    journal.append({"op": "remove"})

    with pytest.raises(PersistenceError, match="event 1"):
        KeyedCollection(HiringVote, journal=journal)
