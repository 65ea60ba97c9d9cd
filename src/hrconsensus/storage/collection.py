"""Keyed, insertion-ordered record collection with atomic mutations."""

from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, TypeVar

import pendulum
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import PersistenceError
from .journal import Journal, MemoryJournal

RecordT = TypeVar("RecordT", bound=BaseModel)


class KeyedLocks:
    """Lock per hashable key, dropped once no caller holds or awaits it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, list[Any]] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def __call__(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


class KeyedCollection(Generic[RecordT]):
    """Records keyed by ``id`` with a secondary ``candidate_id`` index.

    Every mutation is journaled before it touches memory, so a failed write
    leaves the collection unchanged. Enumeration follows insertion order.
    """

    def __init__(
        self,
        model: type[RecordT],
        *,
        journal: Journal | None = None,
        indexed: bool = True,
    ) -> None:
        self._model = model
        self._journal = journal if journal is not None else MemoryJournal()
        self._indexed = indexed
        self._records: dict[str, RecordT] = {}
        self._by_candidate: dict[str, dict[str, None]] = defaultdict(dict)
        self._lock = threading.RLock()
        self._events = 0
        self.locks = KeyedLocks()
        self._restore()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._records

    @property
    def has_history(self) -> bool:
        """True once any event was replayed or written, even if all were removals."""
        with self._lock:
            return self._events > 0

    def get(self, record_id: str) -> RecordT | None:
        with self._lock:
            return self._records.get(record_id)

    def values(self) -> list[RecordT]:
        with self._lock:
            return list(self._records.values())

    def by_candidate(self, candidate_id: str) -> list[RecordT]:
        with self._lock:
            ids = self._by_candidate.get(candidate_id, {})
            return [self._records[record_id] for record_id in ids]

    def find(self, predicate: Callable[[RecordT], bool]) -> list[RecordT]:
        with self._lock:
            return [record for record in self._records.values() if predicate(record)]

    def put(self, record: RecordT) -> RecordT:
        """Insert or replace ``record`` in place."""
        with self._lock:
            self._write({"op": "put", "record": self._dump(record)})
            self._apply_put(record)
        return record

    def replace(self, record: RecordT) -> bool:
        """Replace ``record`` only if its id is still present."""
        with self._lock:
            if getattr(record, "id") not in self._records:
                return False
            self._write({"op": "put", "record": self._dump(record)})
            self._apply_put(record)
        return True

    def swap(self, remove_id: str | None, record: RecordT) -> RecordT:
        """Remove ``remove_id`` and append ``record`` as one event."""
        with self._lock:
            self._write(
                {"op": "swap", "remove": remove_id, "record": self._dump(record)}
            )
            if remove_id is not None:
                self._apply_remove(remove_id)
            self._apply_put(record)
        return record

    def remove(self, record_id: str) -> RecordT | None:
        with self._lock:
            if record_id not in self._records:
                return None
            self._write({"op": "remove", "id": record_id})
            return self._apply_remove(record_id)

    def reset(self, records: Iterable[RecordT]) -> list[RecordT]:
        """Replace the whole collection, keeping the given order."""
        ordered = list(records)
        with self._lock:
            self._write({"op": "reset", "records": [self._dump(r) for r in ordered]})
            self._apply_reset(ordered)
        return ordered

    def _write(self, event: dict[str, Any]) -> None:
        event["at"] = pendulum.now("UTC").to_iso8601_string()
        self._journal.append(event)
        self._events += 1

    @staticmethod
    def _dump(record: BaseModel) -> dict[str, Any]:
        return record.model_dump(mode="json")

    def _apply_put(self, record: RecordT) -> None:
        record_id = getattr(record, "id")
        previous = self._records.get(record_id)
        self._records[record_id] = record
        if self._indexed:
            if previous is not None and previous.candidate_id != record.candidate_id:
                self._by_candidate[previous.candidate_id].pop(record_id, None)
            self._by_candidate[getattr(record, "candidate_id")][record_id] = None

    def _apply_remove(self, record_id: str) -> RecordT | None:
        record = self._records.pop(record_id, None)
        if record is not None and self._indexed:
            bucket = self._by_candidate.get(getattr(record, "candidate_id"))
            if bucket is not None:
                bucket.pop(record_id, None)
        return record

    def _apply_reset(self, records: list[RecordT]) -> None:
        self._records.clear()
        self._by_candidate.clear()
        for record in records:
            self._apply_put(record)

    def _restore(self) -> None:
        for index, event in enumerate(self._journal.replay(), start=1):
            try:
                self._replay_event(event)
            except (PydanticValidationError, KeyError, TypeError) as exc:
                raise PersistenceError(
                    f"{self._model.__name__} journal event {index}: invalid record ({exc})"
                ) from exc
            self._events += 1

    def _replay_event(self, event: dict[str, Any]) -> None:
        op = event.get("op")
        if op == "put":
            self._apply_put(self._model.model_validate(event["record"]))
        elif op == "swap":
            if event.get("remove") is not None:
                self._apply_remove(event["remove"])
            self._apply_put(self._model.model_validate(event["record"]))
        elif op == "remove":
            self._apply_remove(event["id"])
        elif op == "reset":
            self._apply_reset(
                [self._model.model_validate(item) for item in event["records"]]
            )
        else:
            raise PersistenceError(f"Unknown journal operation: {op!r}")
