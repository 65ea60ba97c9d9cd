"""Append-only mutation journals backing the keyed collections."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

from ..errors import PersistenceError


@runtime_checkable
class Journal(Protocol):
    """Durable log of collection mutation events."""

    def append(self, event: dict[str, Any]) -> None:
        """Persist a single event or raise PersistenceError."""

    def replay(self) -> Iterator[dict[str, Any]]:
        """Yield previously persisted events in write order."""


class MemoryJournal:
    """Journal that keeps events in process memory."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def append(self, event: dict[str, Any]) -> None:
        self.events.append(event)

    def replay(self) -> Iterator[dict[str, Any]]:
        return iter(list(self.events))


class JsonlJournal:
    """Journal writing one JSON object per line."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: dict[str, Any]) -> None:
        line = json.dumps(event, ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line)
                handle.write("\n")
        except OSError as exc:
            raise PersistenceError(f"Cannot write journal {self._path}: {exc}") from exc

    def replay(self) -> Iterator[dict[str, Any]]:
        if not self._path.exists():
            return iter(())
        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise PersistenceError(f"Cannot read journal {self._path}: {exc}") from exc
        events: list[dict[str, Any]] = []
        for idx, line in enumerate(lines, start=1):
            raw = line.strip()
            if not raw:
                continue
            try:
                events.append(json.loads(raw))
            except json.JSONDecodeError as exc:
                raise PersistenceError(
                    f"{self._path} line {idx}: invalid JSON ({exc})"
                ) from exc
        return iter(events)


def open_journal(data_dir: str | Path | None, name: str) -> Journal:
    """Return a file journal under ``data_dir`` or an in-memory one."""
    if not data_dir:
        return MemoryJournal()
    return JsonlJournal(Path(data_dir) / f"{name}.jsonl")
