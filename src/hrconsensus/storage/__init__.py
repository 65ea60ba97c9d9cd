"""Keyed record storage and persistence journals."""

from __future__ import annotations

from .collection import KeyedCollection, KeyedLocks
from .journal import Journal, JsonlJournal, MemoryJournal, open_journal

__all__ = [
    "Journal",
    "JsonlJournal",
    "KeyedCollection",
    "KeyedLocks",
    "MemoryJournal",
    "open_journal",
]
