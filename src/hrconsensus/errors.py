"""Error taxonomy shared by the stores and the CLI."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError


class ConsensusError(Exception):
    """Base exception for the consensus engine."""


class ValidationError(ConsensusError, ValueError):
    """Raised before any mutation when input is malformed."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        self.fields = sorted(self.errors)
        super().__init__(f"Invalid fields: {', '.join(self.fields)}")

    @classmethod
    def from_pydantic(
        cls, exc: PydanticValidationError, *, prefix: str = ""
    ) -> "ValidationError":
        errors: dict[str, str] = {}
        for item in exc.errors():
            loc = ".".join(str(part) for part in item.get("loc", ()))
            if prefix:
                loc = f"{prefix}.{loc}" if loc else prefix
            errors.setdefault(loc or "__root__", item.get("msg", "invalid"))
        return cls(errors)


class NotFoundError(ConsensusError, LookupError):
    """Raised when an update/delete references an unknown record."""

    def __init__(self, kind: str, record_id: Any):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id!r}")


class AuthorizationError(ConsensusError):
    """Raised when someone other than the author edits a feedback record."""

    def __init__(self, record_id: str, actor_id: str):
        self.record_id = record_id
        self.actor_id = actor_id
        super().__init__(f"{actor_id!r} is not the author of feedback {record_id!r}")


class PersistenceError(ConsensusError):
    """Raised when the backing journal cannot be read or written."""


__all__ = [
    "AuthorizationError",
    "ConsensusError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
