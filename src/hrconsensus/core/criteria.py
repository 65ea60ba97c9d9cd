"""Rating criteria registry."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..clock import new_id
from ..errors import NotFoundError, ValidationError
from ..schemas import DEFAULT_CRITERIA, RatingCriterion, RatingCriterionInput
from ..storage import Journal, KeyedCollection

ModelT = TypeVar("ModelT", bound=BaseModel)


class CriteriaRegistry:
    """Ordered registry of rating criteria.

    Deleting a criterion never touches feedback ratings that reference it;
    the consensus engine ignores those dangling ids.
    """

    def __init__(self, *, journal: Journal | None = None) -> None:
        self._criteria: KeyedCollection[RatingCriterion] = KeyedCollection(
            RatingCriterion, journal=journal, indexed=False
        )
        self._logger = structlog.get_logger(__name__)

    def list(self) -> list[RatingCriterion]:
        return self._criteria.values()

    def get(self, criterion_id: str) -> RatingCriterion | None:
        return self._criteria.get(criterion_id)

    def create(self, criterion: RatingCriterionInput | Mapping[str, Any]) -> RatingCriterion:
        payload = _validate(RatingCriterionInput, criterion)
        record = RatingCriterion(**{**payload.model_dump(), "id": new_id()})
        self._criteria.put(record)
        self._logger.info("criteria.created", criterion_id=record.id, name=record.name)
        return record

    def update(self, criterion_id: str, changes: Mapping[str, Any]) -> RatingCriterion | None:
        """Merge ``changes`` into a criterion; unknown ids are a silent no-op."""
        if "id" in changes and changes["id"] != criterion_id:
            raise ValidationError({"id": "criterion id cannot be changed"})
        with self._criteria.locks(criterion_id):
            current = self._criteria.get(criterion_id)
            if current is None:
                self._logger.info("criteria.update_ignored", criterion_id=criterion_id)
                return None
            merged = _validate(RatingCriterion, {**current.model_dump(), **changes})
            # reorder() does not take per-criterion locks, so the id may be gone by now.
            if not self._criteria.replace(merged):
                self._logger.info("criteria.update_ignored", criterion_id=criterion_id)
                return None
        self._logger.info("criteria.updated", criterion_id=criterion_id, fields=sorted(changes))
        return merged

    def delete(self, criterion_id: str) -> RatingCriterion:
        with self._criteria.locks(criterion_id):
            removed = self._criteria.remove(criterion_id)
        if removed is None:
            raise NotFoundError("criterion", criterion_id)
        self._logger.info("criteria.deleted", criterion_id=criterion_id)
        return removed

    def reorder(self, criteria: Iterable[RatingCriterion | Mapping[str, Any]]) -> list[RatingCriterion]:
        """Atomically replace the registry with ``criteria`` in the given order."""
        ordered = [_validate(RatingCriterion, item) for item in criteria]
        seen: set[str] = set()
        for index, item in enumerate(ordered):
            if item.id in seen:
                raise ValidationError({f"{index}.id": f"duplicate criterion id {item.id!r}"})
            seen.add(item.id)
        self._criteria.reset(ordered)
        self._logger.info("criteria.reordered", order=[item.id for item in ordered])
        return ordered

    def seed(self, criteria: Iterable[RatingCriterionInput | Mapping[str, Any]] | None = None) -> list[RatingCriterion]:
        """Populate a registry that has never been written with ``criteria`` or the defaults.

        A registry emptied by deletes stays empty.
        """
        if self._criteria.has_history:
            return self.list()
        source = DEFAULT_CRITERIA if criteria is None else list(criteria)
        created = [self.create(item) for item in source]
        self._logger.info("criteria.seeded", count=len(created))
        return created


def _validate(model: type[ModelT], payload: Any) -> ModelT:
    if isinstance(payload, model):
        return payload
    if hasattr(payload, "model_dump"):
        payload = payload.model_dump()
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc
