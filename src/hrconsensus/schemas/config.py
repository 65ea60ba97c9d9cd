"""Pydantic configuration schema for YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .criteria import RatingCriterionInput


class StorageConfig(BaseModel):
    data_dir: str | None = None


class ConsensusConfig(BaseModel):
    top_comments: int = Field(default=5, ge=1)
    comment_key_length: int = Field(default=50, ge=1)


class CandidateEntry(BaseModel):
    name: str
    job_title: str = "Position"


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AppConfig(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    consensus: ConsensusConfig = Field(default_factory=ConsensusConfig)
    criteria: list[RatingCriterionInput] | None = None
    candidates: dict[str, CandidateEntry] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {
            "consensus": self.consensus.model_dump(),
        }
        if self.storage.data_dir:
            settings["storage"] = self.storage.model_dump(exclude_none=True)
        if self.criteria is not None:
            settings["criteria"] = [item.model_dump() for item in self.criteria]
        if self.candidates:
            settings["candidates"] = {
                key: value.model_dump() for key, value in self.candidates.items()
            }
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
