from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RatingCriterionInput(BaseModel):
    """Administrator-supplied criterion definition (no id yet)."""

    name: str = Field(min_length=1)
    description: str = ""
    scale: str = "1-10"
    weight: float = Field(default=0.0, ge=0.0, le=1.0)
    category: str = "general"

    model_config = ConfigDict(extra="forbid")


class RatingCriterion(RatingCriterionInput):
    """Named, weighted rating dimension.

    Weights are advisory: nothing requires the active set to sum to 1 and no
    computed score combines them.
    """

    id: str = Field(min_length=1)


DEFAULT_CRITERIA: list[dict[str, object]] = [
    {
        "name": "Technical Skills",
        "description": "Proficiency in required technologies",
        "scale": "1-10",
        "weight": 0.25,
        "category": "technical",
    },
    {
        "name": "Problem Solving",
        "description": "Analytical and critical thinking abilities",
        "scale": "1-10",
        "weight": 0.20,
        "category": "technical",
    },
    {
        "name": "Communication",
        "description": "Clarity and effectiveness in communication",
        "scale": "1-10",
        "weight": 0.15,
        "category": "communication",
    },
    {
        "name": "Cultural Fit",
        "description": "Alignment with company values and culture",
        "scale": "1-10",
        "weight": 0.15,
        "category": "cultural",
    },
    {
        "name": "Leadership Potential",
        "description": "Ability to lead and inspire teams",
        "scale": "1-10",
        "weight": 0.15,
        "category": "leadership",
    },
    {
        "name": "Growth Mindset",
        "description": "Willingness to learn and adapt",
        "scale": "1-10",
        "weight": 0.10,
        "category": "cultural",
    },
]
