"""
Reference data models.

Preset heuristics and TCOF success factors are read-only reference content
served by the reference data API (or embedded defaults) and used to seed
plans.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from tcof.core.plans.models import Stage

# Placeholder the factor catalog uses for "no task in this stage"
EMPTY_TASK_MARKER = "-"


class PresetHeuristic(BaseModel):
    """A suggested heuristic a user may adopt as a personal heuristic."""

    id: str
    text: str
    notes: str = ""


class SuccessFactor(BaseModel):
    """
    A TCOF success factor with its suggested tasks per stage.

    Example:
        >>> factor = SuccessFactor(id="1.1", title="Ask Why",
        ...     tasks={"Identification": ["Consult key stakeholders"], "Definition": ["-"]})
        >>> factor.tasks_for(Stage.DEFINITION)
        []
    """

    id: str
    title: str
    tasks: dict[Stage, list[str]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _fill_stages(self) -> "SuccessFactor":
        for stage in Stage:
            self.tasks.setdefault(stage, [])
        return self

    def tasks_for(self, stage: Stage | str) -> list[str]:
        """Task texts for a stage, without empty placeholders."""
        return [
            text
            for text in self.tasks.get(Stage(stage), [])
            if text.strip() and text.strip() != EMPTY_TASK_MARKER
        ]


class ReferenceSource(str, Enum):
    """Where a piece of reference data came from."""

    REMOTE = "remote"
    EMBEDDED = "embedded"


class ReferenceData(BaseModel):
    """Reference content available at plan creation time."""

    preset_heuristics: list[PresetHeuristic] = Field(default_factory=list)
    success_factors: list[SuccessFactor] = Field(default_factory=list)
    heuristics_source: ReferenceSource = ReferenceSource.EMBEDDED
    factors_source: ReferenceSource = ReferenceSource.EMBEDDED

    def get_factor(self, factor_id: str) -> SuccessFactor | None:
        return next((f for f in self.success_factors if f.id == factor_id), None)


class RatingInfo(BaseModel):
    """Label for a success factor rating value."""

    emoji: str
    description: str


SUCCESS_FACTOR_RATINGS: dict[int, RatingInfo] = {
    1: RatingInfo(emoji="❌", description="Doesn't land - I don't believe this factor is relevant"),
    2: RatingInfo(emoji="🤔", description="Unfamiliar - I don't have enough context to judge"),
    3: RatingInfo(emoji="⚠️", description="Needs attention - This is a blind spot we need to address"),
    4: RatingInfo(emoji="👍", description="Important - This factor matters to our success"),
    5: RatingInfo(emoji="🌟", description="Essential - This is a critical success factor"),
}
