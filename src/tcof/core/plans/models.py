"""
Plan record data models.

Defines the JSON shape of a Plan: the root PlanRecord, one StageData per
Stage, and the task-like entities that live inside a stage. Models are
serialised with camelCase aliases (``personalHeuristics``, ``lastUpdated``,
``sourceId``...) and keep unknown fields, so records written by other
clients survive a load/save cycle untouched.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Allocate a fresh entity identifier."""
    return str(uuid.uuid4())


class Stage(str, Enum):
    """The four fixed, ordered phases of the planning journey."""

    IDENTIFICATION = "Identification"
    DEFINITION = "Definition"
    DELIVERY = "Delivery"
    CLOSURE = "Closure"


class TaskOrigin(str, Enum):
    """Provenance tag of a checklist task."""

    HEURISTIC = "heuristic"
    FACTOR = "factor"
    POLICY = "policy"


class PlanModel(BaseModel):
    """Base model: camelCase aliases, name population, unknown fields kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


def _empty_stage_lists() -> dict[Stage, list[str]]:
    return {stage: [] for stage in Stage}


class PersonalHeuristic(PlanModel):
    """A user-authored rule of thumb recorded against a stage."""

    id: str = Field(default_factory=new_id)
    text: str
    notes: str = ""
    favourite: bool = False


class FactorMapping(PlanModel):
    """Link from a personal heuristic to a TCOF success factor (or to none)."""

    heuristic_id: str
    factor_id: str | None = None


class TaskItem(PlanModel):
    """
    A checklist task drawn from a heuristic, a success factor or a policy.

    ``id`` is assigned at creation and never changes. ``source_id`` points
    back at the originating heuristic or factor. ``text`` holds the raw task
    text; display names are produced by the naming codec at render time.
    """

    id: str = Field(default_factory=new_id)
    text: str
    stage: Stage
    origin: TaskOrigin
    source_id: str | None = None
    completed: bool = False
    notes: str | None = None
    priority: str | None = None
    due_date: str | None = None


class TaskDraft(PlanModel):
    """Caller-supplied task content; the id and stage are assigned on insert."""

    text: str
    origin: TaskOrigin
    source_id: str | None = None
    completed: bool = False
    notes: str | None = None
    priority: str | None = None
    due_date: str | None = None


class PolicyTask(PlanModel):
    """Organisation-policy task scoped to a single stage."""

    id: str = Field(default_factory=new_id)
    text: str
    stage: Stage


class GoodPracticeTask(PlanModel):
    """Task pulled from a built-in or custom good-practice framework."""

    id: str = Field(default_factory=new_id)
    text: str
    stage: Stage
    framework_code: str
    completed: bool = False

    def matches(self, text: str, framework_code: str, stage: Stage) -> bool:
        """Compare against the ``(text, framework_code, stage)`` uniqueness key."""
        return (
            self.text == text
            and self.framework_code == framework_code
            and self.stage == stage
        )


class CustomFramework(PlanModel):
    """User-authored framework whose tasks are plain strings per stage."""

    id: str = Field(default_factory=new_id)
    name: str
    tasks: dict[Stage, list[str]] = Field(default_factory=_empty_stage_lists)

    @model_validator(mode="after")
    def _fill_stages(self) -> "CustomFramework":
        for stage in Stage:
            self.tasks.setdefault(stage, [])
        return self


class SuccessFactorRating(PlanModel):
    """Rating of how well a TCOF success factor lands for this project."""

    rating: int = Field(..., ge=1, le=5)
    notes: str = ""
    favourite: bool = False


class DeliveryApproach(PlanModel):
    """Declared scope and uncertainty together with the zone derived from them."""

    scope: str
    uncertainty: str
    zone: str


class GoodPractice(PlanModel):
    """
    Good-practice block of a stage.

    ``zone``, ``frameworks``, ``custom_frameworks`` and ``delivery_approach``
    are plan-wide values replicated into every stage; ``tasks`` is the
    stage's own selection.
    """

    zone: str | None = None
    frameworks: list[str] = Field(default_factory=list)
    tasks: list[GoodPracticeTask] = Field(default_factory=list)
    custom_frameworks: list[CustomFramework] = Field(default_factory=list)
    delivery_approach: DeliveryApproach | None = None


class StageData(PlanModel):
    """Everything a plan accumulates for one stage."""

    personal_heuristics: list[PersonalHeuristic] = Field(default_factory=list)
    mappings: list[FactorMapping] = Field(default_factory=list)
    tasks: list[TaskItem] = Field(default_factory=list)
    policy_tasks: list[PolicyTask] = Field(default_factory=list)
    good_practice: GoodPractice = Field(default_factory=GoodPractice)
    success_factor_ratings: dict[str, SuccessFactorRating] = Field(default_factory=dict)

    def find_task(self, task_id: str) -> TaskItem | None:
        """Return the task with ``task_id`` or None."""
        return next((task for task in self.tasks if task.id == task_id), None)

    def find_heuristic(self, heuristic_id: str) -> PersonalHeuristic | None:
        """Return the personal heuristic with ``heuristic_id`` or None."""
        return next((h for h in self.personal_heuristics if h.id == heuristic_id), None)


class PlanRecord(PlanModel):
    """
    Root aggregate holding all stage data for one planning session.

    Every record carries exactly one StageData per Stage, in Stage order.
    Stages missing from persisted JSON are filled with empty defaults.

    Example:
        >>> plan = PlanRecord.empty(name="Website relaunch")
        >>> sorted(s.value for s in plan.stages) == sorted(s.value for s in Stage)
        True
        >>> plan.stage(Stage.DELIVERY).tasks
        []
    """

    id: str = Field(default_factory=new_id)
    name: str | None = None
    description: str | None = None
    created: datetime = Field(default_factory=utc_now)
    last_updated: datetime = Field(default_factory=utc_now)
    stages: dict[Stage, StageData] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _fill_stages(self) -> "PlanRecord":
        self.stages = {stage: self.stages.get(stage) or StageData() for stage in Stage}
        return self

    @classmethod
    def empty(
        cls,
        plan_id: str | None = None,
        name: str | None = None,
        description: str | None = None,
    ) -> "PlanRecord":
        """Build a record with four empty stages."""
        now = utc_now()
        return cls(
            id=plan_id or new_id(),
            name=name,
            description=description,
            created=now,
            last_updated=now,
        )

    def stage(self, stage: Stage | str) -> StageData:
        """Return the StageData for ``stage``."""
        return self.stages[Stage(stage)]

    def to_json(self) -> str:
        """Serialise to the persisted JSON shape."""
        return self.model_dump_json(by_alias=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dict in the persisted shape."""
        return self.model_dump(mode="json", by_alias=True)
