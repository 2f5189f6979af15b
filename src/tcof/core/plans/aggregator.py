"""
Parent grouping of checklist tasks.

Builds the read-only checklist view of a stage: every task-like entity is
grouped under the parent it came from (a personal heuristic, the success
factors, organisational policy, or a good-practice framework). Groups are
emitted in order of first encounter; nothing is sorted.

Stored task text may predate the raw-text convention and carry an encoded
display name, so every text is passed through the naming codec's decoder.
"""

import logging
from enum import Enum

from pydantic import BaseModel, Field

from tcof.core.plans import naming
from tcof.core.plans.models import PlanRecord, Stage, TaskOrigin
from tcof.core.plans.store import PlanStore
from tcof.core.plans.zones import get_framework_by_code

logger = logging.getLogger(__name__)

FACTOR_GROUP_ID = "success-factors"
FACTOR_GROUP_LABEL = "Success Factor Tasks"
POLICY_GROUP_ID = "organizational-policy"
POLICY_GROUP_LABEL = "Organizational Policy"
HEURISTIC_FALLBACK_LABEL = "Personal Heuristic"


class ParentSource(str, Enum):
    """Kind of parent a group represents."""

    HEURISTIC = "heuristic"
    FACTOR = "factor"
    POLICY = "policy"
    FRAMEWORK = "framework"


class GroupedTask(BaseModel):
    """A task as shown in the checklist; custom framework strings have no id."""

    id: str | None = None
    text: str
    completed: bool = False
    origin: ParentSource


class ParentGroup(BaseModel):
    """Tasks of one stage that share an originating parent."""

    parent_id: str
    label: str
    source: ParentSource
    tasks: list[GroupedTask] = Field(default_factory=list)


class _Groups:
    """Insertion-ordered group builder."""

    def __init__(self) -> None:
        self._groups: dict[tuple[ParentSource, str], ParentGroup] = {}

    def get(self, source: ParentSource, parent_id: str, label: str) -> ParentGroup:
        key = (source, parent_id)
        group = self._groups.get(key)
        if group is None:
            group = ParentGroup(parent_id=parent_id, label=label, source=source)
            self._groups[key] = group
        return group

    def result(self) -> list[ParentGroup]:
        return list(self._groups.values())


def _framework_label(code: str, plan: PlanRecord, stage: Stage) -> str:
    framework = get_framework_by_code(code)
    if framework is not None:
        return framework.name
    custom = next(
        (f for f in plan.stage(stage).good_practice.custom_frameworks if f.id == code),
        None,
    )
    return custom.name if custom is not None else code


def group_stage(plan: PlanRecord, stage: Stage | str) -> list[ParentGroup]:
    """
    Group one stage's tasks by originating parent.

    Rules:
    - heuristic-origin tasks: one group per ``source_id``, labelled with the
      heuristic's text (or "Personal Heuristic" when it cannot be found)
    - factor-origin tasks: a single "Success Factor Tasks" group
    - policy-origin tasks and policy tasks: a single "Organizational Policy" group
    - good-practice tasks: one group per framework code; a custom
      framework's plain-string tasks join the group keyed by its id

    Args:
        plan: Plan record to read
        stage: Stage to group

    Returns:
        Groups in order of first encounter
    """
    stage = Stage(stage)
    data = plan.stage(stage)
    groups = _Groups()

    for task in data.tasks:
        grouped = GroupedTask(
            id=task.id,
            text=naming.decode(task.text),
            completed=task.completed,
            origin=ParentSource(task.origin.value),
        )
        if task.origin == TaskOrigin.HEURISTIC:
            parent_id = task.source_id or ""
            heuristic = data.find_heuristic(parent_id) if parent_id else None
            label = heuristic.text if heuristic is not None else HEURISTIC_FALLBACK_LABEL
            groups.get(ParentSource.HEURISTIC, parent_id, label).tasks.append(grouped)
        elif task.origin == TaskOrigin.FACTOR:
            groups.get(ParentSource.FACTOR, FACTOR_GROUP_ID, FACTOR_GROUP_LABEL).tasks.append(
                grouped
            )
        else:
            groups.get(ParentSource.POLICY, POLICY_GROUP_ID, POLICY_GROUP_LABEL).tasks.append(
                grouped
            )

    for policy_task in data.policy_tasks:
        groups.get(ParentSource.POLICY, POLICY_GROUP_ID, POLICY_GROUP_LABEL).tasks.append(
            GroupedTask(
                id=policy_task.id,
                text=naming.decode(policy_task.text),
                origin=ParentSource.POLICY,
            )
        )

    practice = data.good_practice
    for gp_task in practice.tasks:
        code = gp_task.framework_code
        group = groups.get(ParentSource.FRAMEWORK, code, _framework_label(code, plan, stage))
        group.tasks.append(
            GroupedTask(
                id=gp_task.id,
                text=naming.decode(gp_task.text),
                completed=gp_task.completed,
                origin=ParentSource.FRAMEWORK,
            )
        )

    for framework in practice.custom_frameworks:
        texts = framework.tasks.get(stage, [])
        if not texts:
            continue
        group = groups.get(ParentSource.FRAMEWORK, framework.id, framework.name)
        group.tasks.extend(
            GroupedTask(text=naming.decode(text), origin=ParentSource.FRAMEWORK)
            for text in texts
        )

    return groups.result()


class ParentAggregator:
    """
    Checklist view builder over a plan store.

    The aggregator only reads; the returned groups are snapshots that
    export consumers may hold on to.
    """

    def __init__(self, store: PlanStore) -> None:
        self.store = store

    async def get_parents_by_stage(
        self,
        plan_id: str,
        stage: Stage | str,
    ) -> list[ParentGroup]:
        """
        Group a stage's tasks by parent.

        Returns:
            Groups for the stage; empty if the plan is unknown
        """
        plan = await self.store.load(plan_id)
        if plan is None:
            logger.debug("Plan %s not found", plan_id)
            return []
        return group_stage(plan, stage)

    async def get_checklist(self, plan_id: str) -> dict[Stage, list[ParentGroup]]:
        """Grouped view of every stage, in stage order (empty if the plan is unknown)."""
        plan = await self.store.load(plan_id)
        if plan is None:
            logger.debug("Plan %s not found", plan_id)
            return {}
        return {stage: group_stage(plan, stage) for stage in Stage}
