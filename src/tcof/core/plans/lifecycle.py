"""
Task lifecycle operations on plan records.

Every operation loads the plan through the store, applies its change to a
deep copy, and hands the copy back to ``PlanStore.save``. The cached record
is therefore untouched when the plan or a referenced sub-entity is missing,
or when persistence fails.

Results follow one convention throughout: ``True`` or the created id on
success, ``False`` or ``None`` when the plan or sub-id is unknown or the
save failed. Unknown ids are never reported by raising.

Append-style operations (``add_task``, ``add_policy_task``...) do not
de-duplicate; retrying them after an ambiguous failure can create
duplicates. Toggles and upserts are safe to retry.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from tcof.core.plans.models import (
    CustomFramework,
    DeliveryApproach,
    FactorMapping,
    GoodPracticeTask,
    PersonalHeuristic,
    PlanRecord,
    PolicyTask,
    Stage,
    SuccessFactorRating,
    TaskDraft,
    TaskItem,
    TaskOrigin,
    new_id,
)
from tcof.core.plans.store import PlanStore
from tcof.core.plans.zones import Scope, Uncertainty, Zone, calculate_zone
from tcof.core.reference.models import PresetHeuristic, SuccessFactor

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A mutation returns None when a referenced entity is missing
Mutation = Callable[[PlanRecord], T | None]


class TaskLifecycleManager:
    """
    Mutating operations for tasks, mappings, policies and good practice.

    Example:
        >>> manager = TaskLifecycleManager(store)
        >>> task_id = await manager.add_task(
        ...     plan_id,
        ...     {"text": "Identify key stakeholders", "origin": "factor", "sourceId": "2.1"},
        ...     Stage.IDENTIFICATION,
        ... )
        >>> await manager.update_task_status(plan_id, task_id, True, Stage.IDENTIFICATION)
        True
    """

    def __init__(self, store: PlanStore) -> None:
        self.store = store

    async def _apply(self, plan_id: str, mutation: Mutation[T]) -> T | None:
        plan = await self.store.load(plan_id)
        if plan is None:
            logger.debug("Plan %s not found", plan_id)
            return None

        working = plan.model_copy(deep=True)
        result = mutation(working)
        if result is None:
            return None

        if await self.store.save(plan_id, working) is None:
            return None
        return result

    # ------------------------------------------------------------------
    # Personal heuristics and factor mappings
    # ------------------------------------------------------------------

    async def add_personal_heuristic(
        self,
        plan_id: str,
        text: str,
        stage: Stage | str,
        notes: str = "",
        favourite: bool = False,
    ) -> str | None:
        """Append a personal heuristic to a stage and return its id."""
        heuristic = PersonalHeuristic(id=new_id(), text=text, notes=notes, favourite=favourite)

        def mutate(plan: PlanRecord) -> str:
            plan.stage(stage).personal_heuristics.append(heuristic)
            return heuristic.id

        return await self._apply(plan_id, mutate)

    async def update_personal_heuristic(
        self,
        plan_id: str,
        heuristic_id: str,
        stage: Stage | str,
        *,
        text: str | None = None,
        notes: str | None = None,
        favourite: bool | None = None,
    ) -> bool:
        """Update the given fields of a personal heuristic."""

        def mutate(plan: PlanRecord) -> bool | None:
            heuristic = plan.stage(stage).find_heuristic(heuristic_id)
            if heuristic is None:
                return None
            if text is not None:
                heuristic.text = text
            if notes is not None:
                heuristic.notes = notes
            if favourite is not None:
                heuristic.favourite = favourite
            return True

        return await self._apply(plan_id, mutate) is not None

    async def remove_personal_heuristic(
        self,
        plan_id: str,
        heuristic_id: str,
        stage: Stage | str,
    ) -> bool:
        """Remove a personal heuristic and its factor mapping."""

        def mutate(plan: PlanRecord) -> bool | None:
            data = plan.stage(stage)
            remaining = [h for h in data.personal_heuristics if h.id != heuristic_id]
            if len(remaining) == len(data.personal_heuristics):
                return None
            data.personal_heuristics = remaining
            data.mappings = [m for m in data.mappings if m.heuristic_id != heuristic_id]
            return True

        return await self._apply(plan_id, mutate) is not None

    async def add_mapping(
        self,
        plan_id: str,
        heuristic_id: str,
        factor_id: str | None,
        stage: Stage | str,
    ) -> bool:
        """
        Map a heuristic to a success factor (or to none).

        Upserts by heuristic id: a stage never holds two mappings for the
        same heuristic.
        """

        def mutate(plan: PlanRecord) -> bool:
            data = plan.stage(stage)
            for mapping in data.mappings:
                if mapping.heuristic_id == heuristic_id:
                    mapping.factor_id = factor_id
                    return True
            data.mappings.append(FactorMapping(heuristic_id=heuristic_id, factor_id=factor_id))
            return True

        return await self._apply(plan_id, mutate) is not None

    async def remove_mapping(self, plan_id: str, heuristic_id: str, stage: Stage | str) -> bool:
        def mutate(plan: PlanRecord) -> bool | None:
            data = plan.stage(stage)
            remaining = [m for m in data.mappings if m.heuristic_id != heuristic_id]
            if len(remaining) == len(data.mappings):
                return None
            data.mappings = remaining
            return True

        return await self._apply(plan_id, mutate) is not None

    async def rate_success_factor(
        self,
        plan_id: str,
        factor_id: str,
        rating: int,
        notes: str = "",
        favourite: bool = False,
        stage: Stage | str = Stage.IDENTIFICATION,
    ) -> bool:
        """
        Record a 1-5 rating for a success factor.

        Raises:
            ValidationError: If ``rating`` is outside 1..5
        """
        entry = SuccessFactorRating(rating=rating, notes=notes, favourite=favourite)

        def mutate(plan: PlanRecord) -> bool:
            plan.stage(stage).success_factor_ratings[factor_id] = entry
            return True

        return await self._apply(plan_id, mutate) is not None

    async def add_preset_heuristics(
        self,
        plan_id: str,
        presets: Iterable[PresetHeuristic],
        stage: Stage | str = Stage.IDENTIFICATION,
    ) -> list[str] | None:
        """
        Seed a stage with preset heuristics from reference data.

        Presets whose text is already present in the stage are skipped.

        Returns:
            Ids of the heuristics added, or None if the plan is unknown
        """
        presets = list(presets)

        def mutate(plan: PlanRecord) -> list[str]:
            data = plan.stage(stage)
            seen = {h.text for h in data.personal_heuristics}
            added: list[str] = []
            for preset in presets:
                if preset.text in seen:
                    continue
                heuristic = PersonalHeuristic(id=new_id(), text=preset.text, notes=preset.notes)
                data.personal_heuristics.append(heuristic)
                seen.add(preset.text)
                added.append(heuristic.id)
            return added

        return await self._apply(plan_id, mutate)

    # ------------------------------------------------------------------
    # Checklist tasks
    # ------------------------------------------------------------------

    async def add_task(
        self,
        plan_id: str,
        task: TaskDraft | Mapping[str, Any],
        stage: Stage | str,
    ) -> str | None:
        """
        Append a task to a stage under a freshly generated id.

        No de-duplication is performed.

        Args:
            plan_id: Target plan
            task: Task content (``text``, ``origin``, optional ``sourceId``...)
            stage: Stage to add the task to; overrides any stage in ``task``

        Returns:
            The new task id, or None on failure
        """
        draft = task if isinstance(task, TaskDraft) else TaskDraft.model_validate(task)
        payload = {k: v for k, v in draft.model_dump().items() if k not in ("id", "stage")}
        item = TaskItem(id=new_id(), stage=Stage(stage), **payload)

        def mutate(plan: PlanRecord) -> str:
            plan.stage(stage).tasks.append(item)
            return item.id

        return await self._apply(plan_id, mutate)

    async def import_factor_tasks(
        self,
        plan_id: str,
        factor: SuccessFactor,
        stages: Iterable[Stage | str] | None = None,
    ) -> list[str] | None:
        """
        Add a success factor's suggested tasks as factor-origin tasks.

        Placeholder entries are ignored, and a task already present with the
        same text and source in a stage is not added again.

        Returns:
            Ids of the tasks added, or None if the plan is unknown
        """
        target_stages = [Stage(s) for s in stages] if stages is not None else list(Stage)

        def mutate(plan: PlanRecord) -> list[str]:
            added: list[str] = []
            for stage in target_stages:
                data = plan.stage(stage)
                existing = {(t.text, t.source_id) for t in data.tasks}
                for text in factor.tasks_for(stage):
                    if (text, factor.id) in existing:
                        continue
                    item = TaskItem(
                        id=new_id(),
                        text=text,
                        stage=stage,
                        origin=TaskOrigin.FACTOR,
                        source_id=factor.id,
                    )
                    data.tasks.append(item)
                    existing.add((text, factor.id))
                    added.append(item.id)
            return added

        return await self._apply(plan_id, mutate)

    async def update_task_status(
        self,
        plan_id: str,
        task_id: str,
        completed: bool,
        stage: Stage | str,
    ) -> bool:
        """
        Mark a task complete or incomplete.

        The lookup is scoped to ``stage``: a task id from another stage
        is reported as not found.
        """

        def mutate(plan: PlanRecord) -> bool | None:
            task = plan.stage(stage).find_task(task_id)
            if task is None:
                return None
            task.completed = completed
            return True

        return await self._apply(plan_id, mutate) is not None

    async def update_task(
        self,
        plan_id: str,
        task_id: str,
        stage: Stage | str,
        *,
        text: str | None = None,
        notes: str | None = None,
        priority: str | None = None,
        due_date: str | None = None,
        completed: bool | None = None,
    ) -> bool:
        """Update the given editable fields of a task; ``id`` never changes."""
        changes = {
            "text": text,
            "notes": notes,
            "priority": priority,
            "due_date": due_date,
            "completed": completed,
        }

        def mutate(plan: PlanRecord) -> bool | None:
            task = plan.stage(stage).find_task(task_id)
            if task is None:
                return None
            for field, value in changes.items():
                if value is not None:
                    setattr(task, field, value)
            return True

        return await self._apply(plan_id, mutate) is not None

    async def remove_task(self, plan_id: str, task_id: str, stage: Stage | str) -> bool:
        def mutate(plan: PlanRecord) -> bool | None:
            data = plan.stage(stage)
            remaining = [t for t in data.tasks if t.id != task_id]
            if len(remaining) == len(data.tasks):
                return None
            data.tasks = remaining
            return True

        return await self._apply(plan_id, mutate) is not None

    # ------------------------------------------------------------------
    # Organisational policy tasks
    # ------------------------------------------------------------------

    async def add_policy_task(self, plan_id: str, text: str, stage: Stage | str) -> str | None:
        """Append a policy task to a stage and return its id."""
        policy_task = PolicyTask(id=new_id(), text=text, stage=Stage(stage))

        def mutate(plan: PlanRecord) -> str:
            plan.stage(stage).policy_tasks.append(policy_task)
            return policy_task.id

        return await self._apply(plan_id, mutate)

    async def remove_policy_task(self, plan_id: str, task_id: str, stage: Stage | str) -> bool:
        """Remove a policy task; False if nothing was removed."""

        def mutate(plan: PlanRecord) -> bool | None:
            data = plan.stage(stage)
            remaining = [t for t in data.policy_tasks if t.id != task_id]
            if len(remaining) == len(data.policy_tasks):
                return None
            data.policy_tasks = remaining
            return True

        return await self._apply(plan_id, mutate) is not None

    # ------------------------------------------------------------------
    # Zone and good-practice frameworks
    # ------------------------------------------------------------------

    async def set_zone(self, plan_id: str, zone: Zone | str | None) -> bool:
        """
        Set the plan's zone.

        The zone is plan-wide but stored in every stage's good-practice
        block, so every stage is written.
        """
        zone_value = zone.value if isinstance(zone, Zone) else zone

        def mutate(plan: PlanRecord) -> bool:
            for data in plan.stages.values():
                data.good_practice.zone = zone_value
            return True

        return await self._apply(plan_id, mutate) is not None

    async def set_delivery_approach(
        self,
        plan_id: str,
        scope: Scope | str,
        uncertainty: Uncertainty | str,
    ) -> bool:
        """
        Record the delivery approach and its derived zone in every stage.

        Returns:
            False if scope or uncertainty is not recognised, or the plan is unknown
        """
        zone = calculate_zone(scope, uncertainty)
        if zone is None:
            return False
        approach = DeliveryApproach(
            scope=Scope(scope).value,
            uncertainty=Uncertainty(uncertainty).value,
            zone=zone.value,
        )

        def mutate(plan: PlanRecord) -> bool:
            for data in plan.stages.values():
                data.good_practice.delivery_approach = approach.model_copy()
                data.good_practice.zone = zone.value
            return True

        return await self._apply(plan_id, mutate) is not None

    async def toggle_framework(self, plan_id: str, framework_code: str) -> bool:
        """
        Select or deselect a framework in every stage.

        Deselecting also deletes every good-practice task carrying that
        framework code, in all stages.
        """

        def mutate(plan: PlanRecord) -> bool:
            stages = list(plan.stages.values())
            selected = any(framework_code in d.good_practice.frameworks for d in stages)
            for data in stages:
                practice = data.good_practice
                if selected:
                    practice.frameworks = [c for c in practice.frameworks if c != framework_code]
                    practice.tasks = [
                        t for t in practice.tasks if t.framework_code != framework_code
                    ]
                elif framework_code not in practice.frameworks:
                    practice.frameworks.append(framework_code)
            logger.debug(
                "Framework %s %s for plan %s",
                framework_code,
                "deselected" if selected else "selected",
                plan.id,
            )
            return True

        return await self._apply(plan_id, mutate) is not None

    async def toggle_gp_task(
        self,
        plan_id: str,
        text: str,
        framework_code: str,
        stage: Stage | str,
    ) -> bool:
        """
        Add or remove a good-practice task.

        Identity is the ``(text, framework_code, stage)`` triple: a matching
        task is removed, otherwise a new incomplete task is appended.
        """
        stage_value = Stage(stage)

        def mutate(plan: PlanRecord) -> bool:
            practice = plan.stage(stage_value).good_practice
            remaining = [
                t for t in practice.tasks if not t.matches(text, framework_code, stage_value)
            ]
            if len(remaining) != len(practice.tasks):
                practice.tasks = remaining
            else:
                practice.tasks.append(
                    GoodPracticeTask(
                        id=new_id(),
                        text=text,
                        stage=stage_value,
                        framework_code=framework_code,
                        completed=False,
                    )
                )
            return True

        return await self._apply(plan_id, mutate) is not None

    async def update_gp_task_status(
        self,
        plan_id: str,
        task_id: str,
        completed: bool,
        stage: Stage | str,
    ) -> bool:
        def mutate(plan: PlanRecord) -> bool | None:
            practice = plan.stage(stage).good_practice
            task = next((t for t in practice.tasks if t.id == task_id), None)
            if task is None:
                return None
            task.completed = completed
            return True

        return await self._apply(plan_id, mutate) is not None

    # ------------------------------------------------------------------
    # Custom frameworks
    # ------------------------------------------------------------------

    @staticmethod
    def _custom_framework_copies(plan: PlanRecord, framework_id: str) -> list[CustomFramework]:
        """The per-stage copies of a custom framework (empty if unknown)."""
        return [
            framework
            for data in plan.stages.values()
            for framework in data.good_practice.custom_frameworks
            if framework.id == framework_id
        ]

    async def create_custom_framework(self, plan_id: str, name: str) -> str | None:
        """
        Create an empty user-defined framework.

        Like the zone, custom frameworks are plan-wide and replicated into
        every stage's good-practice block.

        Returns:
            The new framework id, or None on failure
        """
        framework_id = new_id()

        def mutate(plan: PlanRecord) -> str:
            for data in plan.stages.values():
                data.good_practice.custom_frameworks.append(
                    CustomFramework(id=framework_id, name=name)
                )
            return framework_id

        return await self._apply(plan_id, mutate)

    async def add_task_to_custom_framework(
        self,
        plan_id: str,
        framework_id: str,
        stage: Stage | str,
        text: str,
    ) -> bool:
        """Append a plain-string task to a custom framework's stage list."""
        stage_value = Stage(stage)

        def mutate(plan: PlanRecord) -> bool | None:
            copies = self._custom_framework_copies(plan, framework_id)
            if not copies:
                return None
            for framework in copies:
                framework.tasks.setdefault(stage_value, []).append(text)
            return True

        return await self._apply(plan_id, mutate) is not None

    async def remove_task_from_custom_framework(
        self,
        plan_id: str,
        framework_id: str,
        stage: Stage | str,
        index: int,
    ) -> bool:
        """
        Remove a custom framework task by position.

        Returns:
            False if the framework is unknown or ``index`` is out of range
        """
        stage_value = Stage(stage)

        def mutate(plan: PlanRecord) -> bool | None:
            copies = self._custom_framework_copies(plan, framework_id)
            if not copies:
                return None
            if index < 0 or index >= len(copies[0].tasks.get(stage_value, [])):
                return None
            for framework in copies:
                tasks = framework.tasks.get(stage_value, [])
                if index < len(tasks):
                    del tasks[index]
            return True

        return await self._apply(plan_id, mutate) is not None

    async def remove_custom_framework(self, plan_id: str, framework_id: str) -> bool:
        """
        Delete a custom framework from every stage.

        Its selection and any good-practice tasks filed under its id are
        removed with it.
        """

        def mutate(plan: PlanRecord) -> bool | None:
            removed = False
            for data in plan.stages.values():
                practice = data.good_practice
                remaining = [f for f in practice.custom_frameworks if f.id != framework_id]
                if len(remaining) != len(practice.custom_frameworks):
                    removed = True
                practice.custom_frameworks = remaining
                practice.frameworks = [c for c in practice.frameworks if c != framework_id]
                practice.tasks = [t for t in practice.tasks if t.framework_code != framework_id]
            return True if removed else None

        return await self._apply(plan_id, mutate) is not None
