"""
Plan record engine.

Data models, persistence, task lifecycle operations, the task naming codec,
zone recommendation and checklist grouping.
"""

from .adapters import (
    JsonFileAdapter,
    MemoryAdapter,
    PersistenceAdapter,
    get_adapter,
    list_adapters,
    register_adapter,
)
from .aggregator import GroupedTask, ParentAggregator, ParentGroup, ParentSource, group_stage
from .exceptions import AdapterNotRegisteredError, PlanCorruptedError, PlanEngineError
from .lifecycle import TaskLifecycleManager
from .models import (
    CustomFramework,
    DeliveryApproach,
    FactorMapping,
    GoodPractice,
    GoodPracticeTask,
    PersonalHeuristic,
    PlanRecord,
    PolicyTask,
    Stage,
    StageData,
    SuccessFactorRating,
    TaskDraft,
    TaskItem,
    TaskOrigin,
)
from .store import PlanStore
from .zones import Scope, Uncertainty, Zone, calculate_zone, get_frameworks_for_zone

__all__ = [
    # Models
    "CustomFramework",
    "DeliveryApproach",
    "FactorMapping",
    "GoodPractice",
    "GoodPracticeTask",
    "PersonalHeuristic",
    "PlanRecord",
    "PolicyTask",
    "Stage",
    "StageData",
    "SuccessFactorRating",
    "TaskDraft",
    "TaskItem",
    "TaskOrigin",
    # Persistence
    "JsonFileAdapter",
    "MemoryAdapter",
    "PersistenceAdapter",
    "PlanStore",
    "get_adapter",
    "list_adapters",
    "register_adapter",
    # Operations and views
    "GroupedTask",
    "ParentAggregator",
    "ParentGroup",
    "ParentSource",
    "TaskLifecycleManager",
    "group_stage",
    # Zones
    "Scope",
    "Uncertainty",
    "Zone",
    "calculate_zone",
    "get_frameworks_for_zone",
    # Errors
    "AdapterNotRegisteredError",
    "PlanCorruptedError",
    "PlanEngineError",
]
