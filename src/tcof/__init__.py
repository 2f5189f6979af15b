"""
TCOF - Plan Record Engine

Data model, task lifecycle, naming codec and checklist aggregation for the
Connected Outcomes Framework planning toolkit.
"""

__version__ = "0.4.0"

# Re-export core models for convenience
from tcof.core.config.models import TcofConfig
from tcof.core.plans.models import PlanRecord, Stage, TaskItem, TaskOrigin

__all__ = ["PlanRecord", "Stage", "TaskItem", "TaskOrigin", "TcofConfig", "__version__"]
