"""
Delivery zone recommendation and the built-in good-practice catalog.

A project's declared scope and uncertainty place it in one of five zones
(A..E). Each zone recommends a set of good-practice frameworks. The zone
table is fixed and not symmetric, so it is kept as an explicit lookup.

Example:
    >>> calculate_zone("Small", "Low")
    <Zone.A: 'Zone A'>
    >>> get_frameworks_for_zone(Zone.D)
    ['SAFe']
    >>> calculate_zone("Small", None) is None
    True
"""

from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, Field

from tcof.core.plans.models import Stage


class Scope(str, Enum):
    """Declared project scope."""

    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"


class Uncertainty(str, Enum):
    """Declared project uncertainty."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Zone(str, Enum):
    """Recommendation bucket derived from scope and uncertainty."""

    A = "Zone A"
    B = "Zone B"
    C = "Zone C"
    D = "Zone D"
    E = "Zone E"


ZONE_MATRIX: dict[Scope, dict[Uncertainty, Zone]] = {
    Scope.SMALL: {
        Uncertainty.LOW: Zone.A,
        Uncertainty.MEDIUM: Zone.B,
        Uncertainty.HIGH: Zone.C,
    },
    Scope.MEDIUM: {
        Uncertainty.LOW: Zone.B,
        Uncertainty.MEDIUM: Zone.C,
        Uncertainty.HIGH: Zone.D,
    },
    Scope.LARGE: {
        Uncertainty.LOW: Zone.C,
        Uncertainty.MEDIUM: Zone.D,
        Uncertainty.HIGH: Zone.E,
    },
}

ZONE_FRAMEWORKS: dict[Zone, list[str]] = {
    Zone.A: ["PRAXIS", "AGILEPM"],
    Zone.B: ["PRAXIS", "TEAL_BOOK", "AGILEPM"],
    Zone.C: ["SAFe", "AGILEPM"],
    Zone.D: ["SAFe"],
    Zone.E: ["TEAL_BOOK"],
}

ZONE_DESCRIPTIONS: dict[Zone, str] = {
    Zone.A: (
        "Simple projects with clear objectives and minimal complexity. "
        "Traditional waterfall or lightweight adaptive approaches work well."
    ),
    Zone.B: (
        "Hybrid/Adaptive zone where structured processes meet flexibility. "
        "Blend traditional planning with iterative delivery."
    ),
    Zone.C: (
        "Agile zone suitable for projects with evolving requirements but "
        "manageable complexity. Focus on incremental delivery."
    ),
    Zone.D: (
        "Complex Agile scenarios requiring scaled frameworks and cross-team "
        "coordination. Suited for large initiatives with high uncertainty."
    ),
    Zone.E: (
        "Systems-Led projects needing rigorous control and governance. "
        "Appropriate for large, high-impact initiatives requiring formal oversight."
    ),
}


class Framework(BaseModel):
    """A built-in good-practice framework with its per-stage task list."""

    code: str
    name: str
    description: str = ""
    tasks: dict[Stage, list[str]] = Field(default_factory=dict)

    def tasks_for(self, stage: Stage | str) -> list[str]:
        return list(self.tasks.get(Stage(stage), []))


FRAMEWORKS: list[Framework] = [
    Framework(
        code="PRAXIS",
        name="Praxis Framework",
        description=(
            "A comprehensive framework that integrates project, programme and "
            "portfolio management with a flexible lifecycle approach."
        ),
        tasks={
            Stage.IDENTIFICATION: ["Produce a Brief", "Create a Definition Plan"],
            Stage.DEFINITION: ["Define Scope", "Project/Programme Mgt Plan", "Business Case"],
            Stage.DELIVERY: [
                "Delegate delivery",
                "Communicate with stakeholders",
                "Monitor progress",
            ],
            Stage.CLOSURE: [
                "Handover to Operations",
                "Demobilise project",
                "Capture lessons learned",
            ],
        },
    ),
    Framework(
        code="TEAL_BOOK",
        name="UK Government Teal Book",
        description=(
            "UK Government guidance for appraising and evaluating policies, "
            "projects and programmes with robust governance."
        ),
        tasks={
            Stage.IDENTIFICATION: [
                "Appoint SRO",
                "Validate the project brief",
                "Prepare Strategic Outline Case",
            ],
            Stage.DEFINITION: ["Detail delivery & procurement approach", "Develop OBC / FBC"],
            Stage.DELIVERY: [
                "Ensure outputs align with outcomes",
                "Ongoing risk management",
                "Change control",
            ],
            Stage.CLOSURE: [],
        },
    ),
    Framework(
        code="SAFe",
        name="SAFe Implementation Roadmap",
        description=(
            "Scaled Agile Framework for enterprise-level agile transformation "
            "and delivery of large-scale solutions."
        ),
        tasks={
            Stage.IDENTIFICATION: [
                "Lean Business Case",
                "Reaching the Tipping Point",
                "Train Change Agents",
            ],
            Stage.DEFINITION: [
                "Train Leaders",
                "Identify Value Streams",
                "Create Implementation Plan",
            ],
            Stage.DELIVERY: [
                "Prepare for ART Launch",
                "Continuous Delivery Pipeline",
                "Coach ART Execution",
            ],
            Stage.CLOSURE: [
                "Transition to CD Pipeline",
                "Extend to Portfolio",
                "Sustain & Improve",
            ],
        },
    ),
    Framework(
        code="AGILEPM",
        name="AgilePM",
        description=(
            "A practical and scalable methodology for agile project management "
            "that balances structure and flexibility."
        ),
        tasks={
            Stage.IDENTIFICATION: ["Appoint Sponsor & PM", "Conduct Feasibility Assessment"],
            Stage.DEFINITION: [
                "Run Foundations Phase",
                "Prioritised Requirements List",
                "Solution Architecture",
            ],
            Stage.DELIVERY: [
                "Plan & run Timeboxes",
                "Engage stakeholders",
                "Demonstrate increments",
            ],
            Stage.CLOSURE: [
                "Deploy final increment",
                "Post-Project Review",
                "Benefits measurement",
            ],
        },
    ),
]

_FRAMEWORKS_BY_CODE = {framework.code: framework for framework in FRAMEWORKS}

E = TypeVar("E", bound=Enum)


def _coerce(enum_cls: type[E], value: object) -> E | None:
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def calculate_zone(
    scope: Scope | str | None,
    uncertainty: Uncertainty | str | None,
) -> Zone | None:
    """
    Look up the zone for a scope/uncertainty pair.

    Args:
        scope: "Small", "Medium" or "Large"
        uncertainty: "Low", "Medium" or "High"

    Returns:
        The zone, or None when either input is missing or unrecognised
    """
    scope_value = _coerce(Scope, scope)
    uncertainty_value = _coerce(Uncertainty, uncertainty)
    if scope_value is None or uncertainty_value is None:
        return None
    return ZONE_MATRIX[scope_value][uncertainty_value]


def get_frameworks_for_zone(zone: Zone | str | None) -> list[str]:
    """Recommended framework codes for a zone (empty for unknown zones)."""
    zone_value = _coerce(Zone, zone)
    if zone_value is None:
        return []
    return list(ZONE_FRAMEWORKS[zone_value])


def get_zone_description(zone: Zone | str | None) -> str:
    """Human-readable zone description (empty for unknown zones)."""
    zone_value = _coerce(Zone, zone)
    if zone_value is None:
        return ""
    return ZONE_DESCRIPTIONS[zone_value]


def get_all_frameworks() -> list[Framework]:
    """All built-in good-practice frameworks, in catalog order."""
    return list(FRAMEWORKS)


def get_framework_by_code(code: str) -> Framework | None:
    """Return the built-in framework with ``code``, or None."""
    return _FRAMEWORKS_BY_CODE.get(code)


def get_framework_description(code: str) -> str:
    """Description of a built-in framework (empty for unknown codes)."""
    framework = get_framework_by_code(code)
    return framework.description if framework else ""
