"""Embedded reference data used when the reference API is unavailable."""

from tcof.core.plans.models import Stage
from tcof.core.reference.models import PresetHeuristic, SuccessFactor

DEFAULT_PRESET_HEURISTICS: list[PresetHeuristic] = [
    PresetHeuristic(id="H1", text="Start slow to go fast"),
    PresetHeuristic(id="H2", text="Test it small before you scale it big"),
]


def _factor(
    factor_id: str,
    title: str,
    identification: list[str],
    definition: list[str],
    delivery: list[str],
    closure: list[str],
) -> SuccessFactor:
    return SuccessFactor(
        id=factor_id,
        title=title,
        tasks={
            Stage.IDENTIFICATION: identification,
            Stage.DEFINITION: definition,
            Stage.DELIVERY: delivery,
            Stage.CLOSURE: closure,
        },
    )


DEFAULT_SUCCESS_FACTORS: list[SuccessFactor] = [
    _factor("1.1", "Ask Why", ["Consult key stakeholders"], ["-"], ["-"], ["-"]),
    _factor(
        "1.2",
        "Set success criteria",
        ["Set success criteria"],
        ["Set up robust reporting & monitoring"],
        ["Monitor benefits realisation"],
        ["Complete benefit handover"],
    ),
    _factor(
        "2.1",
        "Engage stakeholders",
        ["Identify key stakeholders"],
        ["Produce comms plan"],
        ["Maintain stakeholder networks"],
        ["Review stakeholder engagement"],
    ),
    _factor(
        "2.2",
        "Build teams",
        ["Create core team"],
        ["Assemble full development team", "Develop resource strategy"],
        ["Maintain capability"],
        ["Manage team transition"],
    ),
    _factor(
        "3.1",
        "Set priorities",
        ["Outline options"],
        ["Prioritise requirements"],
        ["Re-prioritise requirements"],
        ["Identify future needs"],
    ),
    _factor(
        "3.2",
        "Design feedback",
        ["Assess culture for feedback"],
        ["Design feedback loops"],
        ["Learn from feedback"],
        ["Share knowledge"],
    ),
    _factor(
        "4.1",
        "Identify risks",
        ["Create risk register"],
        ["Develop risk management plan"],
        ["Monitor risk status"],
        ["Close outstanding risks"],
    ),
    _factor(
        "4.2",
        "Plan deployment",
        ["Understand related changes"],
        ["Plan cutover", "Plan testing activities"],
        ["Prepare for cutover", "Execute testing"],
        ["Complete transition to operations"],
    ),
    _factor(
        "5.1",
        "Choose methods",
        ["Choose delivery method"],
        ["Develop project plan"],
        ["Track & report progress"],
        ["Close delivery operation"],
    ),
    _factor(
        "5.2",
        "Create governance",
        ["Create governance structure"],
        ["Develop stage gateways"],
        ["Check at gateways"],
        ["Complete approvals"],
    ),
    _factor(
        "6.1",
        "Make commitments",
        ["Prepare initial business case"],
        ["Refine business case"],
        ["Manage financial resources"],
        ["Complete financial reconciliation"],
    ),
    _factor(
        "6.2",
        "Procure things",
        ["Assess procurement needs"],
        ["Create procurement plan", "Build procurement expertise"],
        ["Procure components", "Manage quality of deliverables"],
        ["Complete vendor handover"],
    ),
]
