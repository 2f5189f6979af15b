"""
Task naming codec.

Builds human-readable display names that embed a task's family code, stage
and sequence number, and recovers the raw task text from such names.

Formats:
    Heuristic:  ``UH{seq:02d} - {stage} - Task {seq+1}: {text}``
    Factor:     ``SF{seq:02d} - {stage} - Task {seq+1}: {text}``
    Framework:  ``{code}{seq:02d} - {stage} - Task {seq+1}: {text}``
    Policy:     ``Policy: {text} - {stage} - Task {seq+1}``

The policy format places the text before the stage marker. Previously
stored names use that layout, so it is kept as is.

Example:
    >>> name = encode_heuristic_task("Confirm budget", 0, Stage.DEFINITION)
    >>> name
    'UH00 - Definition - Task 1: Confirm budget'
    >>> decode(name)
    'Confirm budget'
    >>> decode("Just some text")
    'Just some text'
"""

import re
from dataclasses import dataclass

from tcof.core.plans.models import Stage, TaskOrigin

HEURISTIC_CODE = "UH"
FACTOR_CODE = "SF"
POLICY_LABEL = "Policy"

_STAGE_ALTERNATION = "|".join(re.escape(stage.value) for stage in Stage)

# Leftmost match on the wrapper, so text containing " - " is kept whole.
STANDARD_PATTERN = re.compile(
    rf"(?P<prefix>\S+?) - (?P<stage>{_STAGE_ALTERNATION}) - Task (?P<number>\d+): (?P<text>.+)",
    re.DOTALL,
)
POLICY_PATTERN = re.compile(
    rf"{POLICY_LABEL}: (?P<text>.+) - (?P<stage>{_STAGE_ALTERNATION}) - Task (?P<number>\d+)",
    re.DOTALL,
)


@dataclass(frozen=True)
class TaskName:
    """Metadata recovered from an encoded display name."""

    code: str
    stage: Stage
    number: int
    text: str
    sequence: int | None = None

    @property
    def is_policy(self) -> bool:
        return self.code == POLICY_LABEL


def framework_code(name: str) -> str:
    """
    Derive a framework code from its name.

    Takes the first three letters or digits of the name, upper-cased.

    Args:
        name: Framework name (e.g. "SAFe Implementation Roadmap")

    Returns:
        Upper-case code (e.g. "SAF"), empty if the name has no letters or digits
    """
    return "".join(ch for ch in name if ch.isalnum())[:3].upper()


def _encode_standard(code: str, text: str, index: int, stage: Stage | str) -> str:
    stage_value = Stage(stage).value
    return f"{code}{index:02d} - {stage_value} - Task {index + 1}: {text}"


def encode_heuristic_task(text: str, index: int, stage: Stage | str) -> str:
    """Display name for a personal-heuristic task."""
    return _encode_standard(HEURISTIC_CODE, text, index, stage)


def encode_factor_task(text: str, index: int, stage: Stage | str) -> str:
    """Display name for a success-factor task."""
    return _encode_standard(FACTOR_CODE, text, index, stage)


def encode_framework_task(text: str, code: str, index: int, stage: Stage | str) -> str:
    """Display name for a good-practice framework task, given the framework code."""
    return _encode_standard(code, text, index, stage)


def encode_policy_task(text: str, index: int, stage: Stage | str) -> str:
    """Display name for an organisational-policy task."""
    stage_value = Stage(stage).value
    return f"{POLICY_LABEL}: {text} - {stage_value} - Task {index + 1}"


def encode(
    origin: TaskOrigin | str,
    text: str,
    index: int,
    stage: Stage | str,
    framework_name: str | None = None,
) -> str:
    """
    Encode a task display name for any family.

    Args:
        origin: Task origin; anything other than heuristic/factor/policy is
            treated as a framework task and requires ``framework_name``
        text: Raw task text
        index: Zero-based sequence index
        stage: Stage the task belongs to
        framework_name: Framework name used to derive the code

    Returns:
        Encoded display name

    Raises:
        ValueError: If a framework task is requested without a framework name
    """
    if origin == TaskOrigin.HEURISTIC:
        return encode_heuristic_task(text, index, stage)
    if origin == TaskOrigin.FACTOR:
        return encode_factor_task(text, index, stage)
    if origin == TaskOrigin.POLICY:
        return encode_policy_task(text, index, stage)
    if not framework_name:
        raise ValueError(f"framework_name is required for origin '{origin}'")
    return encode_framework_task(text, framework_code(framework_name), index, stage)


def parse(display_name: str) -> TaskName | None:
    """
    Parse an encoded display name.

    The standard layout is tried first, then the policy layout.

    Returns:
        TaskName, or None if the string is not an encoded name
    """
    match = STANDARD_PATTERN.fullmatch(display_name)
    if match:
        prefix = match.group("prefix")
        number = int(match.group("number"))
        # The prefix ends with the zero-padded index, which is number - 1
        suffix = f"{number - 1:02d}"
        code, sequence = prefix, None
        if number > 0 and len(prefix) > len(suffix) and prefix.endswith(suffix):
            code, sequence = prefix[: -len(suffix)], number - 1
        return TaskName(
            code=code,
            stage=Stage(match.group("stage")),
            number=number,
            text=match.group("text"),
            sequence=sequence,
        )

    match = POLICY_PATTERN.fullmatch(display_name)
    if match:
        return TaskName(
            code=POLICY_LABEL,
            stage=Stage(match.group("stage")),
            number=int(match.group("number")),
            text=match.group("text"),
        )

    return None


def decode(display_name: str) -> str:
    """Return the raw task text, or the input unchanged if it is not encoded."""
    parsed = parse(display_name)
    return parsed.text if parsed else display_name


def is_encoded(display_name: str) -> bool:
    """True iff the string fully matches the standard or the policy layout."""
    return parse(display_name) is not None


def extract_stage(display_name: str) -> Stage | None:
    """Return the stage embedded in an encoded name, if any."""
    parsed = parse(display_name)
    return parsed.stage if parsed else None


def extract_code(display_name: str) -> str | None:
    """Return the family code (``UH``, ``SF``, framework code, ``Policy``), if any."""
    parsed = parse(display_name)
    return parsed.code if parsed else None
