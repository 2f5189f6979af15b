"""
Custom exceptions for the plan record engine.

Ordinary "not found" conditions are reported through ``False``/``None``
return values by the store and lifecycle manager. Exceptions are reserved
for programmer errors and unusable persisted data.

Exception Hierarchy:
    PlanEngineError (base)
    ├── PlanCorruptedError (persisted JSON cannot be parsed)
    └── AdapterNotRegisteredError (unknown persistence adapter name)

Example:
    >>> from tcof.core.plans.exceptions import PlanCorruptedError
    >>> try:
    ...     raise PlanCorruptedError("abc", "tcof_plan_abc", "not valid JSON")
    ... except PlanCorruptedError as e:
    ...     print(e.context["key"])
    tcof_plan_abc
"""


class PlanEngineError(Exception):
    """
    Base exception for all plan engine errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class PlanCorruptedError(PlanEngineError):
    """
    Raised when a persisted plan cannot be decoded into a PlanRecord.

    Carries the plan id and the storage key that held the bad payload.
    """

    def __init__(self, plan_id: str, key: str, reason: str) -> None:
        super().__init__(
            f"Persisted plan '{plan_id}' under '{key}' is malformed: {reason}",
            plan_id=plan_id,
            key=key,
            reason=reason,
        )
        self.plan_id = plan_id
        self.key = key


class AdapterNotRegisteredError(PlanEngineError, ValueError):
    """Raised when a persistence adapter name has no registered implementation."""

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(
            f"Adapter '{name}' not registered. Available adapters: {', '.join(available)}",
            name=name,
            available=available,
        )
        self.name = name
