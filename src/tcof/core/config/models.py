"""
Configuration data models for tcof.

These models define the structure of .tcof.json and
~/.config/tcof/config.json files, with validation via Pydantic.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class StorageConfig(BaseModel):
    """
    Where plan records are persisted.

    ``backend`` names a registered persistence adapter.
    """
    backend: str = Field(
        default="json",
        description="Persistence adapter name: 'json' or 'memory'"
    )
    data_dir: Path = Field(
        default=Path(".tcof/plans"),
        description="Directory holding plan files for the json adapter"
    )
    key_prefix: str = Field(
        default="tcof_plan_",
        min_length=1,
        description="Prefix prepended to plan ids to form storage keys"
    )

    @field_validator("backend")
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        return v.strip().lower()


class ReferenceConfig(BaseModel):
    """
    Reference data endpoint (preset heuristics, TCOF success factors).

    When ``base_url`` is unset the embedded defaults are used without any
    network request.
    """
    base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the reference data API"
    )
    timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Request timeout in seconds"
    )


class TcofConfig(BaseModel):
    """
    Top-level tcof configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = TcofConfig(storage=StorageConfig(backend="memory"))
        >>> config.storage.key_prefix
        'tcof_plan_'
    """
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Plan persistence settings"
    )
    reference: ReferenceConfig = Field(
        default_factory=ReferenceConfig,
        description="Reference data endpoint settings"
    )
