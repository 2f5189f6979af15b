"""
Reference data: preset heuristics and TCOF success factors.

Provides the async client for the reference data API and the embedded
defaults it falls back to.
"""

from .client import ReferenceDataClient
from .defaults import DEFAULT_PRESET_HEURISTICS, DEFAULT_SUCCESS_FACTORS
from .models import (
    SUCCESS_FACTOR_RATINGS,
    PresetHeuristic,
    RatingInfo,
    ReferenceData,
    ReferenceSource,
    SuccessFactor,
)

__all__ = [
    "DEFAULT_PRESET_HEURISTICS",
    "DEFAULT_SUCCESS_FACTORS",
    "PresetHeuristic",
    "RatingInfo",
    "ReferenceData",
    "ReferenceDataClient",
    "ReferenceSource",
    "SUCCESS_FACTOR_RATINGS",
    "SuccessFactor",
]
