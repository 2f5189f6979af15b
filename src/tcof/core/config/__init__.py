"""
Configuration models and loading.

This module provides Pydantic models for tcof configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .loader import (
    PROJECT_CONFIG_NAME,
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    load_config,
    read_config_layer,
)
from .models import ReferenceConfig, StorageConfig, TcofConfig

__all__ = [
    # Models
    "ReferenceConfig",
    "StorageConfig",
    "TcofConfig",
    # Loader functions
    "PROJECT_CONFIG_NAME",
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "load_config",
    "read_config_layer",
]
