"""
Layered configuration loading.

Each layer is a plain dict, merged in order of increasing precedence:

    built-in defaults
    user file      $XDG_CONFIG_HOME/tcof/config.json
    project file   <project>/.tcof.json
    environment    TCOF_* variables

The merged result is validated once as a TcofConfig and cached for the
process until ``clear_cache`` is called.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import TcofConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".tcof.json"

# Env var -> (section, key) for string-valued overrides
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "TCOF_STORAGE_BACKEND": ("storage", "backend"),
    "TCOF_DATA_DIR": ("storage", "data_dir"),
    "TCOF_KEY_PREFIX": ("storage", "key_prefix"),
    "TCOF_REFERENCE_URL": ("reference", "base_url"),
}
_TIMEOUT_ENV = "TCOF_REFERENCE_TIMEOUT"

_config_cache: TcofConfig | None = None


def get_user_config_path() -> Path:
    """Per-user config file, honouring ``XDG_CONFIG_HOME``."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "tcof" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """Project config file inside ``cwd`` (the current directory by default)."""
    return (cwd or Path.cwd()) / PROJECT_CONFIG_NAME


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` onto ``base`` without mutating either.

    Sections present in both as dicts are merged key by key; any other
    value in ``override`` wins outright.

    Example:
        >>> deep_merge({"storage": {"backend": "json"}}, {"storage": {"key_prefix": "p_"}})
        {'storage': {'backend': 'json', 'key_prefix': 'p_'}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged


def read_config_layer(path: Path) -> dict[str, Any]:
    """
    Read one config file as a layer.

    A missing file is an empty layer. An unreadable file, or one whose top
    level is not a JSON object, is logged and also treated as empty so a
    stray file never prevents the engine from starting.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        logger.warning("Cannot read config file %s: %s", path, e)
        return {}

    try:
        layer = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring malformed config file %s: %s", path, e)
        return {}

    if not isinstance(layer, dict):
        logger.warning("Ignoring config file %s: top level must be an object", path)
        return {}
    return layer


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Return ``config_dict`` with ``TCOF_*`` environment overrides applied.

    Supported variables: TCOF_STORAGE_BACKEND, TCOF_DATA_DIR,
    TCOF_KEY_PREFIX, TCOF_REFERENCE_URL and TCOF_REFERENCE_TIMEOUT. Empty
    values are ignored, as is a timeout that is not a positive number.
    """
    layer: dict[str, dict[str, Any]] = {}
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        if value := os.environ.get(env_name):
            layer.setdefault(section, {})[key] = value

    if raw_timeout := os.environ.get(_TIMEOUT_ENV):
        try:
            timeout = float(raw_timeout)
        except ValueError:
            timeout = 0.0
        if timeout > 0:
            layer.setdefault("reference", {})["timeout"] = timeout
        else:
            logger.warning("Ignoring %s=%r: expected a positive number", _TIMEOUT_ENV, raw_timeout)

    return deep_merge(config_dict, layer)


def get_default_config() -> dict[str, Any]:
    """Built-in defaults, the lowest layer."""
    return {
        "storage": {
            "backend": "json",
            "data_dir": ".tcof/plans",
            "key_prefix": "tcof_plan_",
        },
        "reference": {
            "base_url": None,
            "timeout": 10.0,
        },
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> TcofConfig:
    """
    Load the merged configuration.

    Args:
        project_dir: Directory holding .tcof.json (defaults to cwd)
        use_cache: Return the configuration from a previous call if any

    Returns:
        Validated TcofConfig

    Raises:
        ValidationError: If a merged value is out of range
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()
    for path in (get_user_config_path(), get_project_config_path(project_dir)):
        merged = deep_merge(merged, read_config_layer(path))
    merged = apply_env_overrides(merged)

    _config_cache = TcofConfig(**merged)
    return _config_cache


def clear_cache() -> None:
    """Forget the cached configuration so the next load re-reads every layer."""
    global _config_cache
    _config_cache = None
