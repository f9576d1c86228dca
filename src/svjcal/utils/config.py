import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML config file and return a nested dict.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Dictionary containing the configuration (empty for an empty file)

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML is malformed
    """
    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.error(f"Config file not found: {path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML config {path}: {e}")
        raise
    if config is not None and not isinstance(config, dict):
        raise ConfigurationError(f"Config {path} must contain a mapping at top level")
    logger.info(f"Loaded config from {path}")
    return config or {}


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config: Base configuration dictionary
        override_config: Configuration to override base with

    Returns:
        Merged configuration dictionary (inputs are left untouched)
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def get_nested_value(config: Dict[str, Any], key: str, default: Any = None) -> Any:
    """
    Get a nested value from a configuration dictionary using dot notation.

    Args:
        config: Configuration dictionary
        key: Key in dot notation (e.g., 'end_criteria.max_iterations')
        default: Default value if key is not found

    Returns:
        Value at the specified key or default
    """
    current = config
    try:
        for part in key.split('.'):
            current = current[part]
        return current
    except (KeyError, TypeError):
        return default
