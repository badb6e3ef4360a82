"""
Configuration utilities for gatehouse.
Reads settings from prefixed environment variables.
"""

import os
from typing import Any, Dict, Optional


ENV_PREFIX = "GATEHOUSE_"


def load_config_from_env(prefix: str = ENV_PREFIX) -> Dict[str, str]:
    """
    Load configuration from environment variables with given prefix.
    Keys are returned without the prefix, lowercased.
    """
    config = {}

    for key, value in os.environ.items():
        if key.startswith(prefix):
            config[key[len(prefix):].lower()] = value

    return config


def get_config_value(key: str, default: Any = None,
                     cast_type: Optional[type] = None,
                     env_prefix: str = ENV_PREFIX) -> Any:
    """
    Get configuration value from environment or return default.
    Optionally cast to specified type; a value that fails to cast yields
    the default.
    """
    env_key = f"{env_prefix}{key.upper()}"
    value = os.environ.get(env_key)

    if value is None:
        return default
    if cast_type is None:
        return value

    try:
        if cast_type == bool:
            return value.strip().lower() in ('true', '1', 'yes', 'on')
        return cast_type(value)
    except (ValueError, TypeError):
        return default
