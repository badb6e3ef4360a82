"""
Utility helpers for gatehouse.
"""

from .awaitables import maybe_await
from .config import ENV_PREFIX, get_config_value, load_config_from_env

__all__ = [
    "maybe_await",
    "ENV_PREFIX",
    "get_config_value",
    "load_config_from_env",
]
