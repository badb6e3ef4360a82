"""
Package types provides the error hierarchy shared across gatehouse.
"""

from .errors import (
    ErrorCode,
    GatehouseError,
    EmptyPolicySetError,
    ConfigurationError,
    AccessDeniedError,
)

__all__ = [
    'ErrorCode',
    'GatehouseError',
    'EmptyPolicySetError',
    'ConfigurationError',
    'AccessDeniedError',
]
