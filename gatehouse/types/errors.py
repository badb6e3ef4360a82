"""
Error types and error codes for gatehouse.
Construction mistakes and explicit denial enforcement surface through these.
"""

from enum import Enum
from typing import Dict, Any, Optional


class ErrorCode(str, Enum):
    """Error codes used across gatehouse."""
    INVALID_POLICY = "invalid_policy"
    FORBIDDEN = "forbidden"
    CONFIGURATION_ERROR = "configuration_error"
    INTERNAL_ERROR = "internal_error"

    def __str__(self) -> str:
        return self.value


INVALID_POLICY = ErrorCode.INVALID_POLICY
FORBIDDEN = ErrorCode.FORBIDDEN
CONFIGURATION_ERROR = ErrorCode.CONFIGURATION_ERROR
INTERNAL_ERROR = ErrorCode.INTERNAL_ERROR


class GatehouseError(Exception):
    """Base exception for all gatehouse errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class EmptyPolicySetError(GatehouseError):
    """Raised when a combinator is built without any policies."""

    def __init__(
        self,
        combinator: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            f"{combinator} requires at least one policy",
            INVALID_POLICY,
            details
        )
        self.combinator = combinator
        self.details['combinator'] = combinator


class ConfigurationError(GatehouseError):
    """Raised when there's a configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, CONFIGURATION_ERROR, details)
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details['config_key'] = config_key
        if config_value is not None:
            self.details['config_value'] = str(config_value)


class AccessDeniedError(GatehouseError):
    """Raised by callers that turn a denied evaluation into an exception."""

    def __init__(
        self,
        reason: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(reason, FORBIDDEN, details)
        self.reason = reason
