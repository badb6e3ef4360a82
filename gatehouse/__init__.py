"""
gatehouse Python Package

Embeddable authorization decision engine with auditable evaluation traces.
"""

__version__ = "0.1.0"

from .authz import (
    AbacPolicy,
    AccessDenied,
    AccessEvaluation,
    AccessGranted,
    AndPolicy,
    CombineOp,
    Combined,
    Denied,
    Effect,
    EvalTrace,
    Granted,
    NotPolicy,
    OrPolicy,
    PermissionChecker,
    Policy,
    PolicyBuilder,
    PolicyEvalResult,
    RbacPolicy,
    RebacPolicy,
    RelationshipResolver,
    SecurityRuleMetadata,
    TimeoutRelationshipResolver,
)
from .core.config import Config
from .types.errors import (
    AccessDeniedError,
    ConfigurationError,
    EmptyPolicySetError,
    GatehouseError,
)

__all__ = [
    "AbacPolicy",
    "AccessDenied",
    "AccessEvaluation",
    "AccessGranted",
    "AndPolicy",
    "CombineOp",
    "Combined",
    "Denied",
    "Effect",
    "EvalTrace",
    "Granted",
    "NotPolicy",
    "OrPolicy",
    "PermissionChecker",
    "Policy",
    "PolicyBuilder",
    "PolicyEvalResult",
    "RbacPolicy",
    "RebacPolicy",
    "RelationshipResolver",
    "SecurityRuleMetadata",
    "TimeoutRelationshipResolver",
    "Config",
    "AccessDeniedError",
    "ConfigurationError",
    "EmptyPolicySetError",
    "GatehouseError",
]
