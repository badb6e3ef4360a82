"""
Package authz implements the policy capability, boolean combinators,
built-in RBAC/ABAC/ReBAC policies, the policy builder and the permission
checker.
"""

from .types import (
    Effect,
    CombineOp,
    SecurityRuleMetadata,
    PolicyEvalResult,
    Granted,
    Denied,
    Combined,
    EvalTrace,
    AccessEvaluation,
    AccessGranted,
    AccessDenied,
    Policy,
    RelationshipResolver,
)

from .combinators import (
    AndPolicy,
    OrPolicy,
    NotPolicy,
)

from .policies import (
    RbacPolicy,
    AbacPolicy,
    RebacPolicy,
    TimeoutRelationshipResolver,
)

from .builder import PolicyBuilder

from .checker import PermissionChecker

__all__ = [
    # Types
    'Effect',
    'CombineOp',
    'SecurityRuleMetadata',
    'PolicyEvalResult',
    'Granted',
    'Denied',
    'Combined',
    'EvalTrace',
    'AccessEvaluation',
    'AccessGranted',
    'AccessDenied',
    'Policy',
    'RelationshipResolver',

    # Combinators
    'AndPolicy',
    'OrPolicy',
    'NotPolicy',

    # Built-in policies
    'RbacPolicy',
    'AbacPolicy',
    'RebacPolicy',
    'TimeoutRelationshipResolver',

    # Construction and evaluation
    'PolicyBuilder',
    'PermissionChecker',
]
