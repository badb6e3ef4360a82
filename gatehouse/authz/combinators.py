"""
Boolean combinators composing policies into new policies.

Children are awaited strictly one at a time in the order given, and
evaluation stops as soon as the outcome is known. Skipped policies are never
invoked and leave no trace entry.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from ..types.errors import EmptyPolicySetError
from .types import (
    A, C, R, S, CombineOp, Combined, Policy, PolicyEvalResult, SecurityRuleMetadata
)


logger = logging.getLogger(__name__)


class _PolicySet(Policy[S, R, A, C]):
    """Shared plumbing for the n-ary combinators."""

    default_name = "PolicySet"

    def __init__(
        self,
        policies: Iterable[Policy[S, R, A, C]],
        name: Optional[str] = None,
        metadata: Optional[SecurityRuleMetadata] = None,
    ):
        self._policies: Tuple[Policy[S, R, A, C], ...] = tuple(policies)
        if not self._policies:
            raise EmptyPolicySetError(name or self.default_name)
        self._name = name or self.default_name
        self._metadata = metadata or SecurityRuleMetadata()

    @property
    def policies(self) -> Tuple[Policy[S, R, A, C], ...]:
        return self._policies

    def policy_name(self) -> str:
        return self._name

    def security_metadata(self) -> SecurityRuleMetadata:
        return self._metadata

    def __len__(self) -> int:
        return len(self._policies)


class AndPolicy(_PolicySet[S, R, A, C]):
    """Grants only if every child grants; stops at the first denial."""

    default_name = "AndPolicy"

    async def evaluate_access(self, subject: S, action: A, resource: R, context: C) -> PolicyEvalResult:
        results: List[PolicyEvalResult] = []
        for policy in self._policies:
            result = await policy.evaluate_access(subject, action, resource, context)
            results.append(result)
            if not result.outcome:
                logger.debug(
                    f"{self._name}: short-circuit after {len(results)}/{len(self._policies)} "
                    f"on denial from {result.policy_name}"
                )
                break
        return Combined(self._name, CombineOp.AND, tuple(results))


class OrPolicy(_PolicySet[S, R, A, C]):
    """Grants if any child grants; stops at the first grant."""

    default_name = "OrPolicy"

    async def evaluate_access(self, subject: S, action: A, resource: R, context: C) -> PolicyEvalResult:
        results: List[PolicyEvalResult] = []
        for policy in self._policies:
            result = await policy.evaluate_access(subject, action, resource, context)
            results.append(result)
            if result.outcome:
                logger.debug(
                    f"{self._name}: short-circuit after {len(results)}/{len(self._policies)} "
                    f"on grant from {result.policy_name}"
                )
                break
        return Combined(self._name, CombineOp.OR, tuple(results))


class NotPolicy(Policy[S, R, A, C]):
    """Inverts the outcome of its single child, which is always evaluated."""

    def __init__(
        self,
        policy: Policy[S, R, A, C],
        name: Optional[str] = None,
        metadata: Optional[SecurityRuleMetadata] = None,
    ):
        self._policy = policy
        self._name = name or "NotPolicy"
        self._metadata = metadata or SecurityRuleMetadata()

    @property
    def policy(self) -> Policy[S, R, A, C]:
        return self._policy

    def policy_name(self) -> str:
        return self._name

    def security_metadata(self) -> SecurityRuleMetadata:
        return self._metadata

    async def evaluate_access(self, subject: S, action: A, resource: R, context: C) -> PolicyEvalResult:
        inner = await self._policy.evaluate_access(subject, action, resource, context)
        return Combined(self._name, CombineOp.NOT, (inner,))
