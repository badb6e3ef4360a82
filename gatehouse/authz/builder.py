"""
Fluent construction of ad-hoc predicate policies.
"""

from typing import Any, Callable, List, Optional, Tuple

from ..util.awaitables import maybe_await
from .types import (
    A, C, R, S, Denied, Effect, Granted, Policy, PolicyEvalResult, SecurityRuleMetadata
)


class _PredicatePolicy(Policy[S, R, A, C]):
    """Policy produced by PolicyBuilder.build()."""

    def __init__(
        self,
        name: str,
        predicates: Tuple[Callable[[S, A, R, C], Any], ...],
        effect: Effect,
        metadata: SecurityRuleMetadata,
    ):
        self._name = name
        self._predicates = predicates
        self._effect = effect
        self._metadata = metadata

    @property
    def effect(self) -> Effect:
        return self._effect

    def policy_name(self) -> str:
        return self._name

    def security_metadata(self) -> SecurityRuleMetadata:
        return self._metadata

    async def _matches(self, subject: S, action: A, resource: R, context: C) -> bool:
        for predicate in self._predicates:
            if not await maybe_await(predicate(subject, action, resource, context)):
                return False
        return True

    async def evaluate_access(self, subject: S, action: A, resource: R, context: C) -> PolicyEvalResult:
        if not await self._matches(subject, action, resource, context):
            return Denied(self._name, "policy predicate did not match")
        if self._effect is Effect.ALLOW:
            return Granted(self._name, "policy allowed access")
        return Denied(self._name, "policy denied access")


class PolicyBuilder:
    """
    Accumulates predicates and builds a policy from them.

    The built policy matches when every predicate that was set returns true;
    with no predicates at all it always matches. On a match the effect
    decides between grant and denial. A non-match is always a denial,
    whatever the effect.

    Example::

        policy = (
            PolicyBuilder("AdminOverride")
            .subjects(lambda user: "admin" in user.roles)
            .actions(lambda action: action != "delete")
            .build()
        )
    """

    def __init__(self, name: str):
        self._name = name
        self._subject_predicate: Optional[Callable[[Any], Any]] = None
        self._action_predicate: Optional[Callable[[Any], Any]] = None
        self._resource_predicate: Optional[Callable[[Any], Any]] = None
        self._context_predicate: Optional[Callable[[Any], Any]] = None
        self._when: Optional[Callable[[Any, Any, Any, Any], Any]] = None
        self._effect = Effect.ALLOW
        self._metadata = SecurityRuleMetadata()

    def subjects(self, predicate: Callable[[Any], Any]) -> 'PolicyBuilder':
        """Require ``predicate(subject)`` to hold."""
        self._subject_predicate = predicate
        return self

    def actions(self, predicate: Callable[[Any], Any]) -> 'PolicyBuilder':
        """Require ``predicate(action)`` to hold."""
        self._action_predicate = predicate
        return self

    def resources(self, predicate: Callable[[Any], Any]) -> 'PolicyBuilder':
        """Require ``predicate(resource)`` to hold."""
        self._resource_predicate = predicate
        return self

    def context(self, predicate: Callable[[Any], Any]) -> 'PolicyBuilder':
        """Require ``predicate(context)`` to hold."""
        self._context_predicate = predicate
        return self

    def when(self, predicate: Callable[[Any, Any, Any, Any], Any]) -> 'PolicyBuilder':
        """Require ``predicate(subject, action, resource, context)`` to hold."""
        self._when = predicate
        return self

    def effect(self, effect: Effect) -> 'PolicyBuilder':
        self._effect = Effect(effect)
        return self

    def security_rule(self, metadata: SecurityRuleMetadata) -> 'PolicyBuilder':
        self._metadata = metadata
        return self

    def build(self) -> Policy:
        predicates: List[Callable[[Any, Any, Any, Any], Any]] = []
        if self._subject_predicate is not None:
            check_subject = self._subject_predicate
            predicates.append(lambda s, a, r, c: check_subject(s))
        if self._action_predicate is not None:
            check_action = self._action_predicate
            predicates.append(lambda s, a, r, c: check_action(a))
        if self._resource_predicate is not None:
            check_resource = self._resource_predicate
            predicates.append(lambda s, a, r, c: check_resource(r))
        if self._context_predicate is not None:
            check_context = self._context_predicate
            predicates.append(lambda s, a, r, c: check_context(c))
        if self._when is not None:
            predicates.append(self._when)

        return _PredicatePolicy(self._name, tuple(predicates), self._effect, self._metadata)
