"""
Built-in policies: role-based, attribute-based and relationship-based.

Each is parameterized by host-supplied functions; the policies themselves
perform no I/O beyond calling them.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Any, Callable, Iterable, Optional, Union

from ..util.awaitables import maybe_await
from .types import (
    A, C, R, S, Denied, Granted, Policy, PolicyEvalResult, RelationshipResolver,
    SecurityRuleMetadata
)


logger = logging.getLogger(__name__)


class RbacPolicy(Policy[S, R, A, C]):
    """
    Role-based policy.
    Grants when the subject holds at least one of the roles required for
    the (resource, action) pair. The context is ignored.
    """

    def __init__(
        self,
        required_roles: Callable[[R, A], Iterable[Any]],
        subject_roles: Callable[[S], Iterable[Any]],
        name: str = "RbacPolicy",
        metadata: Optional[SecurityRuleMetadata] = None,
    ):
        """
        Initialize RBAC policy.

        Args:
            required_roles: Maps (resource, action) to the roles that permit it
            subject_roles: Maps a subject to the roles it holds
            name: Name used in traces
            metadata: Optional audit metadata
        """
        self._required_roles = required_roles
        self._subject_roles = subject_roles
        self._name = name
        self._metadata = metadata or SecurityRuleMetadata()

    def policy_name(self) -> str:
        return self._name

    def security_metadata(self) -> SecurityRuleMetadata:
        return self._metadata

    async def evaluate_access(self, subject: S, action: A, resource: R, context: C) -> PolicyEvalResult:
        required = set(await maybe_await(self._required_roles(resource, action)))
        held = set(await maybe_await(self._subject_roles(subject)))

        if required & held:
            return Granted(self._name, "User has required role")
        return Denied(self._name, "User doesn't have required role")


class AbacPolicy(Policy[S, R, A, C]):
    """
    Attribute-based policy.
    Grants iff ``condition(subject, resource, action, context)`` is true.
    """

    def __init__(
        self,
        condition: Callable[[S, R, A, C], Any],
        name: str = "AbacPolicy",
        metadata: Optional[SecurityRuleMetadata] = None,
    ):
        self._condition = condition
        self._name = name
        self._metadata = metadata or SecurityRuleMetadata()

    def policy_name(self) -> str:
        return self._name

    def security_metadata(self) -> SecurityRuleMetadata:
        return self._metadata

    async def evaluate_access(self, subject: S, action: A, resource: R, context: C) -> PolicyEvalResult:
        if await maybe_await(self._condition(subject, resource, action, context)):
            return Granted(self._name, "Condition evaluated to true")
        return Denied(self._name, "Condition evaluated to false")


class RebacPolicy(Policy[S, R, A, C]):
    """
    Relationship-based policy.
    Delegates entirely to a RelationshipResolver; a resolver that cannot
    answer is expected to return False, which is reported as a denial.
    """

    def __init__(
        self,
        relationship: Any,
        resolver: RelationshipResolver[S, R],
        name: str = "RebacPolicy",
        metadata: Optional[SecurityRuleMetadata] = None,
    ):
        self.relationship = relationship
        self.resolver = resolver
        self._name = name
        self._metadata = metadata or SecurityRuleMetadata()

    def policy_name(self) -> str:
        return self._name

    def security_metadata(self) -> SecurityRuleMetadata:
        return self._metadata

    async def evaluate_access(self, subject: S, action: A, resource: R, context: C) -> PolicyEvalResult:
        if await self.resolver.has_relationship(subject, resource, self.relationship):
            return Granted(
                self._name,
                f"Subject has '{self.relationship}' relationship with resource",
            )
        return Denied(
            self._name,
            f"Subject does not have '{self.relationship}' relationship with resource",
        )


class TimeoutRelationshipResolver(RelationshipResolver[S, R]):
    """
    Bounds another resolver's latency.

    A call that times out or raises is logged and answered with False, so a
    slow or failing backend reads as a missing relationship.
    """

    def __init__(
        self,
        inner: RelationshipResolver[S, R],
        timeout: Union[timedelta, float],
    ):
        """
        Args:
            inner: Resolver doing the actual lookup
            timeout: Maximum time to wait, as timedelta or seconds
        """
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.inner = inner
        self.timeout = timeout

    async def has_relationship(self, subject: S, resource: R, relationship: Any) -> bool:
        try:
            return bool(await asyncio.wait_for(
                self.inner.has_relationship(subject, resource, relationship),
                timeout=self.timeout,
            ))
        except asyncio.TimeoutError:
            logger.warning(
                f"Relationship lookup for '{relationship}' timed out after {self.timeout}s"
            )
            return False
        except Exception as e:
            logger.warning(f"Relationship lookup for '{relationship}' failed: {e}")
            return False
