"""
Authorization types for gatehouse.
Implements evaluation results, traces, access decisions and the policy
capability every decision unit implements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

from ..types.errors import AccessDeniedError, EmptyPolicySetError


S = TypeVar('S')
R = TypeVar('R')
A = TypeVar('A')
C = TypeVar('C')

GRANTED_MARK = "✓"
DENIED_MARK = "✗"


class Effect(Enum):
    """Policy effect applied when a builder policy's predicate matches."""
    ALLOW = "allow"
    DENY = "deny"


class CombineOp(str, Enum):
    """Boolean operation recorded on a combined trace node."""
    AND = "AND"
    OR = "OR"
    NOT = "NOT"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SecurityRuleMetadata:
    """
    Structured audit fields a policy may attach to its decisions.

    Every field is optional; the checker copies whatever is present into
    the audit events it emits.
    """
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    reference: Optional[str] = None
    ruleset_name: Optional[str] = None
    uuid: Optional[str] = None
    version: Optional[str] = None
    license: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, skipping absent fields."""
        return {
            key: value
            for key, value in (
                ('name', self.name),
                ('category', self.category),
                ('description', self.description),
                ('reference', self.reference),
                ('ruleset_name', self.ruleset_name),
                ('uuid', self.uuid),
                ('version', self.version),
                ('license', self.license),
            )
            if value is not None
        }


class PolicyEvalResult(ABC):
    """
    Result of evaluating a single policy: a leaf decision or a combined node.
    """

    policy_name: str

    @property
    @abstractmethod
    def outcome(self) -> bool:
        """True when this node grants access."""

    def is_granted(self) -> bool:
        return self.outcome

    @abstractmethod
    def format(self, indent: int = 0) -> str:
        """Render this node and its children as an indented tree."""

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class Granted(PolicyEvalResult):
    """Terminal success."""
    policy_name: str
    reason: Optional[str] = None

    @property
    def outcome(self) -> bool:
        return True

    def format(self, indent: int = 0) -> str:
        reason_text = f": {self.reason}" if self.reason is not None else ""
        return f"{' ' * indent}{GRANTED_MARK} {self.policy_name} GRANTED{reason_text}"


@dataclass(frozen=True)
class Denied(PolicyEvalResult):
    """Terminal failure. A denial always carries its reason."""
    policy_name: str
    reason: str

    @property
    def outcome(self) -> bool:
        return False

    def format(self, indent: int = 0) -> str:
        return f"{' ' * indent}{DENIED_MARK} {self.policy_name} DENIED: {self.reason}"


@dataclass(frozen=True)
class Combined(PolicyEvalResult):
    """
    Non-terminal node produced by a combinator or the checker.

    ``children`` keeps evaluation order, so a short-circuited evaluation only
    lists the policies that actually ran. ``outcome`` is computed from the
    children when omitted and is never re-derived afterwards.
    """
    policy_name: str
    operation: CombineOp
    children: Tuple[PolicyEvalResult, ...]
    outcome: Optional[bool] = None

    def __post_init__(self):
        operation = CombineOp(self.operation)
        children = tuple(self.children)
        object.__setattr__(self, 'operation', operation)
        object.__setattr__(self, 'children', children)

        if operation is CombineOp.NOT:
            if len(children) != 1:
                raise ValueError(
                    f"NOT node {self.policy_name!r} needs exactly one child, got {len(children)}"
                )
            expected = not children[0].outcome
        else:
            if not children:
                raise EmptyPolicySetError(self.policy_name)
            outcomes = [child.outcome for child in children]
            expected = all(outcomes) if operation is CombineOp.AND else any(outcomes)

        if self.outcome is None:
            object.__setattr__(self, 'outcome', expected)
        elif bool(self.outcome) != expected:
            raise ValueError(
                f"{operation.value} node {self.policy_name!r} declares outcome "
                f"{self.outcome} but its children evaluate to {expected}"
            )

    @property
    def reason(self) -> Optional[str]:
        return None

    def format(self, indent: int = 0) -> str:
        mark = GRANTED_MARK if self.outcome else DENIED_MARK
        lines = [f"{' ' * indent}{mark} {self.policy_name} ({self.operation.value})"]
        for child in self.children:
            lines.append(child.format(indent + 2))
        return "\n".join(lines)


class EvalTrace:
    """Owns at most one root result describing how a decision was reached."""

    def __init__(self, root: Optional[PolicyEvalResult] = None):
        self._root = root

    @classmethod
    def with_root(cls, result: PolicyEvalResult) -> 'EvalTrace':
        return cls(result)

    @property
    def root(self) -> Optional[PolicyEvalResult]:
        return self._root

    def set_root(self, result: PolicyEvalResult) -> None:
        self._root = result

    def format(self) -> str:
        if self._root is None:
            return "No evaluation trace available"
        return self._root.format(0)

    def __str__(self) -> str:
        return self.format()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EvalTrace):
            return NotImplemented
        return self._root == other._root

    def __repr__(self) -> str:
        return f"EvalTrace(root={self._root!r})"


class AccessEvaluation(ABC):
    """Caller-facing result of a checker evaluation."""

    trace: EvalTrace

    @abstractmethod
    def is_granted(self) -> bool:
        pass

    def raise_if_denied(
        self,
        error_factory: Callable[[str], Exception] = AccessDeniedError
    ) -> None:
        """
        Raise ``error_factory(reason)`` when access was denied.

        Args:
            error_factory: Builds the exception from the denial reason

        Raises:
            The exception produced by ``error_factory`` on denial
        """
        if not self.is_granted():
            raise error_factory(self.reason)

    def display_trace(self) -> str:
        """Summary line followed by the rendered evaluation trace."""
        return f"{self}\nEvaluation Trace:\n{self.trace.format()}"


@dataclass
class AccessGranted(AccessEvaluation):
    """Access granted by ``policy_name``."""
    policy_name: str
    reason: Optional[str]
    trace: EvalTrace

    def is_granted(self) -> bool:
        return True

    def __str__(self) -> str:
        if self.reason is not None:
            return f"[GRANTED] by {self.policy_name} - {self.reason}"
        return f"[GRANTED] by {self.policy_name}"


@dataclass
class AccessDenied(AccessEvaluation):
    """Access denied; ``reason`` summarises the checker-level outcome."""
    trace: EvalTrace
    reason: str

    def is_granted(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"[DENIED] - {self.reason}"


class Policy(ABC, Generic[S, R, A, C]):
    """
    A decision unit mapping (subject, action, resource, context) to a result.

    Implementations must not mutate themselves during evaluation; the same
    instance may be shared by several combinators and evaluated concurrently.
    """

    @abstractmethod
    async def evaluate_access(
        self,
        subject: S,
        action: A,
        resource: R,
        context: C,
    ) -> PolicyEvalResult:
        """
        Decide whether ``subject`` may perform ``action`` on ``resource``.

        Args:
            subject: The entity requesting access
            action: The operation being attempted
            resource: The entity being accessed
            context: Ambient request information

        Returns:
            PolicyEvalResult: Granted, Denied or Combined
        """
        pass

    @abstractmethod
    def policy_name(self) -> str:
        """Stable identifier used in traces and audit events."""
        pass

    def security_metadata(self) -> SecurityRuleMetadata:
        """Audit metadata for this policy; all fields absent by default."""
        return SecurityRuleMetadata()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.policy_name()!r})"


class RelationshipResolver(ABC, Generic[S, R]):
    """
    Answers whether a subject holds a relationship with a resource.

    Resolvers that cannot answer (backend down, timeout) must return False.
    """

    @abstractmethod
    async def has_relationship(self, subject: S, resource: R, relationship: Any) -> bool:
        pass
