"""
Top-level permission checker.

Aggregates independent policies with OR semantics: policies are evaluated in
insertion order and the first grant wins. Every evaluated policy is recorded
in the trace and emitted as an audit event, whether it granted or denied.
"""

import logging
import time
from typing import Generic, List, Optional, Tuple

from ..audit.logger import AuditEvent, AuditLogger
from ..core.config import Config
from ..metrics.collector import MetricsCollector
from .types import (
    A, C, R, S, AccessDenied, AccessEvaluation, AccessGranted, CombineOp, Combined,
    Denied, EvalTrace, Policy, PolicyEvalResult
)


logger = logging.getLogger(__name__)

NO_POLICIES_REASON = "No policies configured"
ALL_DENIED_REASON = "All policies denied access"


class PermissionChecker(Generic[S, R, A, C]):
    """
    Evaluates access requests against an ordered, append-only policy list.

    Callers needing every top-level policy to pass should wrap them in a
    single AndPolicy; the checker itself is always OR.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        audit_logger: Optional[AuditLogger] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize permission checker.

        Args:
            config: Checker configuration, defaults to Config()
            audit_logger: Optional sink receiving one event per evaluated policy
            metrics: Optional Prometheus collector
        """
        self.config = config or Config()
        self.config.validate()
        self.audit_logger = audit_logger
        self.metrics = metrics
        self._policies: List[Policy[S, R, A, C]] = []

    @property
    def name(self) -> str:
        return self.config.checker_name

    @property
    def policies(self) -> Tuple[Policy[S, R, A, C], ...]:
        return tuple(self._policies)

    def __len__(self) -> int:
        return len(self._policies)

    def add_policy(self, policy: Policy[S, R, A, C]) -> None:
        """Append a policy. Policies are never removed."""
        self._policies.append(policy)

    async def evaluate_access(
        self,
        subject: S,
        action: A,
        resource: R,
        context: C,
    ) -> AccessEvaluation:
        """
        Decide whether ``subject`` may perform ``action`` on ``resource``.

        Args:
            subject: The entity requesting access
            action: The operation being attempted
            resource: The entity being accessed
            context: Ambient request information

        Returns:
            AccessEvaluation: AccessGranted or AccessDenied, with the full trace
        """
        start_time = time.perf_counter()

        if not self._policies:
            logger.debug(NO_POLICIES_REASON)
            trace = EvalTrace.with_root(Denied(self.name, NO_POLICIES_REASON))
            await self._record_decision(False, start_time)
            return AccessDenied(trace=trace, reason=NO_POLICIES_REASON)

        logger.debug(f"{self.name}: checking access against {len(self._policies)} policies")

        results: List[PolicyEvalResult] = []
        for policy in list(self._policies):
            result = await policy.evaluate_access(subject, action, resource, context)
            results.append(result)
            await self._audit(policy, result)

            if result.outcome:
                trace = EvalTrace.with_root(Combined(self.name, CombineOp.OR, tuple(results)))
                await self._record_decision(True, start_time)
                return AccessGranted(
                    policy_name=policy.policy_name(),
                    reason=result.reason,
                    trace=trace,
                )

        logger.debug(f"{self.name}: no policy granted access")
        trace = EvalTrace.with_root(Combined(self.name, CombineOp.OR, tuple(results)))
        if self.config.log_traces:
            logger.debug(f"{self.name} denial trace:\n{trace.format()}")
        await self._record_decision(False, start_time)
        return AccessDenied(trace=trace, reason=ALL_DENIED_REASON)

    async def _audit(self, policy: Policy[S, R, A, C], result: PolicyEvalResult) -> None:
        """Emit the audit record for one evaluated policy."""
        if self.metrics is not None and self.config.metrics_enabled:
            await self.metrics.record_policy_evaluation(policy.policy_name(), result.outcome)

        if not self.config.audit_enabled:
            return

        metadata = policy.security_metadata()
        event = AuditEvent(
            checker=self.name,
            policy_name=policy.policy_name(),
            outcome=result.outcome,
            reason=result.reason,
            category=metadata.category,
            rule_name=metadata.name,
            ruleset_name=metadata.ruleset_name,
            details=metadata.to_dict(),
        )

        logger.info(
            f"Policy {event.policy_name} {'granted' if event.outcome else 'denied'} access",
            extra={
                'checker': event.checker,
                'policy_name': event.policy_name,
                'category': event.category,
                'outcome': event.outcome,
                'reason': event.reason,
                'security_rule': metadata.to_dict(),
            },
        )

        if self.audit_logger is not None:
            try:
                await self.audit_logger.log(event)
            except Exception as e:
                logger.error(f"Failed to write audit event for policy {event.policy_name}: {e}")

    async def _record_decision(self, outcome: bool, start_time: float) -> None:
        if self.metrics is not None and self.config.metrics_enabled:
            await self.metrics.record_decision(
                self.name, outcome, time.perf_counter() - start_time
            )
