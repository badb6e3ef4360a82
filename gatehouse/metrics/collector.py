"""
Prometheus metrics for access decisions.

Counts checker decisions and per-policy outcomes and times whole
evaluations. Each collector owns its registry, so several checkers (or
tests) never collide on metric names.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


logger = logging.getLogger(__name__)


@dataclass
class MetricConfig:
    """Configuration for metrics collection."""

    enabled: bool = True
    namespace: str = "gatehouse"


def _outcome_label(outcome: bool) -> str:
    return "granted" if outcome else "denied"


class MetricsCollector:
    """Records access decision metrics into a private CollectorRegistry."""

    def __init__(self, config: Optional[MetricConfig] = None):
        """
        Initialize metrics collector.

        Args:
            config: Metrics configuration
        """
        self.config = config or MetricConfig()
        self.registry = CollectorRegistry()
        namespace = self.config.namespace

        self.access_decisions = Counter(
            f'{namespace}_access_decisions_total',
            'Total number of checker-level access decisions',
            ['checker', 'outcome'],
            registry=self.registry
        )

        self.policy_evaluations = Counter(
            f'{namespace}_policy_evaluations_total',
            'Total number of individual policy evaluations',
            ['policy', 'outcome'],
            registry=self.registry
        )

        self.evaluation_latency = Histogram(
            f'{namespace}_access_evaluation_seconds',
            'Duration of a full checker evaluation in seconds',
            ['checker'],
            buckets=[0.0001, 0.0002, 0.0005, 0.001, 0.002, 0.005, 0.01, 0.02, 0.05, 0.1, 0.5, 1.0],
            registry=self.registry
        )

        if not self.config.enabled:
            logger.info("Metrics collection disabled")

    async def record_policy_evaluation(self, policy: str, outcome: bool) -> None:
        """Record the outcome of one policy evaluated by a checker."""
        if not self.config.enabled:
            return

        self.policy_evaluations.labels(policy=policy, outcome=_outcome_label(outcome)).inc()

    async def record_decision(self, checker: str, outcome: bool, duration: float) -> None:
        """Record a final checker decision and how long it took."""
        if not self.config.enabled:
            return

        self.access_decisions.labels(checker=checker, outcome=_outcome_label(outcome)).inc()
        self.evaluation_latency.labels(checker=checker).observe(duration)
        logger.debug(f"Recorded decision: {checker} -> {_outcome_label(outcome)} in {duration:.6f}s")

    def export(self) -> bytes:
        """Prometheus text exposition of this collector's registry."""
        return generate_latest(self.registry)
