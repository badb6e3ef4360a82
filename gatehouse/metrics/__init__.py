"""
Prometheus metrics for gatehouse decisions.
"""

from .collector import MetricConfig, MetricsCollector

__all__ = [
    "MetricConfig",
    "MetricsCollector",
]
