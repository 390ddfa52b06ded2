"""Measurement layer for the refresh balancer.

Derives banded health KPIs from any 24-hour load distribution.

Public API
----------
- :class:`HealthMetricsEngine` -- composite metric runner
- :class:`HealthMetrics` -- immutable report value object
- :class:`BaseMetric` / :class:`MetricResult` -- metric protocol and results
- Individual metrics: ``LoadBalanceScore``, ``BusiestWindow``,
  ``Utilization``, ``PeakAvgRatio``
"""

from refresh_balancer.measurement.engine import HealthMetricsEngine
from refresh_balancer.measurement.metrics.base import BaseMetric, MetricResult
from refresh_balancer.measurement.metrics.busiest_window import BusiestWindow, BusiestWindowResult
from refresh_balancer.measurement.metrics.load_balance import LoadBalanceScore
from refresh_balancer.measurement.metrics.peak_avg_ratio import PeakAvgRatio
from refresh_balancer.measurement.metrics.utilization import Utilization
from refresh_balancer.measurement.report import HealthMetrics

__all__ = [
    # Engine & report
    "HealthMetricsEngine",
    "HealthMetrics",
    # Metric base
    "BaseMetric",
    "MetricResult",
    # Concrete metrics
    "BusiestWindow",
    "BusiestWindowResult",
    "LoadBalanceScore",
    "PeakAvgRatio",
    "Utilization",
]
