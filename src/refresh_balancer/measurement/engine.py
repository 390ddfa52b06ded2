"""Health metrics engine -- composite runner for the four health metrics.

Usage::

    engine = HealthMetricsEngine()                  # default thresholds
    health = engine.compute(distribution)
    health.load_balance_score.band                  # HealthBand.GREEN
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.infrastructure.config import DEFAULT_HEALTH_THRESHOLDS, BandThreshold
from refresh_balancer.measurement.metrics.base import BaseMetric, MetricResult
from refresh_balancer.measurement.metrics.busiest_window import BusiestWindow, BusiestWindowResult
from refresh_balancer.measurement.metrics.load_balance import LoadBalanceScore
from refresh_balancer.measurement.metrics.peak_avg_ratio import PeakAvgRatio
from refresh_balancer.measurement.metrics.utilization import Utilization
from refresh_balancer.measurement.report import HealthMetrics

logger = logging.getLogger(__name__)


class HealthMetricsEngine:
    """Computes the four banded health KPIs of an hourly distribution.

    Parameters
    ----------
    thresholds:
        Band thresholds keyed by metric name.  Missing entries fall back to
        ``DEFAULT_HEALTH_THRESHOLDS``.
    """

    def __init__(self, thresholds: Mapping[str, BandThreshold] | None = None) -> None:
        table = dict(DEFAULT_HEALTH_THRESHOLDS)
        if thresholds:
            table.update(thresholds)
        self.thresholds: dict[str, BandThreshold] = table
        self._load_balance = LoadBalanceScore(table["load_balance_score"])
        self._busiest_window = BusiestWindow(table["busy_window_pct"])
        self._utilization = Utilization(table["utilization"])
        self._peak_avg_ratio = PeakAvgRatio(table["peak_avg_ratio"])

    @property
    def metrics(self) -> list[BaseMetric]:
        return [self._load_balance, self._busiest_window, self._utilization, self._peak_avg_ratio]

    @property
    def metric_names(self) -> list[str]:
        return [m.name for m in self.metrics]

    def compute_all(self, dist: HourlyDistribution) -> list[MetricResult]:
        """Every metric against *dist*, in registration order."""
        return [metric.compute(dist) for metric in self.metrics]

    def compute(self, dist: HourlyDistribution) -> HealthMetrics:
        window = self._busiest_window.compute(dist)
        assert isinstance(window, BusiestWindowResult)
        health = HealthMetrics(
            load_balance_score=self._load_balance.compute(dist),
            busiest_window=window,
            utilization=self._utilization.compute(dist),
            peak_avg_ratio=self._peak_avg_ratio.compute(dist),
        )
        logger.debug("Health computed for %d runs: %s", dist.total, health.values)
        return health
