"""Utilization metric: percentage of hours of the day carrying any load."""

from __future__ import annotations

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.measurement.metrics.base import BaseMetric, round_half_up


class Utilization(BaseMetric):
    """round(100 * active_hours / 24)."""

    @property
    def name(self) -> str:
        return "utilization"

    def _compute(self, dist: HourlyDistribution) -> float:
        active = sum(1 for count in dist.counts if count > 0)
        return float(round_half_up(active / len(dist) * 100))

    def describe(self) -> str:
        return "Utilization: share of the 24 hours with at least one run. Higher is better."
