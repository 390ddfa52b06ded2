"""Peak-to-Average Ratio metric.

::

    ratio = round1(max(counts) / mean(counts))

1.0 is perfectly flat; 24.0 means every run lands in one hour.  Lower is
better.
"""

from __future__ import annotations

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.measurement.metrics.base import BaseMetric, round1


class PeakAvgRatio(BaseMetric):
    """max / mean, one decimal."""

    @property
    def name(self) -> str:
        return "peak_avg_ratio"

    def _compute(self, dist: HourlyDistribution) -> float:
        return round1(max(dist.counts) / dist.mean)

    def describe(self) -> str:
        return "Peak/Avg Ratio: busiest hour divided by the hourly mean. Lower is better."
