"""Load Balance Score metric.

Scores how evenly the 24 hourly counts are spread, from the coefficient of
variation of the distribution.

Formula
-------
::

    cv    = std(counts) / mean(counts)       # population std
    score = max(0, round(100 / (1 + cv)))

Range: [0, 100].  A perfectly flat distribution scores 100; load piled into
a single hour scores about 17.  Higher is better.
"""

from __future__ import annotations

import numpy as np

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.measurement.metrics.base import BaseMetric, round_half_up


class LoadBalanceScore(BaseMetric):
    """score = round(100 / (1 + cv))."""

    empty_value = 100.0

    @property
    def name(self) -> str:
        return "load_balance_score"

    def _compute(self, dist: HourlyDistribution) -> float:
        counts = dist.as_array()
        cv = float(np.std(counts)) / dist.mean
        return float(max(0, round_half_up(100 / (1 + cv))))

    def describe(self) -> str:
        return (
            "Load Balance Score: 100 / (1 + coefficient of variation) of the "
            "hourly counts. Range [0, 100], higher is better."
        )
