"""Health metric implementations.

Each metric extends :class:`BaseMetric` using the Template Method pattern
and computes a banded scalar from an :class:`HourlyDistribution`.

Available metrics
~~~~~~~~~~~~~~~~~
- :class:`LoadBalanceScore` -- evenness of the hourly spread
- :class:`BusiestWindow` -- share of load in the heaviest 3-hour window
- :class:`Utilization` -- share of hours carrying any load
- :class:`PeakAvgRatio` -- busiest hour relative to the mean
"""

from refresh_balancer.measurement.metrics.base import (
    BaseMetric,
    MetricResult,
    round1,
    round_half_up,
)
from refresh_balancer.measurement.metrics.busiest_window import (
    BusiestWindow,
    BusiestWindowResult,
    find_busiest_window,
)
from refresh_balancer.measurement.metrics.load_balance import LoadBalanceScore
from refresh_balancer.measurement.metrics.peak_avg_ratio import PeakAvgRatio
from refresh_balancer.measurement.metrics.utilization import Utilization

__all__ = [
    "BaseMetric",
    "MetricResult",
    "round1",
    "round_half_up",
    "BusiestWindow",
    "BusiestWindowResult",
    "find_busiest_window",
    "LoadBalanceScore",
    "PeakAvgRatio",
    "Utilization",
]
