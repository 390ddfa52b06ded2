"""Busiest 3-Hour Window metric.

Slides a three-hour window over all 24 starting hours, wrapping past
midnight, and reports the share of total load inside the heaviest one.
The first start hour reaching the maximum wins ties.
"""

from __future__ import annotations

from dataclasses import dataclass

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.domain.enums import HealthBand
from refresh_balancer.domain.occurrence import format_hour
from refresh_balancer.measurement.metrics.base import BaseMetric, MetricResult, round1

WINDOW_HOURS = 3
NO_WINDOW_LABEL = "N/A"


@dataclass(frozen=True)
class BusiestWindowResult(MetricResult):
    """:class:`MetricResult` for the busiest window; ``value`` is the percentage.

    Attributes
    ----------
    label:
        ``"9 PM-12 AM"`` style label, or ``"N/A"`` when there is no load.
    count:
        Runs inside the window.
    start_hour:
        First hour of the window, ``None`` when there is no load.
    """

    label: str = NO_WINDOW_LABEL
    count: int = 0
    start_hour: int | None = None

    @property
    def pct(self) -> float:
        return self.value


def find_busiest_window(counts: tuple[int, ...], width: int = WINDOW_HOURS) -> tuple[int, int]:
    """Return ``(start_hour, window_sum)`` of the heaviest wrapping window."""
    size = len(counts)
    best_start, best_sum = 0, -1
    for start in range(size):
        window_sum = sum(counts[(start + offset) % size] for offset in range(width))
        if window_sum > best_sum:
            best_start, best_sum = start, window_sum
    return best_start, best_sum


def window_label(start_hour: int, width: int = WINDOW_HOURS) -> str:
    return f"{format_hour(start_hour)}-{format_hour((start_hour + width) % 24)}"


class BusiestWindow(BaseMetric):
    """pct = heaviest 3-hour window sum / total * 100.

    The band is taken from the raw share; only the reported ``pct`` is
    rounded to one decimal.
    """

    @property
    def name(self) -> str:
        return "busy_window_pct"

    def _compute(self, dist: HourlyDistribution) -> float:
        _, window_sum = find_busiest_window(dist.counts)
        return window_sum * 100 / dist.total

    def _report(self, value: float) -> float:
        return round1(value)

    def _make_result(
        self, value: float, band: HealthBand, dist: HourlyDistribution
    ) -> MetricResult:
        if dist.total == 0:
            return BusiestWindowResult(
                name=self.name, value=value, band=band, explanation=self.describe()
            )
        start, window_sum = find_busiest_window(dist.counts)
        return BusiestWindowResult(
            name=self.name,
            value=value,
            band=band,
            explanation=self.describe(),
            metadata={"window_hours": WINDOW_HOURS},
            label=window_label(start),
            count=window_sum,
            start_hour=start,
        )

    def describe(self) -> str:
        return (
            "Busiest 3-hour window: share of all runs inside the heaviest "
            "three consecutive hours. Lower is better."
        )
