"""Health metrics report value object.

:class:`HealthMetrics` bundles the four banded KPIs of one hourly
distribution.  It carries no identity and is recomputed on demand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from refresh_balancer.measurement.metrics.base import MetricResult
from refresh_balancer.measurement.metrics.busiest_window import BusiestWindowResult


@dataclass(frozen=True)
class HealthMetrics:
    """The four health KPIs of one distribution.

    Attributes
    ----------
    load_balance_score:
        0..100, higher is better.
    busiest_window:
        Heaviest 3-hour window; ``value`` is its percentage of total load.
    utilization:
        Percentage of hours with any load, higher is better.
    peak_avg_ratio:
        Busiest hour over mean, lower is better.
    """

    load_balance_score: MetricResult
    busiest_window: BusiestWindowResult
    utilization: MetricResult
    peak_avg_ratio: MetricResult

    @property
    def results(self) -> tuple[MetricResult, ...]:
        return (
            self.load_balance_score,
            self.busiest_window,
            self.utilization,
            self.peak_avg_ratio,
        )

    @property
    def values(self) -> dict[str, float]:
        """Metric name to scalar value."""
        return {r.name: r.value for r in self.results}

    def get_metric(self, name: str) -> MetricResult | None:
        for r in self.results:
            if r.name == name:
                return r
        return None

    # -- serialisation --------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dictionary::

            {
                "load_balance_score": {"value": 82, "band": "green"},
                "busiest_window": {"label": "9 PM-12 AM", "count": 14,
                                   "pct": 31.8, "band": "yellow"},
                "utilization": {"value": 58, "band": "yellow"},
                "peak_avg_ratio": {"value": 2.4, "band": "yellow"},
            }
        """
        window = self.busiest_window
        return {
            "load_balance_score": _value_dict(self.load_balance_score),
            "busiest_window": {
                "label": window.label,
                "count": window.count,
                "pct": window.pct,
                "band": window.band.value,
            },
            "utilization": _value_dict(self.utilization),
            "peak_avg_ratio": _value_dict(self.peak_avg_ratio),
        }

    # -- human-readable summary -----------------------------------------------

    def summary(self) -> str:
        """Return a human-readable table string.

        Example output::

            === Schedule Health ===
            Metric                Value  Band
            ----------------------------------
            Load Balance Score       82  green
            Busiest 3h Window     31.8%  yellow
            ...
        """
        window = self.busiest_window
        rows = [
            ("Load Balance Score", f"{self.load_balance_score.value:g}", self.load_balance_score.band.value),
            ("Busiest 3h Window", f"{window.pct:g}%", window.band.value),
            ("  window", window.label, ""),
            ("Utilization", f"{self.utilization.value:g}%", self.utilization.band.value),
            ("Peak/Avg Ratio", f"{self.peak_avg_ratio.value:g}x", self.peak_avg_ratio.band.value),
        ]
        metric_width = max(len("Metric"), *(len(r[0]) for r in rows))
        value_width = max(len("Value"), *(len(r[1]) for r in rows))
        sep = "-" * (metric_width + value_width + 10)
        lines = [
            "=== Schedule Health ===",
            f"{'Metric':<{metric_width}}  {'Value':>{value_width}}  Band",
            sep,
        ]
        for label, value, band in rows:
            lines.append(f"{label:<{metric_width}}  {value:>{value_width}}  {band}".rstrip())
        lines.append(sep)
        return "\n".join(lines)


def _value_dict(result: MetricResult) -> dict[str, Any]:
    value: float | int = result.value
    if float(value).is_integer() and result.name != "peak_avg_ratio":
        value = int(value)
    return {"value": value, "band": result.band.value}
