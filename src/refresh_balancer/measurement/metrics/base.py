"""Base metric abstraction for the health measurement layer.

:class:`BaseMetric` defines the **Template Method** pattern used by all
concrete health metrics:

1. ``validate(dist)``  -- is there any load to measure?
2. ``_compute(dist)``  -- compute the raw scalar value (subclass responsibility).
3. ``describe()``      -- human-readable explanation.
4. ``_make_result()``  -- package value and band (subclasses may enrich it).

The public entry point :meth:`compute` orchestrates these steps and returns
an immutable :class:`MetricResult`.  A distribution with no load skips
``_compute`` entirely and yields the metric's ``empty_value`` banded green.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.domain.enums import HealthBand
from refresh_balancer.infrastructure.config import DEFAULT_HEALTH_THRESHOLDS, BandThreshold


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def round1(value: float) -> float:
    """Round to one decimal place, halves up (1.25 -> 1.3)."""
    return math.floor(value * 10 + 0.5) / 10


# ---------------------------------------------------------------------------
# Result value object
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MetricResult:
    """Immutable result of a single metric computation.

    Attributes
    ----------
    name:
        Metric identifier (matches :attr:`BaseMetric.name`).
    value:
        Scalar metric value, already rounded for display.
    band:
        Traffic-light rating of ``value``.
    metadata:
        Extra data the metric wishes to expose (e.g. intermediate values).
    explanation:
        Human-readable description.
    """

    name: str
    value: float
    band: HealthBand = HealthBand.GREEN
    metadata: dict[str, Any] = field(default_factory=dict)
    explanation: str = ""

    def __repr__(self) -> str:
        return f"MetricResult(name={self.name!r}, value={self.value:.4f}, band={self.band.value})"


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class BaseMetric(ABC):
    """Template Method base class for all health metrics.

    Subclasses must implement:
    - ``name`` (property)   -- unique metric identifier and threshold key.
    - ``_compute(dist)``    -- core computation returning a ``float``.

    Subclasses *may* override:
    - ``empty_value``       -- value reported for a distribution with no load.
    - ``describe()``        -- human-readable explanation.
    - ``_report(value)``    -- value reported after banding; banding sees the
      unrounded ``_compute`` output.
    - ``_make_result(...)`` -- build a richer result type.

    Parameters
    ----------
    threshold:
        Band cut-offs.  Defaults to the entry for :attr:`name` in
        ``DEFAULT_HEALTH_THRESHOLDS``.
    """

    empty_value: float = 0.0

    def __init__(self, threshold: BandThreshold | None = None) -> None:
        self.threshold = threshold or DEFAULT_HEALTH_THRESHOLDS[self.name]

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique metric identifier, e.g. ``'utilization'``."""
        ...

    @abstractmethod
    def _compute(self, dist: HourlyDistribution) -> float:
        """Core computation -- return the scalar value that gets banded.

        Implementations can assume that ``validate(dist)`` has already
        returned ``True``, so ``dist.total > 0``.
        """
        ...

    def validate(self, dist: HourlyDistribution) -> bool:
        return dist.total > 0

    def describe(self) -> str:
        return f"Metric: {self.name}"

    def _report(self, value: float) -> float:
        return value

    def _make_result(
        self, value: float, band: HealthBand, dist: HourlyDistribution
    ) -> MetricResult:
        return MetricResult(
            name=self.name,
            value=value,
            band=band,
            explanation=self.describe(),
        )

    # -- template method (public API) -----------------------------------------

    def compute(self, dist: HourlyDistribution) -> MetricResult:
        """Compute the metric on *dist* using the template-method pipeline.

        **Do not override** -- customise behaviour through the hook methods.
        """
        if not self.validate(dist):
            return self._make_result(self.empty_value, HealthBand.GREEN, dist)
        value = self._compute(dist)
        return self._make_result(self._report(value), self.threshold.band(value), dist)
