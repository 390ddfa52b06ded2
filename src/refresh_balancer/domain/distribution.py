"""Hourly load distribution value object.

A distribution is 24 occurrence counts, one per hour of day.  It is the
common currency of the aggregation engine, the health metrics and the
impact simulator.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

HOURS_PER_DAY = 24


@dataclass(frozen=True)
class HourlyDistribution:
    """Occurrence counts for hours 0..23.

    ``counts[h]`` is the number of (weekday, hour) firing slots per week that
    fall on hour ``h``.
    """

    counts: tuple[int, ...] = (0,) * HOURS_PER_DAY

    def __post_init__(self) -> None:
        if len(self.counts) != HOURS_PER_DAY:
            raise ValueError(f"distribution must have 24 counts, got {len(self.counts)}")
        if any(c < 0 for c in self.counts):
            raise ValueError("distribution counts must be non-negative")
        object.__setattr__(self, "counts", tuple(int(c) for c in self.counts))

    @classmethod
    def zeros(cls) -> HourlyDistribution:
        return cls()

    @classmethod
    def from_mapping(cls, by_hour: Mapping[int | str, int]) -> HourlyDistribution:
        """Build from ``{hour: count}``; missing hours count as zero."""
        counts = [0] * HOURS_PER_DAY
        for hour, count in by_hour.items():
            index = int(hour)
            if not 0 <= index < HOURS_PER_DAY:
                raise ValueError(f"hour must be in [0, 23], got {hour}")
            counts[index] = int(count)
        return cls(tuple(counts))

    def __getitem__(self, hour: int) -> int:
        return self.counts[hour]

    def __len__(self) -> int:
        return HOURS_PER_DAY

    @property
    def total(self) -> int:
        return sum(self.counts)

    @property
    def mean(self) -> float:
        return self.total / HOURS_PER_DAY

    def _by_load(self) -> list[int]:
        # Busiest first; ties keep ascending hour order.
        return sorted(range(HOURS_PER_DAY), key=lambda h: -self.counts[h])

    def peak_hours(self, n: int = 3) -> list[int]:
        """Up to *n* busiest hours, busiest first, ignoring empty hours."""
        return [h for h in self._by_load()[:n] if self.counts[h] > 0]

    def quiet_hours(self, n: int = 3) -> list[int]:
        """The *n* least-loaded hours, quietest first; ties keep ascending hour order."""
        return self.by_quietness()[:max(n, 0)]

    def by_quietness(self) -> list[int]:
        """All 24 hours, quietest first."""
        return sorted(range(HOURS_PER_DAY), key=lambda h: self.counts[h])

    def as_dict(self) -> dict[int, int]:
        return dict(enumerate(self.counts))

    def as_array(self) -> np.ndarray:
        return np.asarray(self.counts, dtype=float)

