"""Value objects for the refresh balancer.

All types here are frozen dataclasses -- immutable, compared by value.
A ``Schedule`` is a tagged union of four variants; a Monthly schedule in
turn carries exactly one of two mode variants.  There are no nullable
"maybe this frequency" fields: the variant type decides which fields exist.

Legality rules (interval sets, mandatory end times, minute alignment, ...)
are enforced when raw input is parsed by
:func:`refresh_balancer.services.validation.parse_schedule`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import ClassVar, Union

from .enums import Frequency, MonthDayToken, Ordinal, Weekday

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

# ---------------------------------------------------------------------------
# TimeOfDay
# ---------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Site-local wall-clock time.  No timezone conversion is ever applied."""

    hour: int
    minute: int = 0
    second: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be in [0, 23], got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be in [0, 59], got {self.minute}")
        if not 0 <= self.second <= 59:
            raise ValueError(f"second must be in [0, 59], got {self.second}")

    @classmethod
    def parse(cls, text: str) -> TimeOfDay:
        """Parse ``"HH:MM"`` or ``"HH:MM:SS"``.

        Raises ``ValueError`` when the text is malformed or out of range.
        """
        match = _TIME_RE.match(text.strip())
        if match is None:
            raise ValueError(f"time must be HH:MM or HH:MM:SS, got {text!r}")
        hour, minute, second = match.groups()
        return cls(int(hour), int(minute), int(second or 0))

    @property
    def minutes_since_midnight(self) -> int:
        return self.hour * 60 + self.minute

    def to_wire(self) -> str:
        """``"HH:MM:SS"`` as the scheduling API expects."""
        return f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"

    def replace_hour(self, hour: int) -> TimeOfDay:
        return TimeOfDay(hour, self.minute, self.second)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


# ---------------------------------------------------------------------------
# Monthly modes
# ---------------------------------------------------------------------------

MonthDay = Union[int, MonthDayToken]


@dataclass(frozen=True)
class OnDay:
    """Monthly "On Day" mode: explicit days of month and/or ``LastDay``."""

    days: frozenset[MonthDay]

    def sorted_days(self) -> list[MonthDay]:
        """Numeric days ascending, ``LastDay`` last."""
        numeric = sorted(d for d in self.days if isinstance(d, int))
        tokens = [d for d in self.days if isinstance(d, MonthDayToken)]
        return [*numeric, *tokens]


@dataclass(frozen=True)
class OnOrdinalWeekday:
    """Monthly "On [Ordinal] [Weekday]" mode, e.g. the second Monday."""

    ordinal: Ordinal
    weekday: Weekday


MonthlyMode = Union[OnDay, OnOrdinalWeekday]


# ---------------------------------------------------------------------------
# Schedule variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HourlySchedule:
    """Fires every hour from ``start_time`` through ``end_time``.

    An empty ``week_days`` selection means every day of the week.
    """

    frequency: ClassVar[Frequency] = Frequency.HOURLY

    start_time: TimeOfDay
    end_time: TimeOfDay
    week_days: frozenset[Weekday] = field(default_factory=frozenset)

    @property
    def interval_hours(self) -> int:
        return 1


@dataclass(frozen=True)
class DailySchedule:
    """Fires once a day, or every ``interval_hours`` within a window.

    ``end_time`` is present exactly when ``interval_hours < 24``.  An empty
    ``week_days`` selection means every day of the week.
    """

    frequency: ClassVar[Frequency] = Frequency.DAILY

    start_time: TimeOfDay
    interval_hours: int = 24
    end_time: TimeOfDay | None = None
    week_days: frozenset[Weekday] = field(default_factory=frozenset)


@dataclass(frozen=True)
class WeeklySchedule:
    """Fires once at ``start_time`` on each selected weekday."""

    frequency: ClassVar[Frequency] = Frequency.WEEKLY

    start_time: TimeOfDay
    week_days: frozenset[Weekday]


@dataclass(frozen=True)
class MonthlySchedule:
    """Fires once at ``start_time`` on the days selected by ``mode``."""

    frequency: ClassVar[Frequency] = Frequency.MONTHLY

    start_time: TimeOfDay
    mode: MonthlyMode


Schedule = Union[HourlySchedule, DailySchedule, WeeklySchedule, MonthlySchedule]

SCHEDULE_TYPES: tuple[type, ...] = (
    HourlySchedule,
    DailySchedule,
    WeeklySchedule,
    MonthlySchedule,
)
