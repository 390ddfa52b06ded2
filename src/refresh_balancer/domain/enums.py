"""Domain enumerations for the refresh balancer.

These enums capture the fixed vocabularies used across the domain layer:
schedule frequencies, weekdays, monthly ordinals, item types, health bands
and recommendation severities.

``Weekday`` is the single internal weekday representation (Monday first).
Index translation from day names, Python dates and Sunday-first platform
indices happens only in its ``from_*`` constructors.
"""

from __future__ import annotations

import datetime
from enum import Enum


class Frequency(Enum):
    """Recurrence kind of an extract refresh schedule (wire names)."""

    HOURLY = "Hourly"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


class Weekday(Enum):
    """Day of week, Monday first.  Values are the wire day names."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @property
    def index(self) -> int:
        """Monday-first index: 0=Monday ... 6=Sunday."""
        return _MONDAY_FIRST.index(self)

    @property
    def short_label(self) -> str:
        """Three-letter label used for heatmap rows, e.g. ``"Mon"``."""
        return self.value[:3]

    @classmethod
    def from_name(cls, name: str) -> Weekday:
        """Translate a wire day name (``"Monday"``) into a ``Weekday``.

        Raises ``ValueError`` for unknown names.
        """
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown weekday name: {name!r}") from None

    @classmethod
    def from_index(cls, index: int) -> Weekday:
        """Translate a Monday-first index (0..6)."""
        if not 0 <= index <= 6:
            raise ValueError(f"weekday index must be in [0, 6], got {index}")
        return _MONDAY_FIRST[index]

    @classmethod
    def from_sunday_first_index(cls, index: int) -> Weekday:
        """Translate a Sunday-first platform index (0=Sunday ... 6=Saturday)."""
        if not 0 <= index <= 6:
            raise ValueError(f"weekday index must be in [0, 6], got {index}")
        return _MONDAY_FIRST[(index + 6) % 7]

    @classmethod
    def from_date(cls, day: datetime.date) -> Weekday:
        """Weekday of a calendar date."""
        return _MONDAY_FIRST[day.weekday()]


_MONDAY_FIRST: tuple[Weekday, ...] = tuple(Weekday)

ALL_WEEKDAYS: frozenset[Weekday] = frozenset(Weekday)


class Ordinal(Enum):
    """Which occurrence of a weekday within a month a Monthly schedule targets."""

    FIRST = "First"
    SECOND = "Second"
    THIRD = "Third"
    FOURTH = "Fourth"
    FIFTH = "Fifth"
    LAST = "Last"

    @property
    def occurrence(self) -> int | None:
        """1..5 for ``FIRST``..``FIFTH``; ``None`` for ``LAST``."""
        return _OCCURRENCES.get(self)


_OCCURRENCES: dict[Ordinal, int] = {
    Ordinal.FIRST: 1,
    Ordinal.SECOND: 2,
    Ordinal.THIRD: 3,
    Ordinal.FOURTH: 4,
    Ordinal.FIFTH: 5,
}


class MonthDayToken(Enum):
    """Symbolic day-of-month for Monthly "On Day" schedules.

    Distinct from ``Ordinal.LAST``: ``LastDay`` is a day-of-month selection,
    ``Last`` is an ordinal for the weekday mode.
    """

    LAST_DAY = "LastDay"


LAST_DAY = MonthDayToken.LAST_DAY


class ItemType(Enum):
    """Kind of content item an extract refresh task belongs to."""

    WORKBOOK = "workbook"
    DATASOURCE = "datasource"


class HealthBand(Enum):
    """Traffic-light rating of a health metric."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class Severity(Enum):
    """Severity of a load-balancing recommendation."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUGGESTION = "suggestion"
    SUCCESS = "success"
