"""Occurrence engine: which hours and which dates a schedule fires on.

Every function here is pure and total over well-typed ``Schedule`` values.
``schedule_fires_on_date`` is the single date-membership predicate; calendar
aggregation, drill-down filters and simulation all go through it.
"""

from __future__ import annotations

import calendar
import datetime

from .enums import ALL_WEEKDAYS, MonthDayToken, Weekday
from .values import (
    DailySchedule,
    HourlySchedule,
    MonthlySchedule,
    OnDay,
    OnOrdinalWeekday,
    Schedule,
    WeeklySchedule,
)

MINUTES_PER_DAY = 24 * 60

# Monthly schedules are weighted as if they ran on four weekdays.  This is a
# fast-path approximation; exact per-date counts come from the monthly calendar.
MONTHLY_TASK_DAYS_APPROXIMATION = 4


# ---------------------------------------------------------------------------
# Hours
# ---------------------------------------------------------------------------

def expand_run_hours(schedule: Schedule) -> tuple[int, ...]:
    """Return the sorted, de-duplicated hours of day *schedule* fires at.

    Hourly schedules and Daily schedules with a sub-day interval walk from the
    start time to the end time in steps of ``interval_hours``, wrapping past
    midnight when the window crosses it (22:00 to 02:00 every 2h gives
    ``(0, 2, 22)``).  Every other schedule fires once, at its start hour.
    """
    if isinstance(schedule, HourlySchedule):
        return _walk_window(schedule.start_time.minutes_since_midnight,
                            schedule.end_time.minutes_since_midnight, 1)
    if (
        isinstance(schedule, DailySchedule)
        and schedule.interval_hours < 24
        and schedule.end_time is not None
    ):
        return _walk_window(schedule.start_time.minutes_since_midnight,
                            schedule.end_time.minutes_since_midnight,
                            schedule.interval_hours)
    return (schedule.start_time.hour,)


def _walk_window(start: int, end: int, interval_hours: int) -> tuple[int, ...]:
    if start > end:
        end += MINUTES_PER_DAY
    step = interval_hours * 60
    hours = {(minute // 60) % 24 for minute in range(start, end + 1, step)}
    return tuple(sorted(hours))


def format_hour(hour: int) -> str:
    """Render an hour of day in 12-hour form: ``0 -> "12 AM"``, ``13 -> "1 PM"``."""
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be in [0, 23], got {hour}")
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


# ---------------------------------------------------------------------------
# Weekdays
# ---------------------------------------------------------------------------

def effective_weekdays(schedule: Schedule) -> frozenset[Weekday]:
    """Weekdays on which *schedule* can fire.

    Hourly/Daily: the selection, or all seven when empty.  Weekly: the
    selection.  Monthly On Day: all seven.  Monthly ordinal: its weekday.
    """
    if isinstance(schedule, (HourlySchedule, DailySchedule)):
        return schedule.week_days or ALL_WEEKDAYS
    if isinstance(schedule, WeeklySchedule):
        return schedule.week_days
    if isinstance(schedule.mode, OnOrdinalWeekday):
        return frozenset({schedule.mode.weekday})
    return ALL_WEEKDAYS


def task_days(schedule: Schedule) -> int:
    """Weight of *schedule* in weekday-hour slots per run hour."""
    if isinstance(schedule, MonthlySchedule):
        return MONTHLY_TASK_DAYS_APPROXIMATION
    return len(schedule.week_days) or 7


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def days_in_month(year: int, month: int) -> int:
    """Number of days in *month* of *year*, leap-year aware."""
    return calendar.monthrange(year, month)[1]


def first_weekday_of_month(year: int, month: int) -> Weekday:
    return Weekday.from_date(datetime.date(year, month, 1))


def schedule_fires_on_date(schedule: Schedule, day: datetime.date) -> bool:
    """Return ``True`` when *schedule* fires at least once on *day*."""
    if not isinstance(schedule, MonthlySchedule):
        return Weekday.from_date(day) in effective_weekdays(schedule)

    month_length = days_in_month(day.year, day.month)
    mode = schedule.mode
    if isinstance(mode, OnDay):
        if day.day in mode.days:
            return True
        return MonthDayToken.LAST_DAY in mode.days and day.day == month_length

    if Weekday.from_date(day) is not mode.weekday:
        return False
    target = mode.ordinal.occurrence
    if target is None:
        return day.day + 7 > month_length
    return (day.day - 1) // 7 + 1 == target


def fire_dates(schedule: Schedule, year: int, month: int) -> list[datetime.date]:
    """All dates of (*year*, *month*) on which *schedule* fires, ascending."""
    return [
        datetime.date(year, month, day_number)
        for day_number in range(1, days_in_month(year, month) + 1)
        if schedule_fires_on_date(schedule, datetime.date(year, month, day_number))
    ]
