"""Aggregation engine: load-distribution views over a set of tasks.

Counts are occurrence slots, not tasks.  A task active on five weekdays at
two distinct run hours contributes ten to the hourly distribution.  Every
builder is purely additive, so results do not depend on task order.

Classes
-------
HourlyDistribution
    24 occurrence counts, one per hour of day (re-exported).
Heatmap / HeatmapCell
    Weekday x hour occurrence grid (Monday = row 0).
MonthlyCalendar
    Per-date run counts for one calendar month.
LoadComposition
    Fixed (Hourly) runs vs moveable runs.
"""

from __future__ import annotations

import calendar
import datetime
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from refresh_balancer.domain.distribution import HOURS_PER_DAY, HourlyDistribution
from refresh_balancer.domain.entities import RefreshTask
from refresh_balancer.domain.enums import ItemType, Weekday
from refresh_balancer.domain.occurrence import (
    days_in_month,
    first_weekday_of_month,
    schedule_fires_on_date,
)

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Hourly distribution                                                   #
# ===================================================================== #


def build_hourly_distribution(tasks: Iterable[RefreshTask]) -> HourlyDistribution:
    """Sum occurrence slots per hour across *tasks*."""
    counts = [0] * HOURS_PER_DAY
    for task in tasks:
        days = len(task.effective_week_days)
        for hour in task.run_hours:
            counts[hour] += days
    logger.debug("Hourly distribution built: %d occurrence slots", sum(counts))
    return HourlyDistribution(tuple(counts))


# ===================================================================== #
#  Weekly heatmap                                                        #
# ===================================================================== #


@dataclass(frozen=True)
class HeatmapCell:
    """One (weekday, hour) cell.  ``weekday_index`` is Monday-first (0..6)."""

    weekday_index: int
    hour: int
    count: int


@dataclass(frozen=True)
class Heatmap:
    """Weekday x hour occurrence grid, row-major (Monday 00:00 first)."""

    cells: tuple[HeatmapCell, ...]
    max_value: int
    days: tuple[str, ...] = tuple(day.short_label for day in Weekday)

    def count(self, weekday: Weekday, hour: int) -> int:
        return self.cells[weekday.index * HOURS_PER_DAY + hour].count

    def as_grid(self) -> np.ndarray:
        """7 x 24 array of counts."""
        return np.array([cell.count for cell in self.cells], dtype=int).reshape(7, HOURS_PER_DAY)


def build_heatmap(tasks: Iterable[RefreshTask]) -> Heatmap:
    """Count occurrence slots per (weekday, hour)."""
    grid = [[0] * HOURS_PER_DAY for _ in range(7)]
    for task in tasks:
        for weekday in task.effective_week_days:
            row = grid[weekday.index]
            for hour in task.run_hours:
                row[hour] += 1

    cells = tuple(
        HeatmapCell(weekday_index=day, hour=hour, count=grid[day][hour])
        for day in range(7)
        for hour in range(HOURS_PER_DAY)
    )
    return Heatmap(cells=cells, max_value=max(cell.count for cell in cells))


# ===================================================================== #
#  Monthly calendar                                                      #
# ===================================================================== #


@dataclass(frozen=True)
class MonthlyCalendar:
    """Run counts for every date of one month.

    Attributes
    ----------
    first_weekday:
        Monday-first index (0..6) of the month's first day, for grid layout.
    by_date:
        ``{date: runs}`` for every date of the month, zero included.
    """

    year: int
    month: int
    month_name: str
    days_in_month: int
    first_weekday: int
    by_date: dict[datetime.date, int] = field(default_factory=dict)

    def count_on(self, day: datetime.date) -> int:
        return self.by_date.get(day, 0)

    def nonzero_dates(self) -> list[datetime.date]:
        return [day for day, count in sorted(self.by_date.items()) if count > 0]

    @property
    def total(self) -> int:
        return sum(self.by_date.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "month_name": self.month_name,
            "days_in_month": self.days_in_month,
            "first_weekday": self.first_weekday,
            "by_date": {day.isoformat(): count for day, count in sorted(self.by_date.items())},
        }


def build_monthly_calendar(
    tasks: Iterable[RefreshTask], year: int, month: int
) -> MonthlyCalendar:
    """For each date of the month, add ``len(run_hours)`` of every task firing on it."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in [1, 12], got {month}")
    length = days_in_month(year, month)
    dates = [datetime.date(year, month, day) for day in range(1, length + 1)]
    by_date = dict.fromkeys(dates, 0)

    for task in tasks:
        runs = len(task.run_hours)
        for day in dates:
            if schedule_fires_on_date(task.schedule, day):
                by_date[day] += runs

    return MonthlyCalendar(
        year=year,
        month=month,
        month_name=calendar.month_name[month],
        days_in_month=length,
        first_weekday=first_weekday_of_month(year, month).index,
        by_date=by_date,
    )


# ===================================================================== #
#  Supplementary views                                                   #
# ===================================================================== #


def build_daily_totals(tasks: Iterable[RefreshTask]) -> dict[Weekday, int]:
    """Runs per weekday, Monday first."""
    totals = dict.fromkeys(Weekday, 0)
    for task in tasks:
        for weekday in task.effective_week_days:
            totals[weekday] += len(task.run_hours)
    return totals


@dataclass(frozen=True)
class LoadComposition:
    """Split of total runs into fixed Hourly runs and moveable runs."""

    total_task_runs: int
    hourly_fixed_runs: int
    moveable_runs: int
    hourly_by_hour: tuple[int, ...] = (0,) * HOURS_PER_DAY

    def fixed_share(self, hour: int, distribution: HourlyDistribution) -> float:
        """Fraction of *hour*'s load that comes from Hourly schedules."""
        if distribution[hour] == 0:
            return 0.0
        return self.hourly_by_hour[hour] / distribution[hour]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_task_runs": self.total_task_runs,
            "hourly_fixed_runs": self.hourly_fixed_runs,
            "moveable_runs": self.moveable_runs,
            "hourly_by_hour": dict(enumerate(self.hourly_by_hour)),
        }


def build_load_composition(tasks: Iterable[RefreshTask]) -> LoadComposition:
    tasks = list(tasks)
    total = build_hourly_distribution(tasks)
    fixed = build_hourly_distribution(task for task in tasks if task.is_hourly)
    return LoadComposition(
        total_task_runs=total.total,
        hourly_fixed_runs=fixed.total,
        moveable_runs=total.total - fixed.total,
        hourly_by_hour=fixed.counts,
    )


def tasks_by_hour(tasks: Iterable[RefreshTask]) -> dict[int, list[RefreshTask]]:
    """Tasks indexed by each of their run hours (every hour key present)."""
    index: dict[int, list[RefreshTask]] = {hour: [] for hour in range(HOURS_PER_DAY)}
    for task in tasks:
        for hour in task.run_hours:
            index[hour].append(task)
    return index


def tasks_on_date(tasks: Iterable[RefreshTask], day: datetime.date) -> list[RefreshTask]:
    """Tasks whose schedule fires on *day*."""
    return [task for task in tasks if schedule_fires_on_date(task.schedule, day)]


def tasks_on_weekday(tasks: Iterable[RefreshTask], weekday: Weekday) -> list[RefreshTask]:
    return [task for task in tasks if weekday in task.effective_week_days]


def filter_tasks(
    tasks: Iterable[RefreshTask],
    search: str = "",
    project: str | None = None,
    item_type: ItemType | None = None,
) -> list[RefreshTask]:
    """Filter by case-insensitive name/project search, exact project and item type."""
    needle = search.strip().lower()
    matched: list[RefreshTask] = []
    for task in tasks:
        if needle and needle not in task.item_name.lower() and needle not in task.project_name.lower():
            continue
        if project is not None and task.project_name != project:
            continue
        if item_type is not None and task.item_type is not item_type:
            continue
        matched.append(task)
    return matched


def failing_tasks(tasks: Iterable[RefreshTask], limit: int | None = None) -> list[RefreshTask]:
    """Tasks with at least one consecutive failure, most failures first."""
    failing = sorted(
        (task for task in tasks if task.consecutive_failures > 0),
        key=lambda task: -task.consecutive_failures,
    )
    return failing if limit is None else failing[:limit]
