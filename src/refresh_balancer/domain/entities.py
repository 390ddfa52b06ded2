"""Domain entities for the refresh balancer.

``RefreshTask`` has identity (the extract refresh task id) and carries the
two engine-derived fields every aggregation needs: ``run_hours`` and
``effective_week_days``.  Both are computed once, on construction, from the
schedule; a task is never mutated afterwards.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

from .enums import ItemType, Weekday
from .occurrence import effective_weekdays, expand_run_hours, format_hour, task_days
from .values import HourlySchedule, Schedule

# ---------------------------------------------------------------------------
# RefreshTask entity
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RefreshTask:
    """A scheduled extract refresh for one workbook or data source.

    Attributes
    ----------
    id:
        Extract refresh task id.
    item_id:
        Id of the workbook or data source being refreshed.
    item_type:
        ``ItemType.WORKBOOK`` or ``ItemType.DATASOURCE``.
    schedule:
        The validated recurring schedule.
    consecutive_failures:
        Number of refreshes that have failed in a row.
    priority:
        Platform priority (lower runs first); ``None`` when unknown.
    next_run_at:
        Next run timestamp as reported by the platform, passed through as-is.
    run_hours:
        Derived.  Sorted hours of day the schedule fires at.
    effective_week_days:
        Derived.  Weekdays the schedule can fire on, "all days" resolved.
    """

    id: str
    item_id: str
    item_type: ItemType
    schedule: Schedule
    item_name: str = ""
    project_name: str = ""
    consecutive_failures: int = 0
    priority: int | None = None
    next_run_at: str | None = None
    last_failure_message: str | None = None
    run_hours: tuple[int, ...] = field(init=False, default=())
    effective_week_days: frozenset[Weekday] = field(init=False, default=frozenset())

    def __post_init__(self) -> None:
        if self.consecutive_failures < 0:
            raise ValueError(
                f"consecutive_failures must be >= 0, got {self.consecutive_failures}"
            )
        object.__setattr__(self, "run_hours", expand_run_hours(self.schedule))
        object.__setattr__(self, "effective_week_days", effective_weekdays(self.schedule))

    # -- derived views ----------------------------------------------------------

    @property
    def is_hourly(self) -> bool:
        return isinstance(self.schedule, HourlySchedule)

    @property
    def task_days(self) -> int:
        return task_days(self.schedule)

    @property
    def start_hour(self) -> int:
        return self.schedule.start_time.hour

    @property
    def hourly_window(self) -> str | None:
        """``"7 AM - 10 PM"`` for Hourly tasks, ``None`` otherwise."""
        if not self.is_hourly or not self.run_hours:
            return None
        return f"{format_hour(min(self.run_hours))} - {format_hour(max(self.run_hours))}"

    @property
    def display_name(self) -> str:
        if self.item_name:
            return self.item_name
        return f"ID: {self.item_id[:8]}..." if self.item_id else "Unknown"

    def with_schedule(self, schedule: Schedule) -> RefreshTask:
        """Return a copy of this task with *schedule* and re-derived fields."""
        return dataclasses.replace(self, schedule=schedule)
