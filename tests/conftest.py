"""Shared fixtures for the refresh balancer test suite."""

from __future__ import annotations

from typing import Any

import pytest

from refresh_balancer.domain.entities import RefreshTask
from refresh_balancer.domain.enums import ItemType, Ordinal, Weekday
from refresh_balancer.domain.values import (
    DailySchedule,
    HourlySchedule,
    MonthlySchedule,
    OnOrdinalWeekday,
    TimeOfDay,
    WeeklySchedule,
)

# ---------------------------------------------------------------------------
# Schedule fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def daily_8am() -> DailySchedule:
    """Once a day at 08:00, every day."""
    return DailySchedule(start_time=TimeOfDay(8, 0))


@pytest.fixture
def hourly_7_to_10() -> HourlySchedule:
    """Every hour 07:00 through 10:00, every day."""
    return HourlySchedule(start_time=TimeOfDay(7, 0), end_time=TimeOfDay(10, 0))


@pytest.fixture
def weekly_mon_wed() -> WeeklySchedule:
    return WeeklySchedule(
        start_time=TimeOfDay(6, 30),
        week_days=frozenset({Weekday.MONDAY, Weekday.WEDNESDAY}),
    )


@pytest.fixture
def second_monday() -> MonthlySchedule:
    return MonthlySchedule(
        start_time=TimeOfDay(11, 5),
        mode=OnOrdinalWeekday(Ordinal.SECOND, Weekday.MONDAY),
    )


# ---------------------------------------------------------------------------
# Task fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_task():
    """Factory building a ``RefreshTask`` around a schedule."""

    def _make(schedule: Any, task_id: str = "t1", **kwargs: Any) -> RefreshTask:
        kwargs.setdefault("item_id", f"item-{task_id}")
        kwargs.setdefault("item_type", ItemType.WORKBOOK)
        return RefreshTask(id=task_id, schedule=schedule, **kwargs)

    return _make


@pytest.fixture
def raw_records() -> list[dict[str, Any]]:
    """A small mixed batch of raw task records."""
    return [
        {
            "id": "daily-8",
            "itemId": "wb-sales",
            "itemType": "workbook",
            "itemName": "Sales Dashboard",
            "projectName": "Finance",
            "schedule": {"frequency": "Daily", "startTime": "08:00", "intervalHours": 24},
            "consecutiveFailures": 2,
            "priority": 50,
        },
        {
            "id": "hourly-7-10",
            "itemId": "ds-orders",
            "itemType": "datasource",
            "itemName": "Orders Extract",
            "projectName": "Operations",
            "schedule": {
                "frequency": "Hourly",
                "startTime": "07:00",
                "endTime": "10:00",
                "intervalHours": 1,
            },
        },
        {
            "id": "weekly-mon",
            "itemId": "wb-hr",
            "itemType": "workbook",
            "itemName": "Headcount",
            "projectName": "HR",
            "schedule": {"frequency": "Weekly", "startTime": "02:00", "weekDays": ["Monday"]},
        },
    ]
