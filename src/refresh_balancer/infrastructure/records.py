"""Adapters from the remote scheduling API's JSON to raw task records.

The API lists extract-refresh tasks as::

    {
        "extractRefresh": {
            "id": "...",
            "priority": 50,
            "consecutiveFailedCount": 0,
            "schedule": {
                "frequency": "Daily",
                "nextRunAt": "...",
                "frequencyDetails": {
                    "start": "06:00:00",
                    "end": "18:00:00",
                    "intervals": {"interval": [{"hours": "4"}, {"weekDay": "Monday"}]},
                },
            },
            "workbook": {"id": "..."},
        },
        "resolved_item": {"name": "...", "project": "..."},
    }

``intervals.interval`` is a single object when there is only one interval
and a list otherwise.  The functions here flatten that into the raw record
shape :func:`~refresh_balancer.services.tasks.load_tasks` consumes.  They do
not validate; that stays with ``parse_schedule``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from refresh_balancer.domain.enums import Ordinal
from refresh_balancer.services.validation import DAILY_INTERVALS

_ORDINAL_TOKENS = frozenset(ordinal.value for ordinal in Ordinal)


def interval_list(intervals: Any) -> list[Mapping[str, Any]]:
    """The ``interval`` entries of *intervals*, always as a list."""
    if not isinstance(intervals, Mapping):
        return []
    items = intervals.get("interval") or []
    if isinstance(items, Mapping):
        return [items]
    return [item for item in items if isinstance(item, Mapping)]


def _hour_interval(items: Iterable[Mapping[str, Any]]) -> int | None:
    for item in items:
        if item.get("hours") is not None:
            try:
                return int(item["hours"])
            except (TypeError, ValueError):
                return None
        if item.get("minutes") is not None:
            # 15/30-minute schedules count once per hour
            return 1
    return None


def raw_fields_from_api_schedule(schedule: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten an API ``schedule`` object into raw schedule fields.

    A Daily schedule with a missing or unsupported interval is read as once
    a day (interval 24), and its end time is then dropped.
    """
    details = schedule.get("frequencyDetails") or {}
    items = interval_list(details.get("intervals"))
    frequency = schedule.get("frequency")

    raw: dict[str, Any] = {"frequency": frequency, "startTime": details.get("start")}
    end = details.get("end")
    interval = _hour_interval(items)
    kind = frequency.lower() if isinstance(frequency, str) else ""

    if kind == "hourly":
        raw["endTime"] = end
        raw["intervalHours"] = interval if interval is not None else 1
    elif kind == "daily":
        hours = interval if interval in DAILY_INTERVALS else 24
        if hours < 24 and not end:
            hours = 24
        raw["intervalHours"] = hours
        if hours < 24:
            raw["endTime"] = end
    elif end:
        raw["endTime"] = end

    week_days: list[str] = []
    month_days: list[Any] = []
    for item in items:
        month_day = item.get("monthDay")
        week_day = item.get("weekDay")
        if month_day is not None and week_day is not None and month_day in _ORDINAL_TOKENS:
            raw["monthlyOrdinal"] = month_day
            raw["monthlyWeekDay"] = week_day
        elif month_day is not None:
            text = str(month_day)
            month_days.append(int(text) if text.isdigit() else text)
        elif week_day is not None:
            week_days.append(week_day)

    if week_days:
        raw["weekDays"] = week_days
    if month_days:
        raw["monthDays"] = month_days
    return raw


def record_from_api_task(task: Mapping[str, Any]) -> dict[str, Any]:
    """Convert one API task listing entry into a raw task record."""
    refresh = task.get("extractRefresh") or {}
    schedule = refresh.get("schedule") or {}
    workbook = refresh.get("workbook") or {}
    datasource = refresh.get("datasource") or {}
    resolved = task.get("resolved_item") or {}

    item_id = workbook.get("id") or datasource.get("id") or "unknown"
    return {
        "id": refresh.get("id"),
        "itemId": item_id,
        "itemType": "workbook" if workbook.get("id") else "datasource",
        "schedule": raw_fields_from_api_schedule(schedule),
        "consecutiveFailures": refresh.get("consecutiveFailedCount") or 0,
        "priority": refresh.get("priority"),
        "nextRunAt": schedule.get("nextRunAt"),
        "itemName": resolved.get("name") or "",
        "projectName": resolved.get("project") or "",
        "lastFailureMessage": refresh.get("lastFailureMessage"),
    }


def records_from_api_tasks(tasks: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [record_from_api_task(task) for task in tasks]
