"""Serialization utilities for the refresh balancer.

Provides ``to_dict`` conversion for the schedule model, tasks, health
metrics, impact previews and whole analysis results, plus the reverse
conversion for schedules.  Every ``to_dict`` output is JSON-serializable (no
numpy, no sets, no dates).

Schedules serialize to the same camelCase raw fields
:func:`~refresh_balancer.services.validation.parse_schedule` reads, so
``schedule_from_raw(schedule_to_raw(s)) == s`` for every legal schedule.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import yaml

from refresh_balancer.domain.entities import RefreshTask
from refresh_balancer.domain.enums import MonthDayToken, Weekday
from refresh_balancer.domain.values import (
    DailySchedule,
    HourlySchedule,
    MonthlySchedule,
    OnDay,
    Schedule,
    WeeklySchedule,
)
from refresh_balancer.infrastructure.config import AnalyzerConfig
from refresh_balancer.measurement.report import HealthMetrics
from refresh_balancer.services.aggregation import Heatmap, LoadComposition, MonthlyCalendar
from refresh_balancer.services.analysis import AnalysisResult
from refresh_balancer.services.recommendations import Recommendation
from refresh_balancer.services.simulation import ImpactPreview
from refresh_balancer.services.validation import parse_schedule

logger = logging.getLogger(__name__)


# =========================================================================== #
#  Generic helpers                                                             #
# =========================================================================== #

def _weekday_names(days: frozenset[Weekday]) -> list[str]:
    """Day names in Monday-first order."""
    return [day.value for day in sorted(days, key=lambda d: d.index)]


def _by_hour(counts: tuple[int, ...]) -> dict[str, int]:
    return {str(hour): count for hour, count in enumerate(counts)}


# =========================================================================== #
#  Schedules                                                                   #
# =========================================================================== #

def schedule_to_raw(schedule: Schedule) -> dict[str, Any]:
    """Render *schedule* as raw camelCase fields."""
    raw: dict[str, Any] = {
        "frequency": schedule.frequency.value,
        "startTime": schedule.start_time.to_wire(),
    }
    if isinstance(schedule, HourlySchedule):
        raw["endTime"] = schedule.end_time.to_wire()
        raw["intervalHours"] = 1
        raw["weekDays"] = _weekday_names(schedule.week_days)
    elif isinstance(schedule, DailySchedule):
        if schedule.end_time is not None:
            raw["endTime"] = schedule.end_time.to_wire()
        raw["intervalHours"] = schedule.interval_hours
        raw["weekDays"] = _weekday_names(schedule.week_days)
    elif isinstance(schedule, WeeklySchedule):
        raw["weekDays"] = _weekday_names(schedule.week_days)
    elif isinstance(schedule, MonthlySchedule):
        if isinstance(schedule.mode, OnDay):
            raw["monthDays"] = [
                day.value if isinstance(day, MonthDayToken) else day
                for day in schedule.mode.sorted_days()
            ]
        else:
            raw["monthlyOrdinal"] = schedule.mode.ordinal.value
            raw["monthlyWeekDay"] = schedule.mode.weekday.value
    else:
        raise TypeError(f"Unsupported schedule type: {type(schedule).__name__}")
    return raw


def schedule_from_raw(data: Mapping[str, Any]) -> Schedule:
    """Inverse of :func:`schedule_to_raw`; raises ``ValidationError``."""
    return parse_schedule(data)


# =========================================================================== #
#  Tasks                                                                       #
# =========================================================================== #

def task_to_dict(task: RefreshTask) -> dict[str, Any]:
    return {
        "id": task.id,
        "item_id": task.item_id,
        "item_type": task.item_type.value,
        "item_name": task.display_name,
        "project_name": task.project_name,
        "schedule": schedule_to_raw(task.schedule),
        "run_hours": list(task.run_hours),
        "days": _weekday_names(task.effective_week_days),
        "task_days": task.task_days,
        "is_hourly": task.is_hourly,
        "hourly_window": task.hourly_window,
        "consecutive_failures": task.consecutive_failures,
        "priority": task.priority,
        "next_run_at": task.next_run_at,
        "last_failure_message": task.last_failure_message,
    }


# =========================================================================== #
#  Views and metrics                                                           #
# =========================================================================== #

def heatmap_to_dict(heatmap: Heatmap) -> dict[str, Any]:
    return {
        "data": [
            {"x": cell.hour, "y": cell.weekday_index, "v": cell.count}
            for cell in heatmap.cells
        ],
        "days": list(heatmap.days),
        "max_value": heatmap.max_value,
    }


def calendar_to_dict(calendar: MonthlyCalendar) -> dict[str, Any]:
    return calendar.to_dict()


def load_composition_to_dict(composition: LoadComposition) -> dict[str, Any]:
    data = composition.to_dict()
    data["hourly_by_hour"] = _by_hour(composition.hourly_by_hour)
    return data


def health_metrics_to_dict(health: HealthMetrics) -> dict[str, Any]:
    return health.to_dict()


def recommendation_to_dict(rec: Recommendation) -> dict[str, Any]:
    return {
        "type": rec.severity.value,
        "title": rec.title,
        "message": rec.message,
        "action": rec.action,
        "affected_items": [
            {"name": item.name, "type": item.item_type.value, "project": item.project_name}
            for item in rec.affected_items
        ],
    }


def impact_preview_to_dict(preview: ImpactPreview) -> dict[str, Any]:
    return {
        "edit_count": preview.edit_count,
        "current_dist": _by_hour(preview.current_dist.counts),
        "proposed_dist": _by_hour(preview.proposed_dist.counts),
        "current_metrics": health_metrics_to_dict(preview.current_metrics),
        "proposed_metrics": health_metrics_to_dict(preview.proposed_metrics),
        "deltas": preview.deltas.to_dict(),
        "summary": preview.describe(),
    }


def analysis_result_to_dict(result: AnalysisResult) -> dict[str, Any]:
    distribution = result.hourly_distribution
    failing = sorted(
        (t for t in result.task_details if t.consecutive_failures > 0),
        key=lambda t: -t.consecutive_failures,
    )
    return {
        "hourly": {
            "by_hour": _by_hour(distribution.counts),
            "total": distribution.total,
            "average_per_hour": round(distribution.mean, 2),
            "peak_hours": list(result.peak_hours),
            "quiet_hours": list(result.quiet_hours),
        },
        "daily": {day.value: count for day, count in result.daily_totals.items()},
        "heatmap": heatmap_to_dict(result.heatmap),
        "calendar": calendar_to_dict(result.monthly_calendar),
        "health": health_metrics_to_dict(result.health_metrics),
        "load_composition": (
            load_composition_to_dict(result.load_composition)
            if result.load_composition is not None
            else None
        ),
        "recommendations": [recommendation_to_dict(r) for r in result.recommendations],
        "tasks": {
            "total": len(result.task_details),
            "details": [task_to_dict(t) for t in result.task_details],
            "failing": [task_to_dict(t) for t in failing],
        },
        "rejected": [
            {"id": record_id, **error.to_dict()} for record_id, error in result.rejected
        ],
        "skipped": list(result.skipped),
    }


def config_to_dict(cfg: AnalyzerConfig) -> dict[str, Any]:
    return cfg.to_dict()


# =========================================================================== #
#  Dispatch                                                                    #
# =========================================================================== #

_SERIALIZERS: dict[type, Any] = {
    HourlySchedule: schedule_to_raw,
    DailySchedule: schedule_to_raw,
    WeeklySchedule: schedule_to_raw,
    MonthlySchedule: schedule_to_raw,
    RefreshTask: task_to_dict,
    Heatmap: heatmap_to_dict,
    MonthlyCalendar: calendar_to_dict,
    LoadComposition: load_composition_to_dict,
    HealthMetrics: health_metrics_to_dict,
    Recommendation: recommendation_to_dict,
    ImpactPreview: impact_preview_to_dict,
    AnalysisResult: analysis_result_to_dict,
    AnalyzerConfig: config_to_dict,
}


def serialize(obj: Any) -> dict[str, Any]:
    """Serialize a known domain/service object to a dict.

    Raises ``TypeError`` for unsupported types.
    """
    to_fn = _SERIALIZERS.get(type(obj))
    if to_fn is None:
        raise TypeError(f"No serializer registered for {type(obj).__name__}")
    return to_fn(obj)


# =========================================================================== #
#  JSON / YAML helpers                                                         #
# =========================================================================== #

def to_json(obj: Any, *, indent: int | None = 2) -> str:
    """Serialize a known object to a JSON string."""
    return json.dumps(serialize(obj), indent=indent, default=str)


def to_yaml(obj: Any) -> str:
    """Serialize a known object to a YAML string."""
    return yaml.safe_dump(serialize(obj), default_flow_style=False, sort_keys=False)
