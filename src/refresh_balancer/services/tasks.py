"""Raw task records to ``RefreshTask`` entities.

A raw record is the collaborator-supplied shape::

    {
        "id": "...", "itemId": "...", "itemType": "workbook",
        "schedule": {...raw schedule fields...},
        "consecutiveFailures": 0, "priority": 50, "nextRunAt": "...",
        "itemName": "...", "projectName": "...", "lastFailureMessage": None,
    }

This is the only boundary where :func:`parse_schedule` runs on task data.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from refresh_balancer.domain.entities import RefreshTask
from refresh_balancer.domain.enums import ItemType
from refresh_balancer.domain.exceptions import ValidationError
from refresh_balancer.services.validation import parse_schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskLoadResult:
    """Outcome of loading a batch of raw records.

    Attributes
    ----------
    tasks:
        Records that parsed into legal tasks, in input order.
    rejected:
        ``(record_id, error)`` for records that failed validation.
    skipped:
        Ids of records whose start time was missing or unparseable.  These
        are left out of every aggregate.
    """

    tasks: tuple[RefreshTask, ...] = ()
    rejected: tuple[tuple[str, ValidationError], ...] = ()
    skipped: tuple[str, ...] = ()

    @property
    def total_records(self) -> int:
        return len(self.tasks) + len(self.rejected) + len(self.skipped)


def task_from_record(record: Mapping[str, Any]) -> RefreshTask:
    """Build a ``RefreshTask`` from one raw record.

    Raises
    ------
    ValidationError
        If the schedule or any identity field is illegal.
    """
    schedule_raw = record.get("schedule")
    if not isinstance(schedule_raw, Mapping):
        raise ValidationError("schedule", "required", "record has no schedule fields")
    schedule = parse_schedule(schedule_raw)

    task_id = record.get("id")
    if not task_id:
        raise ValidationError("id", "required", "record has no id")

    return RefreshTask(
        id=str(task_id),
        item_id=str(record.get("itemId") or ""),
        item_type=_parse_item_type(record.get("itemType")),
        schedule=schedule,
        item_name=str(record.get("itemName") or ""),
        project_name=str(record.get("projectName") or ""),
        consecutive_failures=_parse_count(record.get("consecutiveFailures"), "consecutiveFailures"),
        priority=_parse_optional_int(record.get("priority"), "priority"),
        next_run_at=record.get("nextRunAt"),
        last_failure_message=record.get("lastFailureMessage"),
    )


def load_tasks(records: Iterable[Mapping[str, Any]]) -> TaskLoadResult:
    """Parse every record, isolating failures per record.

    A record with a missing or unparseable ``startTime`` is skipped and logged
    at WARNING.  Any other validation failure lands in ``rejected``.  Neither
    stops the remaining records from loading.
    """
    tasks: list[RefreshTask] = []
    rejected: list[tuple[str, ValidationError]] = []
    skipped: list[str] = []

    for position, record in enumerate(records):
        record_id = str(record.get("id") or f"#{position}")
        try:
            tasks.append(task_from_record(record))
        except ValidationError as exc:
            if exc.field == "startTime":
                logger.warning("Skipping task %s: %s", record_id, exc.message)
                skipped.append(record_id)
            else:
                logger.warning(
                    "Rejecting task %s: %s (%s)", record_id, exc.message, exc.field
                )
                rejected.append((record_id, exc))

    logger.debug(
        "Loaded %d tasks (%d rejected, %d skipped)", len(tasks), len(rejected), len(skipped)
    )
    return TaskLoadResult(tasks=tuple(tasks), rejected=tuple(rejected), skipped=tuple(skipped))


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _parse_item_type(value: Any) -> ItemType:
    if isinstance(value, ItemType):
        return value
    if isinstance(value, str):
        try:
            return ItemType(value.strip().lower())
        except ValueError:
            pass
    raise ValidationError(
        "itemType", "allowed_values", f"itemType must be workbook or datasource, got {value!r}"
    )


def _parse_optional_int(value: Any, key: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(key, "type", f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(key, "type", f"{key} must be an integer, got {value!r}") from None


def _parse_count(value: Any, key: str) -> int:
    count = _parse_optional_int(value, key) or 0
    if count < 0:
        raise ValidationError(key, "range", f"{key} must be >= 0, got {count}")
    return count
