"""Tests for turning raw records into RefreshTask entities."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from refresh_balancer.domain.enums import ItemType
from refresh_balancer.domain.exceptions import ValidationError
from refresh_balancer.services.tasks import load_tasks, task_from_record


class TestTaskFromRecord:
    def test_full_record(self, raw_records: list[dict[str, Any]]) -> None:
        task = task_from_record(raw_records[0])
        assert task.id == "daily-8"
        assert task.item_type is ItemType.WORKBOOK
        assert task.item_name == "Sales Dashboard"
        assert task.project_name == "Finance"
        assert task.consecutive_failures == 2
        assert task.priority == 50
        assert task.run_hours == (8,)

    def test_datasource(self, raw_records: list[dict[str, Any]]) -> None:
        task = task_from_record(raw_records[1])
        assert task.item_type is ItemType.DATASOURCE
        assert task.run_hours == (7, 8, 9, 10)

    def test_missing_schedule(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            task_from_record({"id": "x", "itemId": "i", "itemType": "workbook"})
        assert excinfo.value.field == "schedule"

    def test_unknown_item_type(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            task_from_record(
                {
                    "id": "x",
                    "itemType": "flow",
                    "schedule": {"frequency": "Daily", "startTime": "08:00"},
                }
            )
        assert excinfo.value.field == "itemType"

    def test_negative_failures(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            task_from_record(
                {
                    "id": "x",
                    "itemType": "workbook",
                    "consecutiveFailures": -3,
                    "schedule": {"frequency": "Daily", "startTime": "08:00"},
                }
            )
        assert (excinfo.value.field, excinfo.value.rule) == ("consecutiveFailures", "range")


class TestLoadTasks:
    def test_all_valid(self, raw_records: list[dict[str, Any]]) -> None:
        result = load_tasks(raw_records)
        assert [t.id for t in result.tasks] == ["daily-8", "hourly-7-10", "weekly-mon"]
        assert result.rejected == ()
        assert result.skipped == ()
        assert result.total_records == 3

    def test_bad_start_time_is_skipped_and_logged(
        self, raw_records: list[dict[str, Any]], caplog: pytest.LogCaptureFixture
    ) -> None:
        raw_records[0]["schedule"]["startTime"] = "soon"
        with caplog.at_level(logging.WARNING, logger="refresh_balancer.services.tasks"):
            result = load_tasks(raw_records)
        assert result.skipped == ("daily-8",)
        assert len(result.tasks) == 2
        assert "Skipping task daily-8" in caplog.text

    def test_other_errors_are_rejected(self, raw_records: list[dict[str, Any]]) -> None:
        raw_records[2]["schedule"]["weekDays"] = []
        result = load_tasks(raw_records)
        assert len(result.tasks) == 2
        assert len(result.rejected) == 1
        record_id, error = result.rejected[0]
        assert record_id == "weekly-mon"
        assert error.field == "weekDays"

    def test_missing_start_time_wins_over_bad_frequency(self) -> None:
        result = load_tasks(
            [{"id": "odd", "itemType": "workbook", "schedule": {"frequency": "Fortnightly"}}]
        )
        assert result.skipped == ("odd",)
        assert result.rejected == ()

    def test_record_without_id_uses_position(self) -> None:
        result = load_tasks([{"itemType": "workbook", "schedule": {"frequency": "Daily"}}])
        assert result.skipped == ("#0",)

    def test_empty_input(self) -> None:
        result = load_tasks([])
        assert result.tasks == ()
        assert result.total_records == 0
