"""Tests for the console dashboard and file exporters."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any

import pytest

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.presentation.console import ConsoleDashboard, _bar, _sparkline
from refresh_balancer.presentation.export import (
    TASK_COLUMNS,
    export_all,
    export_csv,
    export_hourly_csv,
    export_json,
)
from refresh_balancer.services.analysis import RefreshAnalyzer


@pytest.fixture
def result(raw_records: list[dict[str, Any]]):
    return RefreshAnalyzer().analyze(raw_records, year=2026, month=6)


class TestHelpers:
    def test_bar_scales_to_peak(self) -> None:
        assert _bar(10, 10, width=20) == "█" * 20
        assert _bar(1, 100, width=20) == "█"
        assert _bar(0, 10) == ""

    def test_sparkline_length(self) -> None:
        assert len(_sparkline([0, 1, 2, 3])) == 4
        assert _sparkline([]) == ""


class TestPlainDashboard:
    def _render(self, method: str, *args: Any) -> str:
        buf = io.StringIO()
        getattr(ConsoleDashboard(use_rich=False, file=buf), method)(*args)
        return buf.getvalue()

    def test_overview(self, result) -> None:
        text = self._render("print_overview", result)
        assert "=== Refresh Load Overview ===" in text
        assert "Tasks: 3  Runs/week: 36  Avg/hour: 1.5" in text
        assert "Peak hours: 8 AM, 7 AM, 9 AM" in text
        assert "June 2026: 155 scheduled runs" in text

    def test_hourly(self, result) -> None:
        lines = self._render("print_hourly", result.hourly_distribution).splitlines()
        assert "=== Runs per Hour ===" in lines
        (eight,) = [line for line in lines if line.startswith(" 8 AM")]
        assert eight.split()[2] == "14"
        assert eight.endswith("█" * 40)

    def test_health(self, result) -> None:
        text = self._render("print_health", result.health_metrics)
        assert "=== Schedule Health ===" in text
        assert "7 AM-10 AM" in text

    def test_recommendations(self, result) -> None:
        text = self._render("print_recommendations", result.recommendations)
        assert "[CRITICAL] Severe Load Imbalance" in text
        assert "-> Move some refreshes from 8 AM" in text

    def test_no_recommendations(self) -> None:
        assert self._render("print_recommendations", ()).strip() == "[no recommendations]"

    def test_problems(self, raw_records) -> None:
        raw_records[0]["schedule"]["startTime"] = "later"
        raw_records[2]["schedule"]["weekDays"] = []
        result = RefreshAnalyzer().analyze(raw_records, year=2026, month=6)
        text = self._render("print_analysis", result)
        assert "=== Records Not Analysed ===" in text
        assert "weekly-mon: rejected (weekDays)" in text
        assert "daily-8: skipped" in text

    def test_preview(self, result) -> None:
        preview = RefreshAnalyzer().preview_move(result, ["daily-8"], 2)
        text = self._render("print_preview", preview)
        assert "=== Impact Preview (1 edits) ===" in text
        assert "8 AM: 14 -> 7" in text
        assert "2 AM: 1 -> 8" in text
        assert preview.describe() in text


class TestRichDashboard:
    def test_renders_tables(self, result) -> None:
        buf = io.StringIO()
        ConsoleDashboard(use_rich=True, file=buf).print_analysis(result)
        text = buf.getvalue()
        assert "Refresh Load Overview" in text
        assert "Runs per Hour" in text
        assert "Schedule Health" in text
        assert "Severe Load Imbalance" in text

    def test_preview_table(self, result) -> None:
        buf = io.StringIO()
        preview = RefreshAnalyzer().preview_move(result, ["daily-8"], 2)
        ConsoleDashboard(use_rich=True, file=buf).print_preview(preview)
        assert "Impact Preview (1 edits)" in buf.getvalue()


class TestExport:
    def test_export_json(self, result, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "analysis.json"
        export_json(result, str(path))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["hourly"]["total"] == 36

    def test_export_hourly_csv(self, result, tmp_path: Path) -> None:
        path = tmp_path / "hourly.csv"
        export_hourly_csv(result.hourly_distribution, str(path))
        with open(path, newline="", encoding="utf-8") as fh:
            rows = list(csv.reader(fh))
        assert rows[0] == ["hour", "label", "runs"]
        assert rows[9] == ["8", "8 AM", "14"]
        assert len(rows) == 25

    def test_export_csv(self, result, tmp_path: Path) -> None:
        path = tmp_path / "tasks.csv"
        export_csv(result, str(path))
        with open(path, newline="", encoding="utf-8") as fh:
            rows = list(csv.DictReader(fh))
        assert list(rows[0]) == TASK_COLUMNS
        hourly = rows[1]
        assert hourly["item_name"] == "Orders Extract"
        assert hourly["run_hours"] == "7;8;9;10"
        assert hourly["days"].startswith("Monday;Tuesday")
        assert rows[2]["days"] == "Monday"
        assert rows[2]["start_time"] == "02:00"

    def test_export_all(self, result, tmp_path: Path) -> None:
        files = export_all(result, str(tmp_path))
        assert set(files) == {"json", "csv"}
        assert (tmp_path / "analysis.json").exists()
        assert (tmp_path / "tasks.csv").exists()
        assert (tmp_path / "hourly.csv").exists()

    def test_export_all_json_only(self, result, tmp_path: Path) -> None:
        files = export_all(result, str(tmp_path), formats=["json"])
        assert list(files) == ["json"]
        assert not (tmp_path / "tasks.csv").exists()

    def test_empty_distribution_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "hourly.csv"
        export_hourly_csv(HourlyDistribution.zeros(), str(path))
        assert path.read_text(encoding="utf-8").count("\n") == 25
