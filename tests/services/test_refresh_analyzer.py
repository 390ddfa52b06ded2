"""End-to-end tests for RefreshAnalyzer."""

from __future__ import annotations

import datetime
from typing import Any

import pytest

from refresh_balancer.domain.enums import HealthBand, Weekday
from refresh_balancer.domain.exceptions import SimulationError
from refresh_balancer.domain.values import DailySchedule, TimeOfDay
from refresh_balancer.infrastructure.config import AnalyzerConfig, BandThreshold
from refresh_balancer.services.analysis import RefreshAnalyzer
from refresh_balancer.services.simulation import BatchEdit


@pytest.fixture
def analyzer() -> RefreshAnalyzer:
    return RefreshAnalyzer()


class TestAnalyze:
    def test_full_result(self, analyzer: RefreshAnalyzer, raw_records: list[dict[str, Any]]) -> None:
        result = analyzer.analyze(raw_records, year=2026, month=6)

        dist = result.hourly_distribution
        assert dist.as_dict()[2] == 1
        assert dist[7] == 7
        assert dist[8] == 14
        assert result.total_runs == 36
        assert result.peak_hours == (8, 7, 9)
        assert result.quiet_hours == (0, 1, 3)
        assert len(result.task_details) == 3

    def test_calendar_and_heatmap(self, analyzer, raw_records) -> None:
        result = analyzer.analyze(raw_records, year=2026, month=6)
        cal = result.monthly_calendar
        assert cal.count_on(datetime.date(2026, 6, 1)) == 6
        assert cal.count_on(datetime.date(2026, 6, 2)) == 5
        assert cal.total == 155
        assert result.heatmap.count(Weekday.MONDAY, 2) == 1
        assert result.daily_totals[Weekday.MONDAY] == 6

    def test_health_and_recommendations(self, analyzer, raw_records) -> None:
        result = analyzer.analyze(raw_records, year=2026, month=6)
        health = result.health_metrics
        assert health.utilization.value == 21
        assert health.utilization.band is HealthBand.RED
        assert health.busiest_window.label == "7 AM-10 AM"
        assert result.recommendations
        assert result.load_composition is not None
        assert result.load_composition.hourly_fixed_runs == 28

    def test_rejected_and_skipped_are_reported(self, analyzer, raw_records) -> None:
        raw_records[0]["schedule"]["startTime"] = None
        raw_records[2]["schedule"]["weekDays"] = ["Caturday"]
        result = analyzer.analyze(raw_records, year=2026, month=6)
        assert [task.id for task in result.task_details] == ["hourly-7-10"]
        assert result.skipped == ("daily-8",)
        assert [record_id for record_id, _ in result.rejected] == ["weekly-mon"]

    def test_empty_input(self, analyzer) -> None:
        result = analyzer.analyze([], year=2026, month=6)
        assert result.total_runs == 0
        assert result.recommendations == ()
        assert result.health_metrics.load_balance_score.value == 100
        assert result.peak_hours == ()

    def test_month_defaults_to_site_local_now(self, analyzer, raw_records) -> None:
        # 03:00 UTC on New Year's Day is still December 31st in Chicago.
        now = datetime.datetime(2026, 1, 1, 3, 0, tzinfo=datetime.timezone.utc)
        result = analyzer.analyze(raw_records, now=now)
        assert (result.monthly_calendar.year, result.monthly_calendar.month) == (2025, 12)

    def test_custom_thresholds(self, raw_records) -> None:
        thresholds = dict(AnalyzerConfig().health_thresholds)
        thresholds["utilization"] = BandThreshold(green=20, yellow=10)
        analyzer = RefreshAnalyzer(AnalyzerConfig(health_thresholds=thresholds))
        result = analyzer.analyze(raw_records, year=2026, month=6)
        assert result.health_metrics.utilization.band is HealthBand.GREEN

    def test_task_lookup(self, analyzer, raw_records) -> None:
        result = analyzer.analyze(raw_records, year=2026, month=6)
        assert result.task("weekly-mon").item_name == "Headcount"
        assert result.task("missing") is None


class TestPreview:
    def test_preview_move(self, analyzer, raw_records) -> None:
        result = analyzer.analyze(raw_records, year=2026, month=6)
        preview = analyzer.preview_move(result, ["daily-8"], 2)
        assert preview.proposed_dist[8] == 7
        assert preview.proposed_dist[2] == 8
        assert preview.current_dist == result.hourly_distribution

    def test_preview_edits(self, analyzer, raw_records) -> None:
        result = analyzer.analyze(raw_records, year=2026, month=6)
        task = result.task("weekly-mon")
        edit = BatchEdit.for_task(task, DailySchedule(start_time=TimeOfDay(3, 0)))
        preview = analyzer.preview(result, [edit])
        assert preview.proposed_dist[2] == 0
        assert preview.proposed_dist[3] == 7

    def test_unknown_task(self, analyzer, raw_records) -> None:
        result = analyzer.analyze(raw_records, year=2026, month=6)
        with pytest.raises(SimulationError, match="not found"):
            analyzer.preview_move(result, ["nope"], 2)

    def test_hourly_task_cannot_move(self, analyzer, raw_records) -> None:
        result = analyzer.analyze(raw_records, year=2026, month=6)
        with pytest.raises(SimulationError):
            analyzer.preview_move(result, ["hourly-7-10"], 2)
