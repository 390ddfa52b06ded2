"""Tests for the RefreshTask entity and the HourlyDistribution value object."""

from __future__ import annotations

import numpy as np
import pytest

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.domain.enums import ALL_WEEKDAYS, Weekday
from refresh_balancer.domain.values import DailySchedule, TimeOfDay


class TestRefreshTask:
    def test_derives_run_hours_and_days(self, make_task, hourly_7_to_10) -> None:
        task = make_task(hourly_7_to_10)
        assert task.run_hours == (7, 8, 9, 10)
        assert task.effective_week_days == ALL_WEEKDAYS
        assert task.task_days == 7

    def test_hourly_window(self, make_task, hourly_7_to_10, daily_8am) -> None:
        assert make_task(hourly_7_to_10).hourly_window == "7 AM - 10 AM"
        assert make_task(daily_8am).hourly_window is None

    def test_is_hourly(self, make_task, hourly_7_to_10, daily_8am) -> None:
        assert make_task(hourly_7_to_10).is_hourly
        assert not make_task(daily_8am).is_hourly

    def test_start_hour(self, make_task, weekly_mon_wed) -> None:
        assert make_task(weekly_mon_wed).start_hour == 6

    def test_display_name_falls_back_to_item_id(self, make_task, daily_8am) -> None:
        assert make_task(daily_8am, item_name="Sales").display_name == "Sales"
        assert make_task(daily_8am, item_id="0123456789abcdef").display_name == "ID: 01234567..."
        assert make_task(daily_8am, item_id="").display_name == "Unknown"

    def test_with_schedule_rederives(self, make_task, daily_8am) -> None:
        task = make_task(daily_8am)
        moved = task.with_schedule(
            DailySchedule(start_time=TimeOfDay(2, 0), week_days=frozenset({Weekday.SUNDAY}))
        )
        assert moved.run_hours == (2,)
        assert moved.effective_week_days == {Weekday.SUNDAY}
        assert task.run_hours == (8,)

    def test_negative_failures_rejected(self, make_task, daily_8am) -> None:
        with pytest.raises(ValueError, match="consecutive_failures"):
            make_task(daily_8am, consecutive_failures=-1)

    def test_immutable(self, make_task, daily_8am) -> None:
        task = make_task(daily_8am)
        with pytest.raises(AttributeError):
            task.id = "other"  # type: ignore[misc]


class TestHourlyDistribution:
    def test_defaults_to_zeros(self) -> None:
        dist = HourlyDistribution.zeros()
        assert dist.total == 0
        assert len(dist) == 24

    def test_wrong_length_rejected(self) -> None:
        with pytest.raises(ValueError, match="24"):
            HourlyDistribution((1, 2, 3))

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            HourlyDistribution.from_mapping({3: -1})

    def test_from_mapping_accepts_string_keys(self) -> None:
        dist = HourlyDistribution.from_mapping({"8": 14, 2: 1})
        assert dist[8] == 14
        assert dist[2] == 1
        assert dist.total == 15

    def test_peak_hours_ignore_empty_hours(self) -> None:
        dist = HourlyDistribution.from_mapping({8: 10, 9: 5})
        assert dist.peak_hours(3) == [8, 9]

    def test_peak_hours_ties_keep_hour_order(self) -> None:
        dist = HourlyDistribution.from_mapping({5: 3, 2: 3, 20: 1})
        assert dist.peak_hours(2) == [2, 5]

    def test_quiet_hours_quietest_first(self) -> None:
        dist = HourlyDistribution(tuple(range(1, 25)))
        assert dist.quiet_hours(3) == [0, 1, 2]

    def test_mean_and_array(self) -> None:
        dist = HourlyDistribution.from_mapping({0: 24})
        assert dist.mean == pytest.approx(1.0)
        assert isinstance(dist.as_array(), np.ndarray)
        assert dist.as_array()[0] == 24.0

    def test_as_dict(self) -> None:
        dist = HourlyDistribution.from_mapping({4: 2})
        assert dist.as_dict()[4] == 2
        assert set(dist.as_dict()) == set(range(24))
