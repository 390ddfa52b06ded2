"""Tests for the occurrence engine."""

from __future__ import annotations

import datetime

import pytest

from refresh_balancer.domain.enums import ALL_WEEKDAYS, LAST_DAY, Ordinal, Weekday
from refresh_balancer.domain.occurrence import (
    MONTHLY_TASK_DAYS_APPROXIMATION,
    days_in_month,
    effective_weekdays,
    expand_run_hours,
    fire_dates,
    first_weekday_of_month,
    format_hour,
    schedule_fires_on_date,
    task_days,
)
from refresh_balancer.domain.values import (
    DailySchedule,
    HourlySchedule,
    MonthlySchedule,
    OnDay,
    OnOrdinalWeekday,
    TimeOfDay,
    WeeklySchedule,
)


def _monthly_on(*days) -> MonthlySchedule:
    return MonthlySchedule(start_time=TimeOfDay(3, 0), mode=OnDay(days=frozenset(days)))


def _monthly_ordinal(ordinal: Ordinal, weekday: Weekday) -> MonthlySchedule:
    return MonthlySchedule(start_time=TimeOfDay(3, 0), mode=OnOrdinalWeekday(ordinal, weekday))


class TestExpandRunHours:
    def test_daily_once_is_start_hour(self, daily_8am: DailySchedule) -> None:
        assert expand_run_hours(daily_8am) == (8,)

    def test_hourly_window_inclusive(self, hourly_7_to_10: HourlySchedule) -> None:
        assert expand_run_hours(hourly_7_to_10) == (7, 8, 9, 10)

    def test_window_wraps_past_midnight(self) -> None:
        schedule = DailySchedule(
            start_time=TimeOfDay(22, 0), interval_hours=2, end_time=TimeOfDay(2, 0)
        )
        assert expand_run_hours(schedule) == (0, 2, 22)

    def test_daily_sub_day_interval(self) -> None:
        schedule = DailySchedule(
            start_time=TimeOfDay(6, 0), interval_hours=4, end_time=TimeOfDay(18, 0)
        )
        assert expand_run_hours(schedule) == (6, 10, 14, 18)

    def test_window_with_minutes(self) -> None:
        schedule = HourlySchedule(start_time=TimeOfDay(7, 30), end_time=TimeOfDay(9, 30))
        assert expand_run_hours(schedule) == (7, 8, 9)

    def test_hourly_overnight_window(self) -> None:
        schedule = HourlySchedule(start_time=TimeOfDay(23, 0), end_time=TimeOfDay(1, 0))
        assert expand_run_hours(schedule) == (0, 1, 23)

    def test_weekly_and_monthly_fire_once(self, weekly_mon_wed, second_monday) -> None:
        assert expand_run_hours(weekly_mon_wed) == (6,)
        assert expand_run_hours(second_monday) == (11,)


class TestFormatHour:
    @pytest.mark.parametrize(
        "hour, label",
        [(0, "12 AM"), (1, "1 AM"), (11, "11 AM"), (12, "12 PM"), (13, "1 PM"), (23, "11 PM")],
    )
    def test_labels(self, hour: int, label: str) -> None:
        assert format_hour(hour) == label

    def test_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            format_hour(24)


class TestWeekdaysAndWeights:
    def test_empty_selection_means_every_day(self, daily_8am: DailySchedule) -> None:
        assert effective_weekdays(daily_8am) == ALL_WEEKDAYS
        assert task_days(daily_8am) == 7

    def test_weekly_selection(self, weekly_mon_wed: WeeklySchedule) -> None:
        assert effective_weekdays(weekly_mon_wed) == {Weekday.MONDAY, Weekday.WEDNESDAY}
        assert task_days(weekly_mon_wed) == 2

    def test_monthly_ordinal_fires_on_its_weekday(self, second_monday) -> None:
        assert effective_weekdays(second_monday) == {Weekday.MONDAY}

    def test_monthly_on_day_spans_every_weekday(self) -> None:
        assert effective_weekdays(_monthly_on(1, 15)) == ALL_WEEKDAYS

    def test_monthly_weight_is_named_approximation(self, second_monday) -> None:
        assert task_days(second_monday) == MONTHLY_TASK_DAYS_APPROXIMATION == 4


class TestMonthHelpers:
    def test_days_in_month_leap_year(self) -> None:
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2025, 2) == 28
        assert days_in_month(2026, 4) == 30

    def test_first_weekday_of_month(self) -> None:
        assert first_weekday_of_month(2026, 6) is Weekday.MONDAY


class TestScheduleFiresOnDate:
    """The single date-membership predicate."""

    def test_last_day_february_non_leap(self) -> None:
        schedule = _monthly_on(LAST_DAY)
        assert schedule_fires_on_date(schedule, datetime.date(2025, 2, 28))
        assert not schedule_fires_on_date(schedule, datetime.date(2025, 2, 27))

    def test_last_day_february_leap(self) -> None:
        schedule = _monthly_on(LAST_DAY)
        assert schedule_fires_on_date(schedule, datetime.date(2024, 2, 29))
        assert not schedule_fires_on_date(schedule, datetime.date(2024, 2, 28))

    def test_day_31_never_fires_in_short_month(self) -> None:
        assert fire_dates(_monthly_on(31), 2026, 4) == []

    def test_numeric_days(self) -> None:
        dates = fire_dates(_monthly_on(1, 15), 2026, 3)
        assert dates == [datetime.date(2026, 3, 1), datetime.date(2026, 3, 15)]

    def test_last_friday_when_month_ends_on_thursday(self) -> None:
        # April 2026 ends on Thursday the 30th; its last Friday is the 24th.
        schedule = _monthly_ordinal(Ordinal.LAST, Weekday.FRIDAY)
        assert fire_dates(schedule, 2026, 4) == [datetime.date(2026, 4, 24)]

    def test_last_friday_in_five_friday_month(self) -> None:
        # May 2026 has Fridays on 1, 8, 15, 22 and 29.
        schedule = _monthly_ordinal(Ordinal.LAST, Weekday.FRIDAY)
        assert fire_dates(schedule, 2026, 5) == [datetime.date(2026, 5, 29)]

    def test_fifth_friday_only_when_it_exists(self) -> None:
        schedule = _monthly_ordinal(Ordinal.FIFTH, Weekday.FRIDAY)
        assert fire_dates(schedule, 2026, 5) == [datetime.date(2026, 5, 29)]
        assert fire_dates(schedule, 2026, 4) == []

    def test_second_monday(self, second_monday) -> None:
        assert fire_dates(second_monday, 2026, 6) == [datetime.date(2026, 6, 8)]

    def test_weekly_uses_weekday(self, weekly_mon_wed) -> None:
        assert schedule_fires_on_date(weekly_mon_wed, datetime.date(2026, 6, 1))
        assert not schedule_fires_on_date(weekly_mon_wed, datetime.date(2026, 6, 2))
        assert schedule_fires_on_date(weekly_mon_wed, datetime.date(2026, 6, 3))

    def test_daily_every_day(self, daily_8am) -> None:
        assert len(fire_dates(daily_8am, 2024, 2)) == 29
