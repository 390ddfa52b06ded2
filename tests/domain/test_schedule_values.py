"""Tests for schedule value objects and domain enums."""

from __future__ import annotations

import datetime

import pytest

from refresh_balancer.domain.enums import LAST_DAY, MonthDayToken, Ordinal, Weekday
from refresh_balancer.domain.values import OnDay, TimeOfDay


class TestTimeOfDay:
    """Test parsing and rendering of wall-clock times."""

    def test_parse_hh_mm(self) -> None:
        assert TimeOfDay.parse("08:30") == TimeOfDay(8, 30)

    def test_parse_hh_mm_ss(self) -> None:
        assert TimeOfDay.parse("23:05:59") == TimeOfDay(23, 5, 59)

    def test_parse_single_digit_hour(self) -> None:
        assert TimeOfDay.parse("7:00") == TimeOfDay(7, 0)

    @pytest.mark.parametrize("text", ["24:00", "12:60", "noon", "12", "12:5", ""])
    def test_parse_rejects_malformed(self, text: str) -> None:
        with pytest.raises(ValueError):
            TimeOfDay.parse(text)

    def test_wire_format_has_seconds(self) -> None:
        assert TimeOfDay(6, 0).to_wire() == "06:00:00"

    def test_str_is_hh_mm(self) -> None:
        assert str(TimeOfDay(9, 5, 30)) == "09:05"

    def test_minutes_since_midnight(self) -> None:
        assert TimeOfDay(22, 15).minutes_since_midnight == 22 * 60 + 15

    def test_replace_hour_keeps_minutes(self) -> None:
        assert TimeOfDay(8, 45).replace_hour(2) == TimeOfDay(2, 45)

    def test_ordering(self) -> None:
        assert TimeOfDay(7, 59) < TimeOfDay(8, 0)

    def test_out_of_range_constructor(self) -> None:
        with pytest.raises(ValueError, match="hour"):
            TimeOfDay(25, 0)


class TestWeekday:
    """Weekday translation happens only in the from_* constructors."""

    def test_monday_first_index(self) -> None:
        assert Weekday.MONDAY.index == 0
        assert Weekday.SUNDAY.index == 6

    def test_from_sunday_first_index(self) -> None:
        assert Weekday.from_sunday_first_index(0) is Weekday.SUNDAY
        assert Weekday.from_sunday_first_index(1) is Weekday.MONDAY
        assert Weekday.from_sunday_first_index(6) is Weekday.SATURDAY

    def test_from_date(self) -> None:
        # 2026-06-01 is a Monday
        assert Weekday.from_date(datetime.date(2026, 6, 1)) is Weekday.MONDAY

    def test_from_name(self) -> None:
        assert Weekday.from_name("Friday") is Weekday.FRIDAY

    def test_from_name_unknown(self) -> None:
        with pytest.raises(ValueError, match="Funday"):
            Weekday.from_name("Funday")

    def test_from_index_bounds(self) -> None:
        with pytest.raises(ValueError):
            Weekday.from_index(7)

    def test_short_label(self) -> None:
        assert Weekday.WEDNESDAY.short_label == "Wed"


class TestMonthlyTokens:
    def test_last_day_is_not_last_ordinal(self) -> None:
        assert LAST_DAY is MonthDayToken.LAST_DAY
        assert LAST_DAY.value == "LastDay"
        assert Ordinal.LAST.value == "Last"
        assert LAST_DAY.value != Ordinal.LAST.value

    def test_ordinal_occurrence(self) -> None:
        assert Ordinal.FIRST.occurrence == 1
        assert Ordinal.FIFTH.occurrence == 5
        assert Ordinal.LAST.occurrence is None

    def test_on_day_sorted_days_puts_last_day_last(self) -> None:
        mode = OnDay(days=frozenset({15, LAST_DAY, 1}))
        assert mode.sorted_days() == [1, 15, LAST_DAY]
