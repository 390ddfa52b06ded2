"""Tests for the XML schedule serializer."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from refresh_balancer.domain.enums import LAST_DAY, Frequency, Ordinal, Weekday
from refresh_balancer.domain.exceptions import ValidationError
from refresh_balancer.domain.values import (
    DailySchedule,
    HourlySchedule,
    MonthlySchedule,
    OnDay,
    OnOrdinalWeekday,
    TimeOfDay,
    WeeklySchedule,
)
from refresh_balancer.infrastructure.wire import (
    WireDocument,
    parse_wire_document,
    raw_fields_from_wire,
    serialize,
)

ALL_DAYS_MONDAY_FIRST = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
]


def _intervals(document: WireDocument) -> list[dict[str, str]]:
    root = ET.fromstring(document.xml)
    return [dict(el.attrib) for el in root.iter("interval")]


def _details(document: WireDocument) -> dict[str, str]:
    root = ET.fromstring(document.xml)
    return dict(root.find("schedule/frequencyDetails").attrib)


SCHEDULES = {
    "hourly": HourlySchedule(start_time=TimeOfDay(7, 0), end_time=TimeOfDay(22, 0)),
    "daily-window": DailySchedule(
        start_time=TimeOfDay(6, 0),
        interval_hours=4,
        end_time=TimeOfDay(18, 0),
        week_days=frozenset({Weekday.MONDAY, Weekday.FRIDAY}),
    ),
    "daily-once": DailySchedule(start_time=TimeOfDay(8, 0)),
    "weekly": WeeklySchedule(
        start_time=TimeOfDay(2, 0),
        week_days=frozenset({Weekday.SUNDAY, Weekday.WEDNESDAY}),
    ),
    "monthly-days": MonthlySchedule(
        start_time=TimeOfDay(3, 0), mode=OnDay(days=frozenset({15, 1, LAST_DAY}))
    ),
    "monthly-ordinal": MonthlySchedule(
        start_time=TimeOfDay(11, 5), mode=OnOrdinalWeekday(Ordinal.LAST, Weekday.FRIDAY)
    ),
}


class TestDocumentShape:
    def test_root_and_frequency(self) -> None:
        document = serialize(SCHEDULES["hourly"])
        root = ET.fromstring(document.xml)
        assert root.tag == "tsRequest"
        assert root.find("schedule").get("frequency") == "Hourly"
        assert document.frequency is Frequency.HOURLY

    def test_hourly_lists_every_day(self) -> None:
        document = serialize(SCHEDULES["hourly"])
        assert _details(document) == {"start": "07:00:00", "end": "22:00:00"}
        intervals = _intervals(document)
        assert intervals[0] == {"hours": "1"}
        assert [i["weekDay"] for i in intervals[1:]] == ALL_DAYS_MONDAY_FIRST

    def test_daily_window(self) -> None:
        document = serialize(SCHEDULES["daily-window"])
        assert _details(document) == {"start": "06:00:00", "end": "18:00:00"}
        assert _intervals(document) == [
            {"hours": "4"},
            {"weekDay": "Monday"},
            {"weekDay": "Friday"},
        ]

    def test_daily_once_has_no_end(self) -> None:
        document = serialize(SCHEDULES["daily-once"])
        assert _details(document) == {"start": "08:00:00"}
        assert _intervals(document)[0] == {"hours": "24"}

    def test_weekly_weekdays_only(self) -> None:
        assert _intervals(serialize(SCHEDULES["weekly"])) == [
            {"weekDay": "Wednesday"},
            {"weekDay": "Sunday"},
        ]

    def test_monthly_days_with_last_day(self) -> None:
        assert _intervals(serialize(SCHEDULES["monthly-days"])) == [
            {"monthDay": "1"},
            {"monthDay": "15"},
            {"monthDay": "LastDay"},
        ]

    def test_monthly_ordinal_uses_last_not_last_day(self) -> None:
        assert _intervals(serialize(SCHEDULES["monthly-ordinal"])) == [
            {"monthDay": "Last", "weekDay": "Friday"},
        ]

    def test_indented_text(self) -> None:
        document = serialize(SCHEDULES["daily-once"])
        assert document.xml.startswith("<tsRequest>\n  <schedule")
        assert '<interval hours="24" />' in str(document)
        assert document.to_bytes() == document.xml.encode("utf-8")


class TestRoundTrip:
    @pytest.mark.parametrize("name", sorted(SCHEDULES))
    def test_parse_back(self, name: str) -> None:
        schedule = SCHEDULES[name]
        assert parse_wire_document(serialize(schedule)) == schedule


class TestIllegalSchedules:
    def test_weekly_without_days(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            serialize(WeeklySchedule(start_time=TimeOfDay(2, 0), week_days=frozenset()))
        assert excinfo.value.field == "weekDays"

    def test_minute_mismatch(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            serialize(HourlySchedule(start_time=TimeOfDay(7, 15), end_time=TimeOfDay(9, 0)))
        assert excinfo.value.rule == "minute_alignment"

    def test_daily_window_without_end(self) -> None:
        with pytest.raises(ValidationError):
            serialize(DailySchedule(start_time=TimeOfDay(6, 0), interval_hours=4))


class TestParsing:
    def test_malformed_xml(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            raw_fields_from_wire("<tsRequest><schedule")
        assert (excinfo.value.field, excinfo.value.rule) == ("document", "format")

    def test_missing_schedule(self) -> None:
        with pytest.raises(ValidationError, match="schedule"):
            raw_fields_from_wire("<tsRequest/>")

    def test_missing_details(self) -> None:
        with pytest.raises(ValidationError, match="frequencyDetails"):
            raw_fields_from_wire('<tsRequest><schedule frequency="Daily"/></tsRequest>')

    def test_minutes_interval_reads_as_hourly(self) -> None:
        raw = raw_fields_from_wire(
            '<schedule frequency="Hourly">'
            '<frequencyDetails start="07:00:00" end="09:00:00">'
            '<intervals><interval minutes="30"/></intervals>'
            "</frequencyDetails></schedule>"
        )
        assert raw["intervalHours"] == 1
        assert raw["endTime"] == "09:00:00"

    def test_illegal_payload_rejected(self) -> None:
        xml = (
            '<tsRequest><schedule frequency="Hourly">'
            '<frequencyDetails start="07:00:00" end="09:00:00">'
            '<intervals><interval hours="2"/></intervals>'
            "</frequencyDetails></schedule></tsRequest>"
        )
        with pytest.raises(ValidationError) as excinfo:
            parse_wire_document(xml)
        assert excinfo.value.field == "intervalHours"
