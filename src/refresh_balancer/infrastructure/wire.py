"""Schedule serializer for the remote scheduling API's XML payload.

Document shape::

    <tsRequest>
      <schedule frequency="Daily">
        <frequencyDetails start="06:00:00" end="18:00:00">
          <intervals>
            <interval hours="4" />
            <interval weekDay="Monday" />
            ...
          </intervals>
        </frequencyDetails>
      </schedule>
    </tsRequest>

Hourly and Daily payloads always list their weekdays; an "every day"
selection is written out as all seven.  Monthly On Day writes one
``monthDay`` per day (``LastDay`` literally).  Monthly ordinal mode writes a
single interval whose ``monthDay`` slot carries the ordinal token (``Last``
is the ordinal, never ``LastDay``).

:func:`serialize` re-validates the schedule through ``parse_schedule``
before rendering, so a payload is never produced for an illegal value.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any

from refresh_balancer.domain.enums import ALL_WEEKDAYS, Frequency, MonthDayToken, Ordinal, Weekday
from refresh_balancer.domain.exceptions import ValidationError
from refresh_balancer.domain.values import (
    DailySchedule,
    HourlySchedule,
    MonthlySchedule,
    OnDay,
    Schedule,
    WeeklySchedule,
)
from refresh_balancer.infrastructure.serialization import schedule_to_raw
from refresh_balancer.services.validation import parse_schedule

logger = logging.getLogger(__name__)

_ORDINAL_TOKENS = frozenset(ordinal.value for ordinal in Ordinal)


@dataclass(frozen=True)
class WireDocument:
    """A rendered XML request body, ready for the write-path collaborator."""

    xml: str
    frequency: Frequency

    def to_bytes(self) -> bytes:
        return self.xml.encode("utf-8")

    def __str__(self) -> str:
        return self.xml


# =========================================================================== #
#  Rendering                                                                   #
# =========================================================================== #

def _weekday_elements(days: frozenset[Weekday]) -> list[dict[str, str]]:
    ordered = sorted(days or ALL_WEEKDAYS, key=lambda d: d.index)
    return [{"weekDay": day.value} for day in ordered]


def _intervals(schedule: Schedule) -> list[dict[str, str]]:
    if isinstance(schedule, HourlySchedule):
        return [{"hours": "1"}, *_weekday_elements(schedule.week_days)]
    if isinstance(schedule, DailySchedule):
        return [{"hours": str(schedule.interval_hours)}, *_weekday_elements(schedule.week_days)]
    if isinstance(schedule, WeeklySchedule):
        return _weekday_elements(schedule.week_days)
    if isinstance(schedule, MonthlySchedule):
        mode = schedule.mode
        if isinstance(mode, OnDay):
            return [
                {"monthDay": day.value if isinstance(day, MonthDayToken) else str(day)}
                for day in mode.sorted_days()
            ]
        return [{"monthDay": mode.ordinal.value, "weekDay": mode.weekday.value}]
    raise TypeError(f"Unsupported schedule type: {type(schedule).__name__}")


def serialize(schedule: Schedule) -> WireDocument:
    """Render *schedule* as the API's XML request body.

    Raises
    ------
    ValidationError
        If the schedule does not pass ``parse_schedule``.
    """
    validated = parse_schedule(schedule_to_raw(schedule))

    root = ET.Element("tsRequest")
    schedule_el = ET.SubElement(root, "schedule", {"frequency": validated.frequency.value})
    details_attrs = {"start": validated.start_time.to_wire()}
    end_time = getattr(validated, "end_time", None)
    if end_time is not None:
        details_attrs["end"] = end_time.to_wire()
    details_el = ET.SubElement(schedule_el, "frequencyDetails", details_attrs)
    intervals_el = ET.SubElement(details_el, "intervals")
    for attrs in _intervals(validated):
        ET.SubElement(intervals_el, "interval", attrs)

    ET.indent(root, space="  ")
    document = WireDocument(xml=ET.tostring(root, encoding="unicode"), frequency=validated.frequency)
    logger.debug("Serialized %s schedule (%d bytes)", validated.frequency.value, len(document.xml))
    return document


# =========================================================================== #
#  Parsing                                                                     #
# =========================================================================== #

def raw_fields_from_wire(xml: str | WireDocument) -> dict[str, Any]:
    """Read a payload back into raw schedule fields (not yet validated)."""
    text = xml.xml if isinstance(xml, WireDocument) else xml
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValidationError("document", "format", f"Malformed XML: {exc}") from None

    schedule_el = root if root.tag == "schedule" else root.find("schedule")
    if schedule_el is None:
        raise ValidationError("document", "format", "Document has no <schedule> element")
    details_el = schedule_el.find("frequencyDetails")
    if details_el is None:
        raise ValidationError("document", "format", "Document has no <frequencyDetails> element")

    raw: dict[str, Any] = {
        "frequency": schedule_el.get("frequency"),
        "startTime": details_el.get("start"),
    }
    if details_el.get("end"):
        raw["endTime"] = details_el.get("end")

    week_days: list[str] = []
    month_days: list[Any] = []
    for interval in details_el.iter("interval"):
        hours = interval.get("hours")
        minutes = interval.get("minutes")
        month_day = interval.get("monthDay")
        week_day = interval.get("weekDay")
        if hours is not None:
            raw["intervalHours"] = int(hours) if hours.isdigit() else hours
        elif minutes is not None:
            raw["intervalHours"] = 1
        if month_day is not None and week_day is not None and month_day in _ORDINAL_TOKENS:
            raw["monthlyOrdinal"] = month_day
            raw["monthlyWeekDay"] = week_day
        elif month_day is not None:
            month_days.append(int(month_day) if month_day.isdigit() else month_day)
        elif week_day is not None:
            week_days.append(week_day)

    if week_days:
        raw["weekDays"] = week_days
    if month_days:
        raw["monthDays"] = month_days
    return raw


def parse_wire_document(xml: str | WireDocument) -> Schedule:
    """Parse a payload produced by :func:`serialize` back into a ``Schedule``.

    Raises
    ------
    ValidationError
        For malformed XML (``field="document"``) or an illegal schedule.
    """
    return parse_schedule(raw_fields_from_wire(xml))
