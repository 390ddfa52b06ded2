"""Schedule validation: raw fields in, legal ``Schedule`` out.

:func:`parse_schedule` is the one place the schedule rules live.  The wire
serializer, the task loader and the CLI all delegate to it.

Raw fields use the remote scheduling API's camelCase keys:

==================  =========================================================
``frequency``       ``"Hourly"``, ``"Daily"``, ``"Weekly"`` or ``"Monthly"``
``startTime``       ``"HH:MM"`` or ``"HH:MM:SS"``
``endTime``         same format; Hourly and sub-day Daily only
``intervalHours``   1 (Hourly), 2/4/6/8/12/24 (Daily)
``weekDays``        list of day names
``monthDays``       list of 1..31 and/or ``"LastDay"`` (Monthly On Day)
``monthlyOrdinal``  ``"First"`` .. ``"Fifth"`` or ``"Last"``
``monthlyWeekDay``  day name for the ordinal mode
==================  =========================================================
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from refresh_balancer.domain.enums import (
    ALL_WEEKDAYS,
    Frequency,
    MonthDayToken,
    Ordinal,
    Weekday,
)
from refresh_balancer.domain.exceptions import ValidationError
from refresh_balancer.domain.values import (
    DailySchedule,
    HourlySchedule,
    MonthDay,
    MonthlySchedule,
    OnDay,
    OnOrdinalWeekday,
    Schedule,
    TimeOfDay,
    WeeklySchedule,
)

DAILY_INTERVALS: frozenset[int] = frozenset({2, 4, 6, 8, 12, 24})

_MONTHLY_FIELDS = ("monthDays", "monthlyOrdinal", "monthlyWeekDay")


# ===================================================================== #
#  Public API                                                            #
# ===================================================================== #


def parse_schedule(raw: Mapping[str, Any]) -> Schedule:
    """Parse raw schedule fields into a legal ``Schedule``.

    There is no partial success: either every field is accepted or a
    ``ValidationError`` naming the first offending field is raised.

    Raises
    ------
    ValidationError
        When any rule is violated.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("schedule", "type", "Schedule must be a mapping of fields")

    # startTime first: a record without one is skipped, not rejected.
    start_time = _parse_time(raw, "startTime", required=True)
    assert start_time is not None
    frequency = _parse_frequency(raw.get("frequency"))

    if frequency is Frequency.HOURLY:
        return _parse_hourly(raw, start_time)
    if frequency is Frequency.DAILY:
        return _parse_daily(raw, start_time)
    if frequency is Frequency.WEEKLY:
        return _parse_weekly(raw, start_time)
    return _parse_monthly(raw, start_time)


def try_parse_schedule(
    raw: Mapping[str, Any],
) -> tuple[Schedule | None, ValidationError | None]:
    """Result-shaped variant of :func:`parse_schedule`.

    Returns ``(schedule, None)`` on success and ``(None, error)`` on failure.
    """
    try:
        return parse_schedule(raw), None
    except ValidationError as exc:
        return None, exc


# ===================================================================== #
#  Per-frequency rules                                                   #
# ===================================================================== #


def _parse_hourly(raw: Mapping[str, Any], start_time: TimeOfDay) -> HourlySchedule:
    _reject_monthly_fields(raw, Frequency.HOURLY)
    interval = _parse_interval(raw)
    if interval is not None and interval != 1:
        raise ValidationError(
            "intervalHours", "allowed_values", "Hourly requires intervalHours == 1"
        )
    end_time = _parse_time(raw, "endTime", required=False)
    if end_time is None:
        raise ValidationError("endTime", "required", "Hourly requires an endTime")
    _check_minute_alignment(start_time, end_time)
    return HourlySchedule(
        start_time=start_time,
        end_time=end_time,
        week_days=_normalize_all_days(_parse_weekdays(raw)),
    )


def _parse_daily(raw: Mapping[str, Any], start_time: TimeOfDay) -> DailySchedule:
    _reject_monthly_fields(raw, Frequency.DAILY)
    interval = _parse_interval(raw)
    if interval is None:
        interval = 24
    if interval not in DAILY_INTERVALS:
        raise ValidationError(
            "intervalHours",
            "allowed_values",
            f"Daily requires intervalHours in {sorted(DAILY_INTERVALS)}, got {interval}",
        )
    end_time = _parse_time(raw, "endTime", required=False)
    if interval < 24:
        if end_time is None:
            raise ValidationError(
                "endTime", "required", "Daily with intervalHours < 24 requires an endTime"
            )
        _check_minute_alignment(start_time, end_time)
    elif end_time is not None:
        raise ValidationError(
            "endTime", "forbidden", "Daily with intervalHours == 24 must not have an endTime"
        )
    return DailySchedule(
        start_time=start_time,
        interval_hours=interval,
        end_time=end_time,
        week_days=_normalize_all_days(_parse_weekdays(raw)),
    )


def _parse_weekly(raw: Mapping[str, Any], start_time: TimeOfDay) -> WeeklySchedule:
    _reject_monthly_fields(raw, Frequency.WEEKLY)
    _reject_end_time(raw, Frequency.WEEKLY)
    _reject_sub_day_interval(raw, Frequency.WEEKLY)
    week_days = _parse_weekdays(raw)
    if not week_days:
        raise ValidationError("weekDays", "min_length", "Weekly requires at least one weekday")
    return WeeklySchedule(start_time=start_time, week_days=week_days)


def _parse_monthly(raw: Mapping[str, Any], start_time: TimeOfDay) -> MonthlySchedule:
    _reject_end_time(raw, Frequency.MONTHLY)
    _reject_sub_day_interval(raw, Frequency.MONTHLY)
    if _parse_weekdays(raw):
        raise ValidationError(
            "weekDays", "forbidden", "Monthly must not have weekDays; use monthlyWeekDay"
        )

    month_days = _parse_month_days(raw.get("monthDays"))
    ordinal_raw = raw.get("monthlyOrdinal")
    weekday_raw = raw.get("monthlyWeekDay")
    has_ordinal = ordinal_raw is not None or weekday_raw is not None

    if month_days and has_ordinal:
        raise ValidationError(
            "monthDays",
            "exclusive",
            "Monthly must use either monthDays or monthlyOrdinal/monthlyWeekDay, not both",
        )
    if month_days:
        return MonthlySchedule(start_time=start_time, mode=OnDay(days=month_days))
    if not has_ordinal:
        raise ValidationError(
            "monthDays",
            "required",
            "Monthly requires monthDays or monthlyOrdinal with monthlyWeekDay",
        )
    if ordinal_raw is None:
        raise ValidationError(
            "monthlyOrdinal", "required", "monthlyWeekDay requires a monthlyOrdinal"
        )
    if weekday_raw is None:
        raise ValidationError(
            "monthlyWeekDay", "required", "monthlyOrdinal requires a monthlyWeekDay"
        )
    mode = OnOrdinalWeekday(
        ordinal=_parse_ordinal(ordinal_raw),
        weekday=_parse_weekday_name(weekday_raw, "monthlyWeekDay"),
    )
    return MonthlySchedule(start_time=start_time, mode=mode)


# ===================================================================== #
#  Field parsers                                                         #
# ===================================================================== #


def _parse_frequency(value: Any) -> Frequency:
    if value is None or value == "":
        raise ValidationError("frequency", "required", "frequency is required")
    if isinstance(value, Frequency):
        return value
    if isinstance(value, str):
        for frequency in Frequency:
            if frequency.value.lower() == value.strip().lower():
                return frequency
    allowed = ", ".join(f.value for f in Frequency)
    raise ValidationError(
        "frequency", "allowed_values", f"frequency must be one of {allowed}, got {value!r}"
    )


def _parse_time(raw: Mapping[str, Any], key: str, *, required: bool) -> TimeOfDay | None:
    value = raw.get(key)
    if value is None or value == "":
        if required:
            raise ValidationError(key, "required", f"{key} is required")
        return None
    if isinstance(value, TimeOfDay):
        return value
    if not isinstance(value, str):
        raise ValidationError(key, "type", f"{key} must be a string, got {type(value).__name__}")
    try:
        return TimeOfDay.parse(value)
    except ValueError as exc:
        raise ValidationError(key, "format", str(exc)) from None


def _parse_interval(raw: Mapping[str, Any]) -> int | None:
    value = raw.get("intervalHours")
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("intervalHours", "type", "intervalHours must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValidationError(
        "intervalHours", "type", f"intervalHours must be an integer, got {value!r}"
    )


def _parse_weekdays(raw: Mapping[str, Any]) -> frozenset[Weekday]:
    value = raw.get("weekDays")
    if value is None:
        return frozenset()
    if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
        raise ValidationError("weekDays", "type", "weekDays must be a list of day names")
    if len(value) > 7:
        raise ValidationError(
            "weekDays", "max_length", f"weekDays accepts at most 7 entries, got {len(value)}"
        )
    return frozenset(_parse_weekday_name(name, "weekDays") for name in value)


def _parse_weekday_name(value: Any, key: str) -> Weekday:
    if isinstance(value, Weekday):
        return value
    if not isinstance(value, str):
        raise ValidationError(key, "type", f"{key} must be a day name, got {value!r}")
    try:
        return Weekday.from_name(value.strip().capitalize())
    except ValueError as exc:
        raise ValidationError(key, "allowed_values", str(exc)) from None


def _parse_ordinal(value: Any) -> Ordinal:
    if isinstance(value, Ordinal):
        return value
    if isinstance(value, str):
        for ordinal in Ordinal:
            if ordinal.value.lower() == value.strip().lower():
                return ordinal
    allowed = ", ".join(o.value for o in Ordinal)
    raise ValidationError(
        "monthlyOrdinal", "allowed_values", f"monthlyOrdinal must be one of {allowed}, got {value!r}"
    )


def _parse_month_days(value: Any) -> frozenset[MonthDay]:
    if value is None:
        return frozenset()
    if isinstance(value, (str, int)) or not isinstance(value, (list, tuple, set, frozenset)):
        raise ValidationError("monthDays", "type", "monthDays must be a list")
    return frozenset(_parse_month_day(item) for item in value)


def _parse_month_day(value: Any) -> MonthDay:
    if isinstance(value, MonthDayToken):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lower() == MonthDayToken.LAST_DAY.value.lower():
            return MonthDayToken.LAST_DAY
        if not text.isdigit():
            raise ValidationError(
                "monthDays", "allowed_values", f"monthDays entries must be 1..31 or LastDay, got {value!r}"
            )
        value = int(text)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            "monthDays", "type", f"monthDays entries must be 1..31 or LastDay, got {value!r}"
        )
    if not 1 <= value <= 31:
        raise ValidationError("monthDays", "range", f"month day must be in [1, 31], got {value}")
    return value


# ===================================================================== #
#  Shared rules                                                          #
# ===================================================================== #


def _check_minute_alignment(start_time: TimeOfDay, end_time: TimeOfDay) -> None:
    if start_time.minute != end_time.minute:
        raise ValidationError(
            "endTime",
            "minute_alignment",
            f"endTime minute ({end_time.minute:02d}) must match startTime minute "
            f"({start_time.minute:02d})",
        )


def _reject_monthly_fields(raw: Mapping[str, Any], frequency: Frequency) -> None:
    for key in _MONTHLY_FIELDS:
        value = raw.get(key)
        if value is None or (key == "monthDays" and not value):
            continue
        raise ValidationError(key, "forbidden", f"{frequency.value} must not have {key}")


def _reject_end_time(raw: Mapping[str, Any], frequency: Frequency) -> None:
    if raw.get("endTime") not in (None, ""):
        raise ValidationError("endTime", "forbidden", f"{frequency.value} must not have an endTime")


def _reject_sub_day_interval(raw: Mapping[str, Any], frequency: Frequency) -> None:
    interval = _parse_interval(raw)
    if interval is not None and interval != 24:
        raise ValidationError(
            "intervalHours",
            "allowed_values",
            f"{frequency.value} requires intervalHours to be absent or 24",
        )


def _normalize_all_days(week_days: frozenset[Weekday]) -> frozenset[Weekday]:
    """An explicit all-seven selection is the same as "every day"."""
    return frozenset() if week_days == ALL_WEEKDAYS else week_days
