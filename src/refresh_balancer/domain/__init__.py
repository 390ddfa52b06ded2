"""Domain layer for the refresh balancer.

Re-exports all public domain types so that consumers can write::

    from refresh_balancer.domain import DailySchedule, RefreshTask, Weekday
"""

# -- Enumerations -------------------------------------------------------------
from .enums import (
    ALL_WEEKDAYS,
    LAST_DAY,
    Frequency,
    HealthBand,
    ItemType,
    MonthDayToken,
    Ordinal,
    Severity,
    Weekday,
)

# -- Value Objects ------------------------------------------------------------
from .values import (
    DailySchedule,
    HourlySchedule,
    MonthlySchedule,
    OnDay,
    OnOrdinalWeekday,
    Schedule,
    TimeOfDay,
    WeeklySchedule,
)

# -- Occurrence Engine --------------------------------------------------------
from .occurrence import (
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

# -- Distribution -------------------------------------------------------------
from .distribution import HOURS_PER_DAY, HourlyDistribution

# -- Entities -----------------------------------------------------------------
from .entities import RefreshTask

# -- Exceptions ---------------------------------------------------------------
from .exceptions import (
    ConfigurationError,
    RefreshBalancerError,
    SimulationError,
    ValidationError,
)

__all__ = [
    # enums
    "ALL_WEEKDAYS",
    "LAST_DAY",
    "Frequency",
    "HealthBand",
    "ItemType",
    "MonthDayToken",
    "Ordinal",
    "Severity",
    "Weekday",
    # values
    "DailySchedule",
    "HourlySchedule",
    "MonthlySchedule",
    "OnDay",
    "OnOrdinalWeekday",
    "Schedule",
    "TimeOfDay",
    "WeeklySchedule",
    # occurrence
    "MONTHLY_TASK_DAYS_APPROXIMATION",
    "days_in_month",
    "effective_weekdays",
    "expand_run_hours",
    "fire_dates",
    "first_weekday_of_month",
    "format_hour",
    "schedule_fires_on_date",
    "task_days",
    # distribution
    "HOURS_PER_DAY",
    "HourlyDistribution",
    # entities
    "RefreshTask",
    # exceptions
    "ConfigurationError",
    "RefreshBalancerError",
    "SimulationError",
    "ValidationError",
]
