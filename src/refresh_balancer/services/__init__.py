"""Service layer for the refresh balancer.

Re-exports public service types for convenient top-level access::

    from refresh_balancer.services import (
        parse_schedule, try_parse_schedule,
        load_tasks, task_from_record, TaskLoadResult,
        build_hourly_distribution, build_heatmap, build_monthly_calendar,
        BatchEdit, simulate, simulate_move,
        generate_recommendations,
        RefreshAnalyzer, AnalysisResult,
    )
"""

from refresh_balancer.services.aggregation import (
    Heatmap,
    HeatmapCell,
    LoadComposition,
    MonthlyCalendar,
    build_daily_totals,
    build_heatmap,
    build_hourly_distribution,
    build_load_composition,
    build_monthly_calendar,
    failing_tasks,
    filter_tasks,
    tasks_by_hour,
    tasks_on_date,
    tasks_on_weekday,
)
from refresh_balancer.services.analysis import AnalysisResult, RefreshAnalyzer
from refresh_balancer.services.recommendations import (
    AffectedItem,
    Recommendation,
    TimeSlot,
    generate_recommendations,
    time_slots,
)
from refresh_balancer.services.simulation import (
    BatchEdit,
    ImpactDeltas,
    ImpactPreview,
    retime,
    simulate,
    simulate_move,
)
from refresh_balancer.services.tasks import TaskLoadResult, load_tasks, task_from_record
from refresh_balancer.services.validation import (
    DAILY_INTERVALS,
    parse_schedule,
    try_parse_schedule,
)

__all__ = [
    # Validation
    "DAILY_INTERVALS",
    "parse_schedule",
    "try_parse_schedule",
    # Tasks
    "TaskLoadResult",
    "load_tasks",
    "task_from_record",
    # Aggregation
    "Heatmap",
    "HeatmapCell",
    "LoadComposition",
    "MonthlyCalendar",
    "build_daily_totals",
    "build_heatmap",
    "build_hourly_distribution",
    "build_load_composition",
    "build_monthly_calendar",
    "failing_tasks",
    "filter_tasks",
    "tasks_by_hour",
    "tasks_on_date",
    "tasks_on_weekday",
    # Simulation
    "BatchEdit",
    "ImpactDeltas",
    "ImpactPreview",
    "retime",
    "simulate",
    "simulate_move",
    # Recommendations
    "AffectedItem",
    "Recommendation",
    "TimeSlot",
    "generate_recommendations",
    "time_slots",
    # Orchestration
    "AnalysisResult",
    "RefreshAnalyzer",
]
