"""Analysis orchestration: raw records in, ``AnalysisResult`` out.

:class:`RefreshAnalyzer` wires the task loader, the aggregation engine, the
health metrics engine and the recommendation rules into one call.  It keeps
no state between calls; callers that want caching memoise whole results.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.domain.entities import RefreshTask
from refresh_balancer.domain.enums import Weekday
from refresh_balancer.domain.exceptions import SimulationError, ValidationError
from refresh_balancer.infrastructure.config import AnalyzerConfig
from refresh_balancer.measurement.engine import HealthMetricsEngine
from refresh_balancer.measurement.report import HealthMetrics
from refresh_balancer.services.aggregation import (
    Heatmap,
    LoadComposition,
    MonthlyCalendar,
    build_daily_totals,
    build_heatmap,
    build_hourly_distribution,
    build_load_composition,
    build_monthly_calendar,
    tasks_by_hour,
)
from refresh_balancer.services.recommendations import Recommendation, generate_recommendations
from refresh_balancer.services.simulation import BatchEdit, ImpactPreview, simulate, simulate_move
from refresh_balancer.services.tasks import TaskLoadResult, load_tasks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything the presentation layer needs for one analysis run.

    Attributes
    ----------
    hourly_distribution:
        Occurrence counts per hour of day.
    heatmap:
        Occurrence counts per (weekday, hour).
    monthly_calendar:
        Runs per date of the analysed month.
    health_metrics:
        Banded KPIs of ``hourly_distribution``.
    task_details:
        Loaded tasks, in input order.
    rejected:
        ``(record_id, error)`` pairs for records that failed validation.
    skipped:
        Ids of records left out for a missing or unparseable start time.
    """

    hourly_distribution: HourlyDistribution
    heatmap: Heatmap
    monthly_calendar: MonthlyCalendar
    health_metrics: HealthMetrics
    task_details: tuple[RefreshTask, ...]
    daily_totals: dict[Weekday, int] = field(default_factory=dict)
    load_composition: LoadComposition | None = None
    peak_hours: tuple[int, ...] = ()
    quiet_hours: tuple[int, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()
    rejected: tuple[tuple[str, ValidationError], ...] = ()
    skipped: tuple[str, ...] = ()

    @property
    def total_runs(self) -> int:
        return self.hourly_distribution.total

    def task(self, task_id: str) -> RefreshTask | None:
        for task in self.task_details:
            if task.id == task_id:
                return task
        return None


class RefreshAnalyzer:
    """Runs a full analysis over a batch of raw task records.

    Parameters
    ----------
    config:
        Analyzer configuration; defaults to :class:`AnalyzerConfig` defaults.
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self.config = config or AnalyzerConfig()
        self.engine = HealthMetricsEngine(self.config.health_thresholds)

    def analyze(
        self,
        records: Iterable[Mapping[str, Any]],
        year: int | None = None,
        month: int | None = None,
        now: datetime.datetime | None = None,
    ) -> AnalysisResult:
        """Load *records* and analyse the resulting tasks.

        The calendar covers (*year*, *month*); when either is omitted the
        current month in the configured site timezone is used.
        """
        loaded = load_tasks(records)
        return self.analyze_tasks(loaded.tasks, year, month, now=now, loaded=loaded)

    def analyze_tasks(
        self,
        tasks: Sequence[RefreshTask],
        year: int | None = None,
        month: int | None = None,
        *,
        now: datetime.datetime | None = None,
        loaded: TaskLoadResult | None = None,
    ) -> AnalysisResult:
        if year is None or month is None:
            current_year, current_month = self.config.current_year_month(now)
            year = current_year if year is None else year
            month = current_month if month is None else month

        distribution = build_hourly_distribution(tasks)
        composition = build_load_composition(tasks)
        by_hour = tasks_by_hour(tasks)
        recommendations = generate_recommendations(
            distribution,
            composition,
            by_hour,
            business_hours=(self.config.business_hours_start, self.config.business_hours_end),
        )

        result = AnalysisResult(
            hourly_distribution=distribution,
            heatmap=build_heatmap(tasks),
            monthly_calendar=build_monthly_calendar(tasks, year, month),
            health_metrics=self.engine.compute(distribution),
            task_details=tuple(tasks),
            daily_totals=build_daily_totals(tasks),
            load_composition=composition,
            peak_hours=tuple(distribution.peak_hours(self.config.peak_hour_count)),
            quiet_hours=tuple(distribution.quiet_hours(self.config.quiet_hour_count)),
            recommendations=tuple(recommendations),
            rejected=loaded.rejected if loaded else (),
            skipped=loaded.skipped if loaded else (),
        )
        logger.info(
            "Analysed %d tasks for %04d-%02d: %d runs/week, load balance score %g",
            len(tasks), year, month, result.total_runs,
            result.health_metrics.load_balance_score.value,
        )
        return result

    def preview(self, result: AnalysisResult, edits: Iterable[BatchEdit]) -> ImpactPreview:
        """Simulate *edits* against the distribution of *result*."""
        return simulate(result.hourly_distribution, edits, self.engine)

    def preview_move(
        self, result: AnalysisResult, task_ids: Sequence[str], target_hour: int
    ) -> ImpactPreview:
        """Simulate moving the tasks named by *task_ids* to *target_hour*.

        Raises
        ------
        SimulationError
            If a task id is unknown or names an Hourly task.
        """
        missing = [task_id for task_id in task_ids if result.task(task_id) is None]
        if missing:
            raise SimulationError(f"Tasks not found: {', '.join(missing)}", task_id=missing[0])
        tasks = [result.task(task_id) for task_id in task_ids]
        return simulate_move(result.hourly_distribution, tasks, target_hour, self.engine)
