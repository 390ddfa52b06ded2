"""Impact simulator: what a batch of schedule edits would do to the load.

Each :class:`BatchEdit` removes a task's old run hours (weighted by the
weekdays the task currently contributes) and adds its new run hours
(weighted by the new task-days, which approximates Monthly as 4).  The
per-hour net changes of all edits are summed first and applied to the
baseline once, clamping at zero, so the outcome does not depend on the order
of the edits.

Delta sign conventions (``proposed - current``)
-----------------------------------------------
``load_balance_score``  positive is better
``peak_avg_ratio``      negative is better
``busy_window_pct``     negative is better
``utilization``         positive is better
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from refresh_balancer.domain.distribution import HOURS_PER_DAY, HourlyDistribution
from refresh_balancer.domain.entities import RefreshTask
from refresh_balancer.domain.exceptions import SimulationError
from refresh_balancer.domain.occurrence import (
    effective_weekdays,
    expand_run_hours,
    format_hour,
    task_days,
)
from refresh_balancer.domain.values import (
    DailySchedule,
    HourlySchedule,
    MonthlySchedule,
    Schedule,
    WeeklySchedule,
)
from refresh_balancer.measurement.engine import HealthMetricsEngine
from refresh_balancer.measurement.report import HealthMetrics

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Edits                                                                 #
# ===================================================================== #


@dataclass(frozen=True)
class BatchEdit:
    """One proposed schedule change for one task.

    Attributes
    ----------
    task_id:
        Task being edited.
    old_run_hours / old_weight:
        Run hours of the current schedule and the number of weekdays it
        contributes to the distribution.
    new_run_hours / new_weight:
        Run hours and task-days of the proposed schedule.  Monthly schedules
        weigh ``MONTHLY_TASK_DAYS_APPROXIMATION``.
    new_schedule:
        The proposed schedule itself, when known.
    """

    task_id: str
    old_run_hours: tuple[int, ...]
    old_weight: int
    new_run_hours: tuple[int, ...]
    new_weight: int
    new_schedule: Schedule | None = None

    def __post_init__(self) -> None:
        for hour in (*self.old_run_hours, *self.new_run_hours):
            if not 0 <= hour < HOURS_PER_DAY:
                raise ValueError(f"run hour must be in [0, 23], got {hour}")
        if self.old_weight < 0 or self.new_weight < 0:
            raise ValueError("edit weights must be >= 0")

    @classmethod
    def for_task(cls, task: RefreshTask, new_schedule: Schedule) -> BatchEdit:
        """Edit moving *task* from its current schedule to *new_schedule*."""
        return cls(
            task_id=task.id,
            old_run_hours=task.run_hours,
            old_weight=len(task.effective_week_days),
            new_run_hours=expand_run_hours(new_schedule),
            new_weight=task_days(new_schedule),
            new_schedule=new_schedule,
        )

    @classmethod
    def between(cls, task_id: str, old_schedule: Schedule, new_schedule: Schedule) -> BatchEdit:
        return cls(
            task_id=task_id,
            old_run_hours=expand_run_hours(old_schedule),
            old_weight=len(effective_weekdays(old_schedule)),
            new_run_hours=expand_run_hours(new_schedule),
            new_weight=task_days(new_schedule),
            new_schedule=new_schedule,
        )

    def net_change(self) -> list[int]:
        """Per-hour signed change this edit makes, before clamping."""
        change = [0] * HOURS_PER_DAY
        for hour in self.old_run_hours:
            change[hour] -= self.old_weight
        for hour in self.new_run_hours:
            change[hour] += self.new_weight
        return change


# ===================================================================== #
#  Preview                                                               #
# ===================================================================== #


@dataclass(frozen=True)
class ImpactDeltas:
    """``proposed - current`` per metric.  See module docstring for signs."""

    load_balance_score: float
    peak_avg_ratio: float
    busy_window_pct: float
    utilization: float

    @classmethod
    def between(cls, current: HealthMetrics, proposed: HealthMetrics) -> ImpactDeltas:
        return cls(
            load_balance_score=proposed.load_balance_score.value - current.load_balance_score.value,
            peak_avg_ratio=round(proposed.peak_avg_ratio.value - current.peak_avg_ratio.value, 1),
            busy_window_pct=round(proposed.busiest_window.pct - current.busiest_window.pct, 1),
            utilization=proposed.utilization.value - current.utilization.value,
        )

    @property
    def improved(self) -> bool:
        return self.load_balance_score > 0

    def to_dict(self) -> dict[str, float]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class ImpactPreview:
    """Before/after distributions and health for a batch of edits."""

    current_dist: HourlyDistribution
    proposed_dist: HourlyDistribution
    current_metrics: HealthMetrics
    proposed_metrics: HealthMetrics
    deltas: ImpactDeltas
    edit_count: int = 0

    def changed_hours(self) -> dict[int, tuple[int, int]]:
        """``{hour: (current, proposed)}`` for hours whose count changed."""
        return {
            hour: (self.current_dist[hour], self.proposed_dist[hour])
            for hour in range(HOURS_PER_DAY)
            if self.current_dist[hour] != self.proposed_dist[hour]
        }

    def describe(self) -> str:
        delta = self.deltas.load_balance_score
        direction = "improved" if delta > 0 else "worsened" if delta < 0 else "unchanged"
        return (
            f"Load balance score {direction} by {abs(delta):g} points "
            f"({self.current_metrics.load_balance_score.value:g} -> "
            f"{self.proposed_metrics.load_balance_score.value:g})"
        )


# ===================================================================== #
#  Simulation                                                            #
# ===================================================================== #


def _as_distribution(baseline: HourlyDistribution | Mapping[int, int]) -> HourlyDistribution:
    if isinstance(baseline, HourlyDistribution):
        return baseline
    return HourlyDistribution.from_mapping(baseline)


def simulate(
    baseline: HourlyDistribution | Mapping[int, int],
    edits: Iterable[BatchEdit],
    engine: HealthMetricsEngine | None = None,
) -> ImpactPreview:
    """Apply *edits* to *baseline* and compare health before and after.

    Parameters
    ----------
    baseline:
        Current hourly distribution (or ``{hour: count}`` mapping).
    edits:
        Proposed edits; their order does not affect the result.
    engine:
        Health engine to use; defaults to one with the default thresholds.
    """
    current = _as_distribution(baseline)
    engine = engine or HealthMetricsEngine()
    edits = list(edits)

    net = [0] * HOURS_PER_DAY
    for edit in edits:
        for hour, change in enumerate(edit.net_change()):
            net[hour] += change
    proposed = HourlyDistribution(
        tuple(max(0, count + change) for count, change in zip(current.counts, net))
    )

    current_metrics = engine.compute(current)
    proposed_metrics = engine.compute(proposed)
    preview = ImpactPreview(
        current_dist=current,
        proposed_dist=proposed,
        current_metrics=current_metrics,
        proposed_metrics=proposed_metrics,
        deltas=ImpactDeltas.between(current_metrics, proposed_metrics),
        edit_count=len(edits),
    )
    logger.debug("Simulated %d edits: %s", len(edits), preview.describe())
    return preview


def retime(schedule: Schedule, target_hour: int) -> Schedule:
    """Move *schedule* so that it starts at *target_hour*.

    Sub-day Daily windows shift as a whole, keeping their length.  Hourly
    schedules cover a window of hours and cannot be retimed to one hour.
    """
    if not 0 <= target_hour < HOURS_PER_DAY:
        raise ValueError(f"target_hour must be in [0, 23], got {target_hour}")
    if isinstance(schedule, HourlySchedule):
        raise SimulationError("Hourly schedules cannot be moved to a single hour")

    start = schedule.start_time.replace_hour(target_hour)
    if isinstance(schedule, DailySchedule) and schedule.end_time is not None:
        shift = target_hour - schedule.start_time.hour
        end = schedule.end_time.replace_hour((schedule.end_time.hour + shift) % HOURS_PER_DAY)
        return dataclasses.replace(schedule, start_time=start, end_time=end)
    if isinstance(schedule, (DailySchedule, WeeklySchedule, MonthlySchedule)):
        return dataclasses.replace(schedule, start_time=start)
    raise TypeError(f"Unsupported schedule type: {type(schedule).__name__}")


def simulate_move(
    baseline: HourlyDistribution | Mapping[int, int],
    tasks: Sequence[RefreshTask],
    target_hour: int,
    engine: HealthMetricsEngine | None = None,
) -> ImpactPreview:
    """Preview moving every task in *tasks* to start at *target_hour*.

    Raises
    ------
    SimulationError
        If any task has an Hourly schedule.
    """
    edits: list[BatchEdit] = []
    for task in tasks:
        if task.is_hourly:
            raise SimulationError(
                f"Task {task.display_name!r} ({task.id}) is an hourly schedule and cannot "
                "be moved to a single hour",
                task_id=task.id,
            )
        edits.append(BatchEdit.for_task(task, retime(task.schedule, target_hour)))
    logger.info("Simulating move of %d task(s) to %s", len(edits), format_hour(target_hour))
    return simulate(baseline, edits, engine)

