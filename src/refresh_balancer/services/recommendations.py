"""Load-balancing recommendations derived from an hourly distribution.

Rules, evaluated in order:

1. Peak/avg above 3 is a critical imbalance, above 2 a moderate one.
   Either is followed by an info entry when more than 80% of the peak hour
   comes from Hourly schedules, which cannot be moved.
2. More than 80% of all runs inside business hours is an info entry.
3. A peak hour carrying more than five runs over the quietest hour yields a
   suggestion to move work there.
4. When nothing fired, a single success entry.

A distribution with no load produces no recommendations at all.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from refresh_balancer.domain.distribution import HOURS_PER_DAY, HourlyDistribution
from refresh_balancer.domain.entities import RefreshTask
from refresh_balancer.domain.enums import ItemType, Severity
from refresh_balancer.domain.occurrence import format_hour
from refresh_balancer.measurement.metrics.base import round_half_up
from refresh_balancer.services.aggregation import LoadComposition

logger = logging.getLogger(__name__)

CRITICAL_RATIO = 3.0
WARNING_RATIO = 2.0
FIXED_SHARE_LIMIT = 0.8
BUSINESS_SHARE_LIMIT = 0.8
QUIET_SLOT_MARGIN = 5
MAX_AFFECTED_ITEMS = 5


@dataclass(frozen=True)
class AffectedItem:
    name: str
    item_type: ItemType
    project_name: str = ""


@dataclass(frozen=True)
class Recommendation:
    """One actionable observation about the load distribution."""

    severity: Severity
    title: str
    message: str
    action: str = ""
    affected_items: tuple[AffectedItem, ...] = ()


@dataclass(frozen=True)
class TimeSlot:
    hour: int
    label: str
    count: int


def affected_items(tasks: Iterable[RefreshTask], limit: int = MAX_AFFECTED_ITEMS) -> tuple[AffectedItem, ...]:
    """Distinct items among *tasks*, most consecutive failures first."""
    ordered = sorted(tasks, key=lambda task: -task.consecutive_failures)
    seen: set[str] = set()
    items: list[AffectedItem] = []
    for task in ordered:
        name = task.item_name or "Unknown"
        if name in seen:
            continue
        seen.add(name)
        items.append(AffectedItem(name=name, item_type=task.item_type, project_name=task.project_name))
        if len(items) >= limit:
            break
    return tuple(items)


def _fixed_share_note(peak_hour: int, peak_total: int, peak_fixed: int) -> Recommendation | None:
    if peak_total == 0 or peak_fixed / peak_total <= FIXED_SHARE_LIMIT:
        return None
    share = round_half_up(peak_fixed / peak_total * 100)
    return Recommendation(
        severity=Severity.INFO,
        title="Peak Dominated by Hourly Schedules",
        message=(
            f"{format_hour(peak_hour)} load is {share}% from hourly schedules; "
            "these cannot be rescheduled to a different time."
        ),
        action="Focus on moving non-hourly tasks away from this hour.",
    )


def generate_recommendations(
    distribution: HourlyDistribution,
    composition: LoadComposition | None = None,
    tasks_by_hour: Mapping[int, Sequence[RefreshTask]] | None = None,
    *,
    business_hours: tuple[int, int] = (8, 18),
) -> list[Recommendation]:
    """Recommendations for spreading the load in *distribution*.

    Parameters
    ----------
    distribution:
        Hourly occurrence counts.
    composition:
        Fixed vs moveable split; enables the Hourly-dominance notes.
    tasks_by_hour:
        Tasks indexed by run hour; enables ``affected_items``.
    business_hours:
        ``(start, end)`` hours, end exclusive.
    """
    peak_hours = distribution.peak_hours()
    if not peak_hours:
        return []

    tasks_by_hour = tasks_by_hour or {}
    peak = peak_hours[0]
    quietest = distribution.quiet_hours(1)[0]
    peak_total = distribution[peak]
    peak_fixed = composition.hourly_by_hour[peak] if composition else 0
    peak_items = affected_items(tasks_by_hour.get(peak, ()))
    recommendations: list[Recommendation] = []

    ratio = max(distribution.counts) / distribution.mean
    if ratio > WARNING_RATIO:
        fixed_note = (
            f" ({peak_fixed} of {peak_total} runs are from hourly schedules and cannot be moved.)"
            if peak_fixed > 0
            else ""
        )
        if ratio > CRITICAL_RATIO:
            recommendations.append(Recommendation(
                severity=Severity.CRITICAL,
                title="Severe Load Imbalance",
                message=(
                    f"Peak hours have {ratio:.1f}x the average load. "
                    f"Consider distributing refreshes more evenly.{fixed_note}"
                ),
                action=(
                    f"Move some refreshes from {format_hour(peak)} to quieter hours "
                    f"like {format_hour(quietest)}."
                ),
                affected_items=peak_items,
            ))
        else:
            recommendations.append(Recommendation(
                severity=Severity.WARNING,
                title="Moderate Load Imbalance",
                message=f"Peak hours have {ratio:.1f}x the average load.{fixed_note}",
                action="Consider spreading refreshes across more hours.",
                affected_items=peak_items,
            ))
        note = _fixed_share_note(peak, peak_total, peak_fixed)
        if note is not None:
            recommendations.append(note)

    start, end = business_hours
    in_business = sum(distribution[h] for h in range(start, end))
    if in_business / distribution.total > BUSINESS_SHARE_LIMIT:
        recommendations.append(Recommendation(
            severity=Severity.INFO,
            title="High Business Hours Concentration",
            message=(
                f"{round_half_up(in_business / distribution.total * 100)}% of refreshes run during "
                f"business hours ({format_hour(start)} - {format_hour(end % HOURS_PER_DAY)})."
            ),
            action="Consider moving non-critical refreshes to early morning or evening.",
        ))

    quiet_count = distribution[quietest]
    if peak_total > quiet_count + QUIET_SLOT_MARGIN:
        recommendations.append(Recommendation(
            severity=Severity.SUGGESTION,
            title="Recommended Time Slots",
            message=(
                f"The hour starting at {format_hour(quietest)} has minimal activity "
                f"({quiet_count} refreshes)."
            ),
            action=(
                f"This is a good candidate for moving refreshes from {format_hour(peak)} "
                f"({peak_total} refreshes)."
            ),
            affected_items=peak_items,
        ))

    if not recommendations:
        recommendations.append(Recommendation(
            severity=Severity.SUCCESS,
            title="Load Distribution Looks Good",
            message="Refresh load appears reasonably distributed across hours.",
            action="Continue monitoring for changes in patterns.",
        ))

    logger.debug("Generated %d recommendations", len(recommendations))
    return recommendations


def time_slots(distribution: HourlyDistribution) -> list[TimeSlot]:
    """All 24 hours as slots, quietest first."""
    return [
        TimeSlot(hour=hour, label=format_hour(hour), count=distribution[hour])
        for hour in distribution.by_quietness()
    ]
