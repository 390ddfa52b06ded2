"""Export utilities for analysis results.

Supports JSON (any object :func:`~refresh_balancer.infrastructure.serialization.serialize`
knows) and CSV (the hourly distribution and the per-task table).
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.domain.occurrence import format_hour
from refresh_balancer.infrastructure.serialization import to_json
from refresh_balancer.services.analysis import AnalysisResult

TASK_COLUMNS = [
    "id",
    "item_name",
    "item_type",
    "project_name",
    "frequency",
    "start_time",
    "run_hours",
    "days",
    "task_days",
    "consecutive_failures",
]

# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def export_json(obj: Any, path: str) -> None:
    """Export an analysis result, preview or other known object to JSON.

    Parameters
    ----------
    obj:
        Any object with a registered serializer.
    path:
        File path for the JSON output.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(to_json(obj), encoding="utf-8")


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def export_hourly_csv(distribution: HourlyDistribution, path: str) -> None:
    """Write one row per hour: ``hour``, ``label``, ``runs``."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(["hour", "label", "runs"])
        for hour, count in enumerate(distribution.counts):
            writer.writerow([hour, format_hour(hour), count])


def export_csv(result: AnalysisResult, path: str) -> None:
    """Export the per-task table of *result* to a CSV file.

    Multi-valued cells (run hours, days) are joined with ``;``.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(TASK_COLUMNS)
        for task in result.task_details:
            days = sorted(task.effective_week_days, key=lambda d: d.index)
            writer.writerow([
                task.id,
                task.display_name,
                task.item_type.value,
                task.project_name,
                task.schedule.frequency.value,
                str(task.schedule.start_time),
                ";".join(str(h) for h in task.run_hours),
                ";".join(day.value for day in days),
                task.task_days,
                task.consecutive_failures,
            ])


# ---------------------------------------------------------------------------
# Batch export
# ---------------------------------------------------------------------------

def export_all(
    result: AnalysisResult,
    output_dir: str,
    formats: list[str] | None = None,
) -> dict[str, list[str]]:
    """Export *result* in several formats at once.

    Parameters
    ----------
    result:
        Analysis result to export.
    output_dir:
        Directory to write output files into.
    formats:
        ``"json"`` and/or ``"csv"``.  Defaults to both.

    Returns
    -------
    dict[str, list[str]]
        Mapping of format name to list of generated file paths.
    """
    if formats is None:
        formats = ["json", "csv"]

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    files: dict[str, list[str]] = {}

    if "json" in formats:
        json_path = str(out / "analysis.json")
        export_json(result, json_path)
        files["json"] = [json_path]

    if "csv" in formats:
        tasks_path = str(out / "tasks.csv")
        hourly_path = str(out / "hourly.csv")
        export_csv(result, tasks_path)
        export_hourly_csv(result.hourly_distribution, hourly_path)
        files["csv"] = [tasks_path, hourly_path]

    return files
