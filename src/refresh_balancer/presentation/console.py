"""Rich-based console dashboard with a plain-text mode.

:class:`ConsoleDashboard` renders analysis results, health metrics and
impact previews as Rich tables with colour.  Passing ``use_rich=False``
switches to simple ``print()``-based output that works in any terminal and
is what log files and tests read.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.table import Table as RichTable

from refresh_balancer.domain.distribution import HourlyDistribution
from refresh_balancer.domain.enums import HealthBand, Severity
from refresh_balancer.domain.occurrence import format_hour
from refresh_balancer.measurement.report import HealthMetrics
from refresh_balancer.services.analysis import AnalysisResult
from refresh_balancer.services.recommendations import Recommendation
from refresh_balancer.services.simulation import ImpactPreview

# ---------------------------------------------------------------------------
# Bar helpers
# ---------------------------------------------------------------------------

_BAR_CHAR = "█"
_SPARK_CHARS = " " + "▁▂▃▄▅▆▇█"

_BAND_COLOURS = {
    HealthBand.GREEN: "green",
    HealthBand.YELLOW: "yellow",
    HealthBand.RED: "red",
}

_SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
    Severity.SUGGESTION: "magenta",
    Severity.SUCCESS: "green",
}


def _bar(count: int, peak: int, width: int = 40) -> str:
    """Horizontal bar for *count*, scaled so *peak* fills *width*."""
    if peak <= 0 or count <= 0:
        return ""
    return _BAR_CHAR * max(1, round(count / peak * width))


def _sparkline(values: Sequence[float]) -> str:
    """One character per value, scaled between the minimum and maximum."""
    if not values:
        return ""
    lo, hi = min(values), max(values)
    span = hi - lo if hi != lo else 1.0
    n_chars = len(_SPARK_CHARS) - 1
    return "".join(
        _SPARK_CHARS[max(0, min(n_chars, int((v - lo) / span * n_chars)))] for v in values
    )


def _signed(value: float, suffix: str = "") -> str:
    return f"{value:+g}{suffix}"


# ---------------------------------------------------------------------------
# ConsoleDashboard
# ---------------------------------------------------------------------------

class ConsoleDashboard:
    """Console presentation layer for analysis results and previews.

    Parameters
    ----------
    use_rich:
        Render with Rich (default) or as plain text.
    file:
        Output stream.  Defaults to ``sys.stdout``.
    """

    def __init__(self, use_rich: bool = True, file: Any = None) -> None:
        self._file = file or sys.stdout
        self._use_rich = use_rich
        self._console = RichConsole(file=self._file) if use_rich else None

    # -- helpers -----------------------------------------------------------

    def _plain_print(self, *args: Any, **kwargs: Any) -> None:
        """Print to the configured output stream."""
        kwargs.setdefault("file", self._file)
        print(*args, **kwargs)

    # -- public API --------------------------------------------------------

    def print_analysis(self, result: AnalysisResult) -> None:
        """Print the full dashboard for one analysis run."""
        self.print_overview(result)
        self.print_hourly(result.hourly_distribution)
        self.print_health(result.health_metrics)
        self.print_recommendations(result.recommendations)
        if result.rejected or result.skipped:
            self.print_problems(result)

    def print_overview(self, result: AnalysisResult) -> None:
        distribution = result.hourly_distribution
        calendar = result.monthly_calendar
        lines = [
            f"Tasks: {len(result.task_details)}  "
            f"Runs/week: {distribution.total}  "
            f"Avg/hour: {distribution.mean:.1f}",
            "Peak hours: " + (", ".join(format_hour(h) for h in result.peak_hours) or "none"),
            "Quiet hours: " + ", ".join(format_hour(h) for h in result.quiet_hours),
            f"{calendar.month_name} {calendar.year}: {calendar.total} scheduled runs",
        ]
        if self._use_rich and self._console is not None:
            self._console.print()
            self._console.print("[bold]Refresh Load Overview[/bold]")
            for line in lines:
                self._console.print(f"  {line}")
        else:
            self._plain_print()
            self._plain_print("=== Refresh Load Overview ===")
            for line in lines:
                self._plain_print(f"  {line}")

    def print_hourly(self, distribution: HourlyDistribution, width: int = 40) -> None:
        """Print the runs-per-hour distribution as a bar chart."""
        if self._use_rich and self._console is not None:
            self._print_hourly_rich(distribution, width)
        else:
            self._print_hourly_plain(distribution, width)

    def print_health(self, health: HealthMetrics) -> None:
        """Print the four health KPIs with their bands."""
        if self._use_rich and self._console is not None:
            self._print_health_rich(health)
        else:
            self._plain_print()
            self._plain_print(health.summary())

    def print_recommendations(self, recommendations: Sequence[Recommendation]) -> None:
        if not recommendations:
            self._plain_print("[no recommendations]")
            return

        if self._use_rich and self._console is not None:
            self._console.print()
            self._console.print("[bold]Recommendations[/bold]")
            for rec in recommendations:
                style = _SEVERITY_STYLES.get(rec.severity, "")
                self._console.print(
                    f"  [{style}]{rec.severity.value.upper()}[/{style}] [bold]{rec.title}[/bold]"
                )
                self._console.print(f"    {escape(rec.message)}", highlight=False)
                if rec.action:
                    self._console.print(f"    [dim]-> {escape(rec.action)}[/dim]", highlight=False)
                for item in rec.affected_items:
                    self._console.print(f"      - {escape(item.name)} ({item.item_type.value})", highlight=False)
        else:
            self._plain_print()
            self._plain_print("=== Recommendations ===")
            for rec in recommendations:
                self._plain_print(f"  [{rec.severity.value.upper()}] {rec.title}")
                self._plain_print(f"    {rec.message}")
                if rec.action:
                    self._plain_print(f"    -> {rec.action}")
                for item in rec.affected_items:
                    self._plain_print(f"      - {item.name} ({item.item_type.value})")

    def print_problems(self, result: AnalysisResult) -> None:
        """List rejected and skipped records."""
        if self._use_rich and self._console is not None:
            table = RichTable(title="Records Not Analysed", show_header=True, header_style="bold cyan")
            table.add_column("Record", style="bold")
            table.add_column("Status")
            table.add_column("Field")
            table.add_column("Reason")
            for record_id, error in result.rejected:
                table.add_row(escape(record_id), "[red]rejected[/red]", error.field, escape(error.message))
            for record_id in result.skipped:
                table.add_row(escape(record_id), "[yellow]skipped[/yellow]", "startTime", "missing or unparseable")
            self._console.print()
            self._console.print(table)
        else:
            self._plain_print()
            self._plain_print("=== Records Not Analysed ===")
            for record_id, error in result.rejected:
                self._plain_print(f"  {record_id}: rejected ({error.field}) {error.message}")
            for record_id in result.skipped:
                self._plain_print(f"  {record_id}: skipped (startTime missing or unparseable)")

    def print_preview(self, preview: ImpactPreview) -> None:
        """Print a before/after comparison for a simulated batch of edits."""
        if self._use_rich and self._console is not None:
            self._print_preview_rich(preview)
        else:
            self._print_preview_plain(preview)

    # ======================================================================
    # Rich implementations
    # ======================================================================

    def _print_hourly_rich(self, distribution: HourlyDistribution, width: int) -> None:
        assert self._console is not None
        peak = max(distribution.counts)
        peak_hours = set(distribution.peak_hours())
        table = RichTable(title="Runs per Hour", show_header=True, header_style="bold cyan")
        table.add_column("Hour", style="bold", justify="right")
        table.add_column("Runs", justify="right")
        table.add_column("")
        for hour, count in enumerate(distribution.counts):
            colour = "red" if hour in peak_hours else "blue"
            table.add_row(format_hour(hour), str(count), f"[{colour}]{_bar(count, peak, width)}[/{colour}]")
        self._console.print()
        self._console.print(table)
        self._console.print(f"  {_sparkline(distribution.counts)}")

    def _print_health_rich(self, health: HealthMetrics) -> None:
        assert self._console is not None
        window = health.busiest_window
        rows = [
            ("Load Balance Score", f"{health.load_balance_score.value:g}", health.load_balance_score.band),
            ("Busiest 3h Window", f"{window.pct:g}% ({window.label})", window.band),
            ("Utilization", f"{health.utilization.value:g}%", health.utilization.band),
            ("Peak/Avg Ratio", f"{health.peak_avg_ratio.value:g}x", health.peak_avg_ratio.band),
        ]
        table = RichTable(title="Schedule Health", show_header=True, header_style="bold cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_column("Band", justify="center")
        for label, value, band in rows:
            colour = _BAND_COLOURS[band]
            table.add_row(label, f"[{colour}]{value}[/{colour}]", f"[{colour}]{band.value}[/{colour}]")
        self._console.print()
        self._console.print(table)

    def _print_preview_rich(self, preview: ImpactPreview) -> None:
        assert self._console is not None
        current, proposed = preview.current_metrics, preview.proposed_metrics
        deltas = preview.deltas

        table = RichTable(
            title=f"Impact Preview ({preview.edit_count} edits)",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Metric", style="bold")
        table.add_column("Current", justify="right")
        table.add_column("Proposed", justify="right")
        table.add_column("Change", justify="right")
        rows = [
            ("Load Balance Score", current.load_balance_score.value,
             proposed.load_balance_score.value, deltas.load_balance_score, True, ""),
            ("Busiest 3h Window", current.busiest_window.pct,
             proposed.busiest_window.pct, deltas.busy_window_pct, False, "%"),
            ("Utilization", current.utilization.value,
             proposed.utilization.value, deltas.utilization, True, "%"),
            ("Peak/Avg Ratio", current.peak_avg_ratio.value,
             proposed.peak_avg_ratio.value, deltas.peak_avg_ratio, False, "x"),
        ]
        for label, before, after, delta, higher_is_better, suffix in rows:
            if delta == 0:
                colour = "dim"
            elif (delta > 0) == higher_is_better:
                colour = "green"
            else:
                colour = "red"
            table.add_row(
                label,
                f"{before:g}{suffix}",
                f"{after:g}{suffix}",
                f"[{colour}]{_signed(delta, suffix)}[/{colour}]",
            )
        self._console.print()
        self._console.print(table)

        changed = preview.changed_hours()
        if changed:
            self._console.print("[bold]Changed hours[/bold]")
            for hour, (before, after) in changed.items():
                self._console.print(f"  {format_hour(hour):>5}: {before} -> {after}", highlight=False)
        self._console.print(f"  {preview.describe()}", highlight=False)

    # ======================================================================
    # Plain-text implementations
    # ======================================================================

    def _print_hourly_plain(self, distribution: HourlyDistribution, width: int) -> None:
        peak = max(distribution.counts)
        self._plain_print()
        self._plain_print("=== Runs per Hour ===")
        for hour, count in enumerate(distribution.counts):
            self._plain_print(f"{format_hour(hour):>5}  {count:>5}  {_bar(count, peak, width)}".rstrip())

    def _print_preview_plain(self, preview: ImpactPreview) -> None:
        current, proposed = preview.current_metrics, preview.proposed_metrics
        deltas = preview.deltas
        rows = [
            ("Load Balance Score", f"{current.load_balance_score.value:g}",
             f"{proposed.load_balance_score.value:g}", _signed(deltas.load_balance_score)),
            ("Busiest 3h Window", f"{current.busiest_window.pct:g}%",
             f"{proposed.busiest_window.pct:g}%", _signed(deltas.busy_window_pct, "%")),
            ("Utilization", f"{current.utilization.value:g}%",
             f"{proposed.utilization.value:g}%", _signed(deltas.utilization, "%")),
            ("Peak/Avg Ratio", f"{current.peak_avg_ratio.value:g}x",
             f"{proposed.peak_avg_ratio.value:g}x", _signed(deltas.peak_avg_ratio, "x")),
        ]
        metric_w = max(len(r[0]) for r in rows)
        header = f"{'Metric':<{metric_w}}  {'Current':>8}  {'Proposed':>8}  {'Change':>8}"

        self._plain_print()
        self._plain_print(f"=== Impact Preview ({preview.edit_count} edits) ===")
        self._plain_print(header)
        self._plain_print("-" * len(header))
        for label, before, after, change in rows:
            self._plain_print(f"{label:<{metric_w}}  {before:>8}  {after:>8}  {change:>8}")
        self._plain_print("-" * len(header))
        for hour, (before, after) in preview.changed_hours().items():
            self._plain_print(f"  {format_hour(hour):>5}: {before} -> {after}")
        self._plain_print(preview.describe())
