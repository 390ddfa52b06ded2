"""Command-line interface for the refresh balancer.

Provides subcommands for analysing a batch of refresh tasks, previewing
schedule edits, rendering schedules as API payloads and showing version
and configuration information.  Each subcommand imports its dependencies
lazily so that ``refresh-balancer info`` stays fast.

Entry point
-----------
The ``main()`` function is registered as a console script in
``pyproject.toml``::

    [project.scripts]
    refresh-balancer = "refresh_balancer.cli:main"

Usage examples::

    refresh-balancer analyze --input tasks.json --year 2026 --month 2
    refresh-balancer analyze --input tasks.json --format json --output ./out
    refresh-balancer simulate --input tasks.json --edits edits.json
    refresh-balancer simulate --input tasks.json --task t1 --task t2 --move-to 2
    refresh-balancer serialize --schedule schedule.json
    refresh-balancer serialize --xml payload.xml
    refresh-balancer info

Exit codes: 0 on success, 1 for unreadable or invalid input, 2 for usage
errors.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_USAGE_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="refresh-balancer",
        description=(
            "Refresh Balancer -- analyse extract-refresh schedule load and "
            "preview the effect of rescheduling."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Show version and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v for INFO, -vv for DEBUG).",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # -- analyze -----------------------------------------------------------
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyse the load of a batch of refresh tasks.",
        description=(
            "Load task records (raw records or the scheduling API's task "
            "listing) and print the load distribution, health and recommendations."
        ),
    )
    _add_input_arguments(analyze_parser)
    analyze_parser.add_argument(
        "--year",
        type=int,
        default=None,
        help="Calendar year to lay out.  Defaults to the current year in the site timezone.",
    )
    analyze_parser.add_argument(
        "--month",
        type=int,
        default=None,
        choices=range(1, 13),
        metavar="{1..12}",
        help="Calendar month to lay out.  Defaults to the current month in the site timezone.",
    )
    analyze_parser.add_argument(
        "--format",
        type=str,
        default="table",
        choices=["table", "plain", "json", "yaml"],
        help="Output format. (default: table)",
    )
    analyze_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Also export JSON and CSV files into this directory.",
    )

    # -- simulate ----------------------------------------------------------
    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Preview the impact of schedule edits.",
        description=(
            "Apply a batch of schedule edits (or move tasks to one hour) to the "
            "current load and compare health before and after."
        ),
    )
    _add_input_arguments(simulate_parser)
    simulate_parser.add_argument(
        "--edits",
        type=str,
        default=None,
        help='JSON file with a list of {"taskId": ..., "schedule": {...}} edits.',
    )
    simulate_parser.add_argument(
        "--task",
        dest="task_ids",
        action="append",
        default=[],
        help="Task id to move (repeatable).  Used with --move-to.",
    )
    simulate_parser.add_argument(
        "--move-to",
        type=int,
        default=None,
        choices=range(24),
        metavar="{0..23}",
        help="Hour to move every --task to.",
    )
    simulate_parser.add_argument(
        "--format",
        type=str,
        default="table",
        choices=["table", "plain", "json", "yaml"],
        help="Output format. (default: table)",
    )

    # -- serialize ---------------------------------------------------------
    serialize_parser = subparsers.add_parser(
        "serialize",
        help="Render a schedule as an API payload, or read one back.",
        description="Convert between raw schedule fields (JSON) and the API's XML payload.",
    )
    source = serialize_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--schedule",
        type=str,
        help="JSON file with raw schedule fields; prints the XML payload.",
    )
    source.add_argument(
        "--xml",
        type=str,
        help="XML payload file; prints the validated raw schedule fields as JSON.",
    )

    # -- info --------------------------------------------------------------
    info_parser = subparsers.add_parser(
        "info",
        help="Show version, dependencies and effective configuration.",
        description="Display version, dependency status, timezone and health thresholds.",
    )
    info_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (.json, .yaml or .yml) to show instead of the defaults.",
    )

    return parser


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="JSON file with a list of task records (or {\"tasks\": [...]}).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (.json, .yaml or .yml).  Defaults to environment settings.",
    )


# =========================================================================
# Input helpers
# =========================================================================

def _read_json(path: str) -> Any:
    with open(Path(path), "r", encoding="utf-8") as fh:
        return json.load(fh)


def _load_records(path: str) -> list[dict[str, Any]]:
    """Read task records, adapting API task listings when present."""
    from refresh_balancer.infrastructure.records import records_from_api_tasks

    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("tasks", data.get("task", []))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of task records")
    if any(isinstance(item, dict) and "extractRefresh" in item for item in data):
        logger.info("Adapting %d API task entries from %s", len(data), path)
        return records_from_api_tasks(data)
    return data


def _load_analyzer_config(path: str | None) -> Any:
    from refresh_balancer.infrastructure.config import AnalyzerConfig, load_config

    if path is None:
        return AnalyzerConfig.from_env()
    return load_config(path)


def _emit(data: dict[str, Any], fmt: str) -> None:
    if fmt == "yaml":
        import yaml

        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="")
    else:
        print(json.dumps(data, indent=2, default=str))


# =========================================================================
# Subcommand handlers
# =========================================================================

def _cmd_analyze(args: argparse.Namespace) -> int:
    """Handle the ``analyze`` subcommand."""
    from refresh_balancer.infrastructure.serialization import analysis_result_to_dict
    from refresh_balancer.presentation.console import ConsoleDashboard
    from refresh_balancer.services.analysis import RefreshAnalyzer

    analyzer = RefreshAnalyzer(_load_analyzer_config(args.config))
    result = analyzer.analyze(_load_records(args.input), year=args.year, month=args.month)

    if args.format in ("json", "yaml"):
        _emit(analysis_result_to_dict(result), args.format)
    else:
        ConsoleDashboard(use_rich=args.format == "table").print_analysis(result)

    if args.output is not None:
        from refresh_balancer.presentation.export import export_all

        files = export_all(result, args.output)
        print(f"\nExported to {args.output}:", file=sys.stderr)
        for fmt, paths in files.items():
            for p in paths:
                print(f"  [{fmt}] {p}", file=sys.stderr)

    return EXIT_OK


def _cmd_simulate(args: argparse.Namespace) -> int:
    """Handle the ``simulate`` subcommand."""
    from refresh_balancer.domain.exceptions import SimulationError
    from refresh_balancer.infrastructure.serialization import impact_preview_to_dict
    from refresh_balancer.presentation.console import ConsoleDashboard
    from refresh_balancer.services.analysis import RefreshAnalyzer
    from refresh_balancer.services.simulation import BatchEdit
    from refresh_balancer.services.validation import parse_schedule

    if (args.edits is None) == (args.move_to is None):
        print("Error: give exactly one of --edits or --move-to", file=sys.stderr)
        return EXIT_USAGE_ERROR
    if args.move_to is not None and not args.task_ids:
        print("Error: --move-to needs at least one --task", file=sys.stderr)
        return EXIT_USAGE_ERROR

    analyzer = RefreshAnalyzer(_load_analyzer_config(args.config))
    result = analyzer.analyze(_load_records(args.input))

    if args.move_to is not None:
        preview = analyzer.preview_move(result, args.task_ids, args.move_to)
    else:
        raw_edits = _read_json(args.edits)
        if not isinstance(raw_edits, list):
            raise ValueError(f"{args.edits}: expected a list of edits")
        edits: list[BatchEdit] = []
        for raw in raw_edits:
            task = result.task(str(raw.get("taskId")))
            if task is None:
                raise SimulationError(f"Task not found: {raw.get('taskId')}", task_id=raw.get("taskId"))
            edits.append(BatchEdit.for_task(task, parse_schedule(raw.get("schedule"))))
        preview = analyzer.preview(result, edits)

    if args.format in ("json", "yaml"):
        _emit(impact_preview_to_dict(preview), args.format)
    else:
        ConsoleDashboard(use_rich=args.format == "table").print_preview(preview)
    return EXIT_OK


def _cmd_serialize(args: argparse.Namespace) -> int:
    """Handle the ``serialize`` subcommand."""
    from refresh_balancer.infrastructure.serialization import schedule_to_raw
    from refresh_balancer.infrastructure.wire import parse_wire_document, serialize
    from refresh_balancer.services.validation import parse_schedule

    if args.schedule is not None:
        document = serialize(parse_schedule(_read_json(args.schedule)))
        print(document.xml)
    else:
        xml_text = Path(args.xml).read_text(encoding="utf-8")
        print(json.dumps(schedule_to_raw(parse_wire_document(xml_text)), indent=2))
    return EXIT_OK


def _cmd_info(args: argparse.Namespace) -> int:
    """Handle the ``info`` subcommand."""
    from importlib.metadata import PackageNotFoundError, version

    from refresh_balancer import __version__
    from refresh_balancer.measurement.engine import HealthMetricsEngine

    cfg = _load_analyzer_config(args.config)

    print(f"Refresh Balancer v{__version__}")
    print()

    dependencies = {
        "numpy": "Distribution statistics",
        "rich": "Console dashboard",
        "pyyaml": "YAML configuration and output",
        "tzdata": "IANA timezone database",
    }
    print("Dependencies:")
    for pkg, desc in dependencies.items():
        try:
            print(f"  [installed] {pkg} {version(pkg)} -- {desc}")
        except PackageNotFoundError:
            print(f"  [missing]   {pkg} -- {desc}")
    print()

    print(f"Site timezone: {cfg.timezone}")
    print(f"Business hours: {cfg.business_hours_start:02d}:00-{cfg.business_hours_end:02d}:00")
    print()

    print("Health Metrics:")
    engine = HealthMetricsEngine(cfg.health_thresholds)
    for name in engine.metric_names:
        threshold = cfg.health_thresholds[name]
        direction = "higher is better" if threshold.higher_is_better else "lower is better"
        print(f"  - {name}: green {threshold.green:g}, yellow {threshold.yellow:g} ({direction})")

    return EXIT_OK


# =========================================================================
# Main entry point
# =========================================================================

def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    from refresh_balancer.domain.exceptions import RefreshBalancerError

    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    # Handle --version at top level
    if args.version:
        from refresh_balancer import __version__
        print(f"refresh-balancer {__version__}")
        sys.exit(EXIT_OK)

    if args.command is None:
        parser.print_help(sys.stderr)
        sys.exit(EXIT_USAGE_ERROR)

    handlers: dict[str, Any] = {
        "analyze": _cmd_analyze,
        "simulate": _cmd_simulate,
        "serialize": _cmd_serialize,
        "info": _cmd_info,
    }

    handler = handlers[args.command]
    try:
        exit_code = handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    except RefreshBalancerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = EXIT_INPUT_ERROR
    except (OSError, ValueError) as exc:
        # json.JSONDecodeError is a ValueError
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = EXIT_INPUT_ERROR

    sys.exit(exit_code)
