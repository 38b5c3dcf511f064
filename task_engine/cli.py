"""CLI for the task engine."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console

from .config_loader import (
    ConfigLoader,
    EngineConfig,
    LogLevel,
    PriorityFilter,
    create_default_config,
    load_config,
)
from .decomposer import TaskDecomposer
from .exceptions import TaskEngineError
from .logging_config import configure_from_config
from .recommender import RecommendationEngine
from .report import render_breakdown, render_recommendations
from .snapshot import load_snapshot

console = Console()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", "-c", help="Path to YAML configuration file")
    common.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        help="Override the configured log level",
    )
    common.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    parser = argparse.ArgumentParser(
        prog="task-engine",
        description="Rank open work items and break large ones into subtasks",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Next command
    next_parser = subparsers.add_parser(
        "next", parents=[common], help="Recommend the next items to work on"
    )
    next_parser.add_argument("snapshot", help="Path to a JSON or YAML work item snapshot")
    next_parser.add_argument("--assignee", "-a", help="Only consider items assigned to this login")
    next_parser.add_argument(
        "--priority",
        choices=[p.value for p in PriorityFilter],
        help="Minimum priority class",
    )
    next_parser.add_argument(
        "--include-blocked",
        action="store_true",
        default=None,
        help="Keep items that are not ready",
    )
    next_parser.add_argument(
        "--penalty", type=float, help="Context switch penalty for assigned items"
    )
    next_parser.add_argument("--limit", "-n", type=int, help="Maximum number of recommendations")
    next_parser.add_argument(
        "--member",
        "-m",
        action="append",
        default=[],
        help="Team member login (repeatable; overrides the snapshot roster)",
    )

    # Expand command
    expand_parser = subparsers.add_parser(
        "expand", parents=[common], help="Decompose a work item into subtasks"
    )
    expand_parser.add_argument("snapshot", help="Path to a JSON or YAML work item snapshot")
    expand_parser.add_argument("--item", "-i", type=int, required=True, help="Item number")
    expand_parser.add_argument(
        "--template",
        "-t",
        default="auto",
        help="Template: auto, feature, bug or refactor",
    )
    expand_parser.add_argument("--max-subtasks", type=int, help="Maximum number of subtasks")
    expand_parser.add_argument("--min-complexity", type=int, help="Minimum subtask complexity")
    expand_parser.add_argument(
        "--force", action="store_true", help="Expand even low-complexity items"
    )

    # Config command
    config_parser = subparsers.add_parser("config", help="Write the default configuration")
    config_parser.add_argument("--output", "-o", required=True, help="Output file path")

    # Version command
    subparsers.add_parser("version", help="Show version information")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        from . import __version__

        console.print(f"[bold blue]Task Engine[/bold blue] v{__version__}")
        return 0

    try:
        if args.command == "config":
            return write_default_config(args.output)

        if args.command == "next":
            return recommend_next(args, _load_engine_config(args))

        if args.command == "expand":
            return expand_item(args, _load_engine_config(args))

    except TaskEngineError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        return 1

    # No command provided, show help
    parser.print_help()
    return 0


def _load_engine_config(args: argparse.Namespace) -> EngineConfig:
    """Load configuration and set up logging for a command."""
    config = load_config(args.config) if args.config else create_default_config()
    if args.log_level:
        config.logging.level = LogLevel(args.log_level)
    configure_from_config(config.logging)
    return config


def recommend_next(args: argparse.Namespace, config: EngineConfig) -> int:
    """Rank the snapshot and print recommendations."""
    snapshot = load_snapshot(args.snapshot)
    engine = RecommendationEngine(config)

    result = engine.recommend(
        snapshot.items,
        roster=args.member or snapshot.roster,
        assignee=args.assignee,
        priority_filter=args.priority,
        include_blocked=args.include_blocked,
        context_switch_penalty=args.penalty,
        max_recommendations=args.limit,
    )

    if args.json:
        console.print_json(data=result.to_dict())
    else:
        console.print(render_recommendations(result))
    return 0


def expand_item(args: argparse.Namespace, config: EngineConfig) -> int:
    """Decompose one snapshot item and print the breakdown."""
    snapshot = load_snapshot(args.snapshot)
    decomposer = TaskDecomposer(config)

    result = decomposer.decompose_by_number(
        snapshot.items,
        args.item,
        template_type=args.template,
        max_subtasks=args.max_subtasks,
        min_complexity=args.min_complexity,
        force=args.force,
    )

    if args.json:
        console.print_json(
            data={
                "item": result.item.number,
                "original_complexity": result.original_complexity,
                "advisory": result.advisory,
                "breakdown": result.breakdown.to_dict() if result.breakdown else None,
            }
        )
    else:
        console.print(render_breakdown(result))
    return 0


def write_default_config(output: str) -> int:
    """Write the default configuration as YAML."""
    path = ConfigLoader().export_to_yaml(Path(output), create_default_config())
    console.print(f"[green]Configuration written to[/green] {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
