"""Main CLI entry point for Stagecoach."""

from __future__ import annotations

import argparse
import dataclasses
import sys

from stagecoach.cli.commands import run, validate
from stagecoach.config import ExecutorConfig, parse_level
from stagecoach.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stagecoach",
        description="Stagecoach - sequential deployment pipeline runner",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Execute a pipeline definition")
    run_parser.add_argument("pipeline", help="Path to the pipeline YAML file")
    run_parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Override an environment binding (repeatable)",
    )
    run_parser.add_argument(
        "--commit",
        help="Commit hash to deploy (default: $COMMIT, then git rev-parse --short HEAD)",
    )
    run_parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit JSON log lines instead of console output",
    )
    run_parser.add_argument(
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    run_parser.add_argument(
        "--uniform-exit-code",
        action="store_true",
        default=None,
        help="Exit with 1 on any failure instead of the failing command's exit code",
    )
    run_parser.add_argument(
        "--report",
        metavar="FILE",
        help="Write the run summary as JSON to FILE",
    )

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Check a pipeline definition without running it")
    validate_parser.add_argument("pipeline", help="Path to the pipeline YAML file")
    validate_parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Override an environment binding (repeatable)",
    )

    return parser


def apply_flags(config: ExecutorConfig, args: argparse.Namespace) -> ExecutorConfig:
    """Command-line flags win over STAGECOACH_* environment variables."""
    changes = {}
    if getattr(args, "json_logs", None):
        changes["log_json"] = True
    if getattr(args, "log_level", None):
        changes["log_level"] = parse_level(args.log_level)
    if getattr(args, "uniform_exit_code", None):
        changes["uniform_exit_code"] = True
    return dataclasses.replace(config, **changes) if changes else config


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in ("run", "validate"):
        parser.print_help()
        sys.exit(1)

    config = apply_flags(ExecutorConfig.from_env(), args)
    configure_logging(json_format=config.log_json, level=config.log_level)

    if args.command == "run":
        code = run(args.pipeline, args.assignments, args.commit, config, report_path=args.report)
    else:
        code = validate(args.pipeline, args.assignments)
    sys.exit(code)


if __name__ == "__main__":
    main()
