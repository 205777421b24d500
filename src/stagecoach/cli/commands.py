"""CLI command implementations for Stagecoach."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

from stagecoach.config import ExecutorConfig
from stagecoach.errors import DefinitionError, StagecoachError
from stagecoach.executor import PipelineExecutor
from stagecoach.git import GitRepository
from stagecoach.loader import load_pipeline, parse_assignments
from stagecoach.logging import get_logger
from stagecoach.tasks.registry import build_registry


def resolve_commit(explicit: str | None, overrides: dict[str, str], workdir: str = ".") -> str | None:
    """
    Commit hash for the run.

    First of: ``--commit``, a ``COMMIT`` override, the ``COMMIT`` environment
    variable, ``git rev-parse --short HEAD`` in the working directory.
    """
    commit = explicit or overrides.get("COMMIT") or os.environ.get("COMMIT")
    if commit:
        return commit
    try:
        return GitRepository(workdir, timeout=30).short_head() or None
    except StagecoachError as e:
        get_logger("stagecoach.cli").warning("commit_unresolved", error=str(e))
        return None


def report_definition_error(error: DefinitionError) -> None:
    print(f"Error: {error.message}", file=sys.stderr)
    for problem in error.problems:
        if problem != error.message:
            print(f"  - {problem}", file=sys.stderr)


def run(
    pipeline_path: str,
    assignments: list[str] | None,
    commit: str | None,
    config: ExecutorConfig,
    report_path: str | None = None,
) -> int:
    """Load and execute a pipeline. Returns the process exit code."""
    log = get_logger("stagecoach.cli")
    try:
        overrides = parse_assignments(assignments)
        resolved = resolve_commit(commit, overrides)
        if resolved:
            overrides["COMMIT"] = resolved
        pipeline = load_pipeline(pipeline_path, overrides=overrides)
        pipeline_run = PipelineExecutor(config=config).run(pipeline)
    except DefinitionError as e:
        log.error("definition_error", error=e.message, problems=e.problems)
        report_definition_error(e)
        return 1
    except Exception as e:
        log.exception("internal_error", error=str(e))
        return 1

    if report_path:
        write_report(report_path, pipeline_run.to_dict())
    return pipeline_run.resolve_exit_code(uniform=config.uniform_exit_code)


def validate(pipeline_path: str, assignments: list[str] | None) -> int:
    """Load a pipeline and check every stage against the built-in stage types."""
    try:
        overrides = parse_assignments(assignments)
        pipeline = load_pipeline(pipeline_path, overrides=overrides, registry=build_registry())
    except DefinitionError as e:
        report_definition_error(e)
        return 1

    print(f"Pipeline '{pipeline.name}' is valid")
    for index, stage in enumerate(pipeline.stages, start=1):
        print(f"  {index}. {stage.name} ({stage.type})")
    for phase, hook in pipeline.hooks.all_hooks():
        print(f"  {phase.value} hook: {hook.name} ({hook.type})")
    return 0


def write_report(path: str, summary: dict[str, Any]) -> None:
    """Write the run summary as JSON."""
    Path(path).write_text(json.dumps(summary, indent=2, default=str) + "\n", encoding="utf-8")
