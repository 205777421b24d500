"""
PipelineRun model.

A PipelineRun represents one execution of a pipeline. It tracks:
- Overall status (PENDING -> RUNNING -> SUCCEEDED | FAILED)
- The index of the stage currently executing
- The outcome of every stage that ran
- Why the run failed, and which stage failed
- The results of the post-run hooks
- Timing data

The run is owned by the executor for its lifetime. Nothing else mutates it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stagecoach.error_codes import ErrorKind
from stagecoach.errors import StagecoachError
from stagecoach.models.status import RunStatus

if TYPE_CHECKING:
    from stagecoach.hooks import HookResult


def _generate_run_id() -> str:
    """Generate a unique run ID using ULID."""
    import ulid

    return str(ulid.new())


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class StageOutcome:
    """
    What happened when one stage ran.

    Attributes:
        name: Stage name
        succeeded: True if the task succeeded and the predicate accepted it
        outputs: Values the task produced (stdout, status, ...)
        error: Failure message
        error_kind: Failure category
        exit_code: Exit code of the failing command, if any
        duration_ms: Wall-clock time spent in the stage
    """

    name: str
    succeeded: bool
    outputs: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    error_kind: ErrorKind | None = None
    exit_code: int | None = None
    duration_ms: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "succeeded": self.succeeded,
            "outputs": self.outputs,
            "error": self.error,
            "error_kind": str(self.error_kind) if self.error_kind else None,
            "exit_code": self.exit_code,
            "duration_ms": self.duration_ms,
        }


@dataclass
class PipelineRun:
    """
    One execution of a pipeline.

    Attributes:
        pipeline_name: Name of the pipeline being run
        commit: Commit hash the run builds and tags with
        id: Unique identifier (ULID)
        status: Current run status
        current_stage_index: Index of the stage executing (or last executed)
        outcomes: Outcome of each stage that ran, in order
        failed_stage: Name of the stage that failed
        error_kind: Category of the failure
        error: Failure message
        failure_exit_code: Exit code reported by the failing stage
        hook_results: Results of every post-run hook that ran
        start_time: Epoch milliseconds when the run started
        end_time: Epoch milliseconds when the run completed
    """

    pipeline_name: str = ""
    commit: str | None = None
    id: str = field(default_factory=_generate_run_id)
    status: RunStatus = RunStatus.PENDING
    current_stage_index: int | None = None
    outcomes: list[StageOutcome] = field(default_factory=list)
    failed_stage: str | None = None
    error_kind: ErrorKind | None = None
    error: str | None = None
    failure_exit_code: int | None = None
    hook_results: list[HookResult] = field(default_factory=list)
    start_time: int | None = None
    end_time: int | None = None

    # ========== State Transitions ==========

    def _transition(self, target: RunStatus) -> None:
        if not self.status.can_transition_to(target):
            raise StagecoachError(f"Illegal run transition {self.status} -> {target} for run {self.id}")
        self.status = target

    def start(self) -> None:
        """PENDING -> RUNNING."""
        self._transition(RunStatus.RUNNING)
        self.start_time = _now_ms()

    def enter_stage(self, index: int) -> None:
        if self.status is not RunStatus.RUNNING:
            raise StagecoachError(f"Cannot enter stage {index}: run {self.id} is {self.status}")
        self.current_stage_index = index

    def record(self, outcome: StageOutcome) -> None:
        self.outcomes.append(outcome)

    def succeed(self) -> None:
        """RUNNING -> SUCCEEDED."""
        self._transition(RunStatus.SUCCEEDED)
        self.end_time = _now_ms()

    def fail(
        self,
        stage_name: str | None,
        kind: ErrorKind,
        message: str,
        exit_code: int | None = None,
    ) -> None:
        """RUNNING -> FAILED, recording why."""
        self._transition(RunStatus.FAILED)
        self.failed_stage = stage_name
        self.error_kind = kind
        self.error = message
        self.failure_exit_code = exit_code
        self.end_time = _now_ms()

    # ========== Queries ==========

    @property
    def executed_stages(self) -> list[str]:
        return [o.name for o in self.outcomes]

    @property
    def duration_ms(self) -> int | None:
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    def resolve_exit_code(self, uniform: bool = False) -> int:
        """
        Process exit code for this run.

        0 on success. On failure, the failing stage's own non-zero exit code,
        or 1 when it has none or ``uniform`` maps every failure to 1. A command
        killed by signal N reports 128 + N, as a shell would.
        """
        if self.status is RunStatus.SUCCEEDED:
            return 0
        if uniform or not self.failure_exit_code:
            return 1
        if self.failure_exit_code < 0:
            return 128 - self.failure_exit_code
        return self.failure_exit_code

    @property
    def exit_code(self) -> int:
        return self.resolve_exit_code()

    def to_dict(self) -> dict[str, Any]:
        """Summary for logs and JSON output."""
        return {
            "id": self.id,
            "pipeline": self.pipeline_name,
            "commit": self.commit,
            "status": str(self.status),
            "current_stage_index": self.current_stage_index,
            "failed_stage": self.failed_stage,
            "error_kind": str(self.error_kind) if self.error_kind else None,
            "error": self.error,
            "exit_code": self.exit_code,
            "stages": [o.to_dict() for o in self.outcomes],
            "hooks": [h.to_dict() for h in self.hook_results],
            "duration_ms": self.duration_ms,
        }
