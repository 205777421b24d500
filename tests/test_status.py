"""Tests for RunStatus and PipelineRun state transitions."""

from __future__ import annotations

import pytest

from stagecoach.error_codes import ErrorKind
from stagecoach.errors import StagecoachError
from stagecoach.hooks import HookPhase, HookResult
from stagecoach.models.run import PipelineRun, StageOutcome
from stagecoach.models.status import TERMINAL_STATUSES, RunStatus


class TestRunStatus:
    def test_complete_flags(self) -> None:
        assert not RunStatus.PENDING.is_complete
        assert not RunStatus.RUNNING.is_complete
        assert RunStatus.SUCCEEDED.is_complete
        assert RunStatus.FAILED.is_complete
        assert TERMINAL_STATUSES == {RunStatus.SUCCEEDED, RunStatus.FAILED}

    @pytest.mark.parametrize(
        ("source", "target", "allowed"),
        [
            (RunStatus.PENDING, RunStatus.RUNNING, True),
            (RunStatus.PENDING, RunStatus.SUCCEEDED, False),
            (RunStatus.RUNNING, RunStatus.SUCCEEDED, True),
            (RunStatus.RUNNING, RunStatus.FAILED, True),
            (RunStatus.RUNNING, RunStatus.PENDING, False),
            (RunStatus.SUCCEEDED, RunStatus.FAILED, False),
            (RunStatus.FAILED, RunStatus.RUNNING, False),
        ],
    )
    def test_transitions(self, source: RunStatus, target: RunStatus, allowed: bool) -> None:
        assert source.can_transition_to(target) is allowed

    def test_str(self) -> None:
        assert str(RunStatus.SUCCEEDED) == "SUCCEEDED"


class TestPipelineRun:
    def test_starts_pending(self) -> None:
        run = PipelineRun(pipeline_name="web")
        assert run.status == RunStatus.PENDING
        assert run.current_stage_index is None
        assert run.id

    def test_success_path(self) -> None:
        run = PipelineRun(pipeline_name="web")
        run.start()
        run.enter_stage(0)
        run.record(StageOutcome(name="build", succeeded=True))
        run.succeed()

        assert run.status == RunStatus.SUCCEEDED
        assert run.executed_stages == ["build"]
        assert run.exit_code == 0

    def test_failure_records_reason(self) -> None:
        run = PipelineRun(pipeline_name="web")
        run.start()
        run.enter_stage(1)
        run.fail("test", ErrorKind.STAGE_EXECUTION, "tests failed", exit_code=2)

        assert run.status == RunStatus.FAILED
        assert run.failed_stage == "test"
        assert run.error_kind == ErrorKind.STAGE_EXECUTION
        assert run.resolve_exit_code() == 2
        assert run.resolve_exit_code(uniform=True) == 1

    def test_signal_exit_code_follows_shell_convention(self) -> None:
        run = PipelineRun()
        run.start()
        run.fail("deploy", ErrorKind.STAGE_EXECUTION, "killed", exit_code=-15)

        assert run.resolve_exit_code() == 143
        assert run.resolve_exit_code(uniform=True) == 1

    def test_cannot_finish_twice(self) -> None:
        run = PipelineRun()
        run.start()
        run.succeed()
        with pytest.raises(StagecoachError):
            run.fail("x", ErrorKind.INTERNAL, "late")
        assert run.status == RunStatus.SUCCEEDED

    def test_cannot_succeed_before_start(self) -> None:
        with pytest.raises(StagecoachError):
            PipelineRun().succeed()

    def test_cannot_enter_stage_when_not_running(self) -> None:
        with pytest.raises(StagecoachError):
            PipelineRun().enter_stage(0)

    def test_to_dict(self) -> None:
        run = PipelineRun(pipeline_name="web", commit="abc", id="run-1")
        run.start()
        run.record(StageOutcome(name="build", succeeded=False, error="boom", error_kind=ErrorKind.TIMEOUT))
        run.fail("build", ErrorKind.TIMEOUT, "boom")
        run.hook_results.append(HookResult(name="cleanup", phase=HookPhase.ALWAYS, success=True))

        summary = run.to_dict()

        assert summary["id"] == "run-1"
        assert summary["status"] == "FAILED"
        assert summary["error_kind"] == "TIMEOUT"
        assert summary["exit_code"] == 1
        assert summary["stages"][0]["error_kind"] == "TIMEOUT"
        assert summary["hooks"] == [
            {"name": "cleanup", "phase": "always", "success": True, "error": None, "duration_ms": 0}
        ]
