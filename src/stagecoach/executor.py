"""
Pipeline executor.

Runs a pipeline's stages strictly in declaration order against a live
PipelineRun:

    PENDING -> RUNNING -> {SUCCEEDED | FAILED}

The first stage that fails (non-zero exit, rejected predicate, timeout,
unreachable collaborator, or an unexpected exception) marks the run FAILED
and no later stage executes. Post-run hooks then run: exactly one of the
success/failure phases, followed by the always phase. Nothing is retried.
"""

from __future__ import annotations

import dataclasses
import time
from typing import Any

from stagecoach.config import ExecutorConfig
from stagecoach.error_codes import ErrorKind
from stagecoach.hooks import HookResult
from stagecoach.logging import bind_context, clear_context, get_logger
from stagecoach.models.bindings import EnvironmentBindings
from stagecoach.models.run import PipelineRun, StageOutcome
from stagecoach.models.stage import Stage
from stagecoach.models.status import RunStatus
from stagecoach.pipeline import Pipeline
from stagecoach.tasks.registry import TaskRegistry, build_registry
from stagecoach.tasks.result import TaskResult


class PipelineExecutor:
    """
    Sequential pipeline executor.

    Example:
        executor = PipelineExecutor()
        run = executor.run(pipeline, commit="a1b2c3d")
        sys.exit(run.resolve_exit_code())
    """

    def __init__(
        self,
        registry: TaskRegistry | None = None,
        config: ExecutorConfig | None = None,
    ) -> None:
        self.config = config or ExecutorConfig()
        self.registry = registry or build_registry(poll_interval=self.config.poll_interval_seconds)
        self._log = get_logger("stagecoach.executor")

    def run(
        self,
        pipeline: Pipeline,
        commit: str | None = None,
        run_id: str | None = None,
    ) -> PipelineRun:
        """
        Execute the pipeline and return the finished run.

        Args:
            pipeline: The pipeline to execute
            commit: Commit hash; bound as COMMIT for every stage when given
            run_id: Explicit run id (a ULID is generated otherwise)

        Returns:
            The PipelineRun in a terminal state

        Raises:
            DefinitionError: The pipeline is invalid; no stage has run
        """
        pipeline.validate(self.registry)

        bindings = pipeline.bindings
        if commit:
            bindings = bindings.with_values(COMMIT=commit)

        run = PipelineRun(pipeline_name=pipeline.name, commit=bindings.get("COMMIT"))
        if run_id:
            run.id = run_id

        bind_context(run_id=run.id, pipeline=pipeline.name)
        try:
            run.start()
            self._log.info("run_started", commit=run.commit, stages=len(pipeline.stages))
            try:
                self._run_stages(pipeline, bindings, run)
            except BaseException as e:
                # Interrupted mid-stage: record it so hooks still see a FAILED run
                if run.status is RunStatus.RUNNING:
                    run.fail(
                        pipeline.stages[run.current_stage_index or 0].name,
                        ErrorKind.INTERNAL,
                        f"Run interrupted: {type(e).__name__}",
                    )
                self._run_hooks(pipeline, bindings, run)
                raise
            self._run_hooks(pipeline, bindings, run)
            self._log_finished(run)
            return run
        finally:
            clear_context()

    def _run_stages(self, pipeline: Pipeline, bindings: EnvironmentBindings, run: PipelineRun) -> None:
        for index, stage in enumerate(pipeline.stages):
            run.enter_stage(index)
            outcome = self.execute_stage(stage, bindings, self.config.default_stage_timeout_seconds)
            run.record(outcome)
            if not outcome.succeeded:
                run.fail(
                    stage.name,
                    outcome.error_kind or ErrorKind.INTERNAL,
                    outcome.error or "Stage failed",
                    outcome.exit_code,
                )
                remaining = pipeline.stage_names[index + 1 :]
                if remaining:
                    self._log.info("stages_skipped", stages=remaining)
                return
        run.succeed()

    def _run_hooks(self, pipeline: Pipeline, bindings: EnvironmentBindings, run: PipelineRun) -> None:
        hook_bindings = bindings.with_values(RUN_STATUS=str(run.status), RUN_ID=run.id)
        for phase, hooks in pipeline.hooks.phases_for(run.status):
            for hook in hooks:
                outcome = self.execute_stage(hook, hook_bindings, self.config.hook_timeout_seconds, kind="hook")
                result = HookResult(
                    name=hook.name,
                    phase=phase,
                    success=outcome.succeeded,
                    error=outcome.error,
                    duration_ms=outcome.duration_ms,
                )
                run.hook_results.append(result)
                if not result.success:
                    self._log.warning("hook_failed", hook=hook.name, phase=phase.value, error=result.error)

    def execute_stage(
        self,
        stage: Stage,
        bindings: EnvironmentBindings,
        default_timeout: float | None = None,
        kind: str = "stage",
    ) -> StageOutcome:
        """
        Run one stage and evaluate its predicate.

        Task exceptions never escape: they are classified into an ErrorKind
        and returned as a failed outcome.
        """
        log = self._log.bind(stage=stage.name, stage_type=stage.type)
        log.info(f"{kind}_started")
        start = time.monotonic()

        resolved = stage.resolve(bindings)
        if resolved.timeout is None and default_timeout is not None:
            resolved = dataclasses.replace(resolved, timeout=default_timeout)

        try:
            task = self.registry.get(stage.type)
            result = task.execute(resolved, bindings)
        except Exception as e:
            result = TaskResult.from_error(e)

        if result.succeeded and stage.predicate is not None:
            result = self._check_predicate(stage, result)

        duration_ms = (time.monotonic() - start) * 1000
        outcome = StageOutcome(
            name=stage.name,
            succeeded=result.succeeded,
            outputs=bindings.mask_all(result.outputs),
            error=bindings.mask(result.error) if result.error else None,
            error_kind=result.error_kind,
            exit_code=result.exit_code,
            duration_ms=duration_ms,
        )

        if outcome.succeeded:
            log.info(f"{kind}_succeeded", duration_ms=round(duration_ms, 1))
        else:
            log.error(
                f"{kind}_failed",
                error_kind=str(outcome.error_kind),
                error=outcome.error,
                exit_code=outcome.exit_code,
                duration_ms=round(duration_ms, 1),
            )
        return outcome

    @staticmethod
    def _check_predicate(stage: Stage, result: TaskResult) -> TaskResult:
        assert stage.predicate is not None
        try:
            accepted = bool(stage.predicate(result))
            reason = "predicate rejected the result"
        except Exception as e:
            accepted = False
            reason = f"predicate raised {type(e).__name__}: {e}"
        if accepted:
            return result
        return TaskResult.failed(
            error=f"Stage '{stage.name}': {reason}",
            kind=ErrorKind.PREDICATE,
            outputs=result.outputs,
        )

    def _log_finished(self, run: PipelineRun) -> None:
        fields: dict[str, Any] = {
            "status": str(run.status),
            "duration_ms": run.duration_ms,
            "hooks": len(run.hook_results),
        }
        if run.status.is_failure:
            fields.update(
                failed_stage=run.failed_stage,
                error_kind=str(run.error_kind),
                error=run.error,
            )
            self._log.error("run_failed", **fields)
        else:
            self._log.info("run_succeeded", **fields)
