"""
Stagecoach - sequential deployment pipeline runner.

Runs an ordered list of stages (build, test, quality gate, image push,
manifest update, health check) against one commit. Execution stops at the
first failing stage, post-run hooks report the outcome, and the process
exit code tells the calling CI system what happened.
"""

__version__ = "0.1.0"

from stagecoach.config import ExecutorConfig
from stagecoach.error_codes import ErrorKind, classify_error
from stagecoach.errors import (
    DefinitionError,
    ExternalDependencyError,
    PredicateFailure,
    StageError,
    StageExecutionError,
    StagecoachError,
    StageTimeoutError,
)
from stagecoach.executor import PipelineExecutor
from stagecoach.hooks import HookPhase, HookResult, HookSet
from stagecoach.loader import load_pipeline
from stagecoach.logging import configure_logging
from stagecoach.models import EnvironmentBindings, PipelineRun, RunStatus, Stage, StageOutcome
from stagecoach.pipeline import Pipeline
from stagecoach.tasks import Task, TaskRegistry, TaskResult, build_registry

__all__ = [
    "DefinitionError",
    "EnvironmentBindings",
    "ErrorKind",
    "ExecutorConfig",
    "ExternalDependencyError",
    "HookPhase",
    "HookResult",
    "HookSet",
    "Pipeline",
    "PipelineExecutor",
    "PipelineRun",
    "PredicateFailure",
    "RunStatus",
    "Stage",
    "StageError",
    "StageExecutionError",
    "StageOutcome",
    "StageTimeoutError",
    "StagecoachError",
    "Task",
    "TaskRegistry",
    "TaskResult",
    "build_registry",
    "classify_error",
    "configure_logging",
    "load_pipeline",
]
