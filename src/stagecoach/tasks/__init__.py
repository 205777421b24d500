"""Built-in stage tasks."""

from stagecoach.tasks.health_check import HealthCheckResult, HealthCheckTask
from stagecoach.tasks.interface import CallableTask, NoOpTask, Task
from stagecoach.tasks.manifest import ManifestUpdateTask, rewrite_tag
from stagecoach.tasks.quality_gate import QualityGateTask
from stagecoach.tasks.registry import TaskRegistry, UnknownStageTypeError, build_registry
from stagecoach.tasks.result import TaskResult
from stagecoach.tasks.shell import ShellTask

__all__ = [
    "CallableTask",
    "HealthCheckResult",
    "HealthCheckTask",
    "ManifestUpdateTask",
    "NoOpTask",
    "QualityGateTask",
    "ShellTask",
    "Task",
    "TaskRegistry",
    "TaskResult",
    "UnknownStageTypeError",
    "build_registry",
    "rewrite_tag",
]
