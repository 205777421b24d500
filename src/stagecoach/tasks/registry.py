"""
Task registry for resolving task implementations.

This module provides the TaskRegistry class for registering and resolving
task implementations by stage type name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, cast

from stagecoach.errors import DefinitionError
from stagecoach.tasks.interface import CallableTask, NoOpTask, Task
from stagecoach.tasks.result import TaskResult

if TYPE_CHECKING:
    from stagecoach.models.bindings import EnvironmentBindings
    from stagecoach.models.stage import Stage

logger = logging.getLogger(__name__)

# Type for task callable
TaskCallable = Callable[["Stage", "EnvironmentBindings"], TaskResult]

# Type for task implementation - can be a Task class, instance or callable
TaskImplementation = type[Task] | Task | TaskCallable


class UnknownStageTypeError(DefinitionError):
    """Raised when a stage type has no registered task."""

    def __init__(self, task_type: str):
        self.task_type = task_type
        super().__init__(f"No task registered for stage type: {task_type}")


class TaskRegistry:
    """
    Registry for task implementations.

    Supports:
    - Task classes (instantiated on resolve)
    - Task instances (used directly)
    - Callable functions (wrapped in CallableTask)

    Example:
        registry = TaskRegistry()
        registry.register("shell", ShellTask)

        @registry.task("smoke")
        def smoke(stage, bindings):
            return TaskResult.success()

        task = registry.get("shell")
    """

    def __init__(self) -> None:
        self._tasks: dict[str, TaskImplementation] = {}
        self._aliases: dict[str, str] = {}

    def register(
        self,
        name: str,
        task: TaskImplementation,
        aliases: list[str] | None = None,
    ) -> None:
        """
        Register a task implementation.

        Args:
            name: The stage type name
            task: Task class, instance, or callable
            aliases: Optional alternative names
        """
        if name in self._tasks:
            logger.warning("Overwriting existing task registration: %s", name)

        self._tasks[name] = task
        for alias in aliases or []:
            self._aliases[alias] = name

        logger.debug("Registered task: %s", name)

    def task(
        self,
        name: str,
        aliases: list[str] | None = None,
    ) -> Callable[[TaskCallable], TaskCallable]:
        """Decorator to register a function as a task."""

        def decorator(func: TaskCallable) -> TaskCallable:
            self.register(name, func, aliases)
            return func

        return decorator

    def get(self, name: str) -> Task:
        """
        Get a task implementation by stage type name.

        Raises:
            UnknownStageTypeError: If no task is registered under the name
        """
        resolved_name = self._aliases.get(name, name)

        if resolved_name not in self._tasks:
            raise UnknownStageTypeError(name)

        impl = self._tasks[resolved_name]

        if isinstance(impl, Task):
            return impl
        if isinstance(impl, type) and issubclass(impl, Task):
            return impl()
        if callable(impl):
            return CallableTask(cast(TaskCallable, impl), name=resolved_name)
        raise UnknownStageTypeError(name)

    def has(self, name: str) -> bool:
        """Check if a stage type is registered."""
        return self._aliases.get(name, name) in self._tasks

    def list_tasks(self) -> list[str]:
        """Get all registered stage type names."""
        return list(self._tasks.keys())


def build_registry(poll_interval: float | None = None) -> TaskRegistry:
    """Create a registry with every built-in stage type.

    Args:
        poll_interval: Default quality gate poll interval in seconds
    """
    from stagecoach.tasks.health_check import HealthCheckTask
    from stagecoach.tasks.manifest import ManifestUpdateTask
    from stagecoach.tasks.quality_gate import QualityGateTask
    from stagecoach.tasks.shell import ShellTask

    registry = TaskRegistry()
    registry.register("shell", ShellTask, aliases=["sh"])
    registry.register(
        "quality_gate",
        QualityGateTask() if poll_interval is None else QualityGateTask(poll_interval=poll_interval),
        aliases=["quality-gate"],
    )
    registry.register("health_check", HealthCheckTask, aliases=["health-check"])
    registry.register("manifest_update", ManifestUpdateTask, aliases=["manifest-update"])
    registry.register("noop", NoOpTask)
    return registry

