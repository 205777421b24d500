"""
Task interface definitions.

This module defines the Task interface that every stage kind implements,
plus the trivial tasks the registry ships with.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

from stagecoach.tasks.result import TaskResult

if TYPE_CHECKING:
    from stagecoach.models.bindings import EnvironmentBindings
    from stagecoach.models.stage import Stage


class Task(ABC):
    """
    Base interface for all tasks.

    A task performs the work of one stage. It receives the stage with
    bindings already substituted into its commands and parameters, plus
    the bindings themselves (for masking and lookups), and returns a
    TaskResult.

    Tasks may either return ``TaskResult.failed(...)`` or raise a
    ``StageError`` subclass; the executor treats both the same way.

    Example:
        class PushImageTask(Task):
            def execute(self, stage, bindings) -> TaskResult:
                image = stage.context["image"]
                digest = registry.push(image)
                return TaskResult.success(outputs={"digest": digest})
    """

    @abstractmethod
    def execute(self, stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
        """
        Execute the task.

        Args:
            stage: The resolved stage definition
            bindings: The run's environment bindings

        Returns:
            TaskResult indicating status and any outputs

        Raises:
            StageError: Any stage error is converted into a failed outcome
        """

    def validate(self, stage: Stage) -> list[str]:
        """
        Check a stage definition before the run starts.

        Override to report missing parameters. Returned messages become
        part of a DefinitionError.
        """
        return []


class CallableTask(Task):
    """
    A task that wraps a callable function.

    Example:
        def smoke(stage, bindings) -> TaskResult:
            return TaskResult.success()

        task = CallableTask(smoke)
    """

    def __init__(
        self,
        func: Callable[[Stage, EnvironmentBindings], TaskResult],
        name: str | None = None,
    ) -> None:
        self._func = func
        self._name = name or func.__name__

    def execute(self, stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
        return self._func(stage, bindings)

    @property
    def name(self) -> str:
        return self._name


class NoOpTask(Task):
    """
    A task that does nothing.

    Useful for placeholder stages and tests.
    """

    def execute(self, stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
        return TaskResult.success()
