"""Tests for the task registry."""

from __future__ import annotations

import pytest

from stagecoach.errors import DefinitionError
from stagecoach.models.bindings import EnvironmentBindings
from stagecoach.models.stage import Stage
from stagecoach.tasks import (
    CallableTask,
    HealthCheckTask,
    ManifestUpdateTask,
    NoOpTask,
    QualityGateTask,
    ShellTask,
    TaskRegistry,
    TaskResult,
    UnknownStageTypeError,
    build_registry,
)


class TestTaskRegistry:
    def test_register_class(self) -> None:
        registry = TaskRegistry()
        registry.register("shell", ShellTask)
        assert isinstance(registry.get("shell"), ShellTask)

    def test_register_instance(self) -> None:
        registry = TaskRegistry()
        task = NoOpTask()
        registry.register("noop", task)
        assert registry.get("noop") is task

    def test_decorator(self) -> None:
        registry = TaskRegistry()

        @registry.task("smoke", aliases=["smoke-test"])
        def smoke(stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
            return TaskResult.success(outputs={"stage": stage.name})

        task = registry.get("smoke-test")

        assert isinstance(task, CallableTask)
        assert task.name == "smoke"
        assert task.execute(Stage("s"), EnvironmentBindings()).outputs == {"stage": "s"}

    def test_unknown_type(self) -> None:
        with pytest.raises(UnknownStageTypeError) as exc_info:
            TaskRegistry().get("helicopter")

        assert isinstance(exc_info.value, DefinitionError)
        assert exc_info.value.task_type == "helicopter"

    def test_has_and_list(self) -> None:
        registry = TaskRegistry()
        registry.register("shell", ShellTask, aliases=["sh"])

        assert registry.has("sh")
        assert not registry.has("bash")
        assert registry.list_tasks() == ["shell"]


class TestBuildRegistry:
    def test_builtin_types(self) -> None:
        registry = build_registry()

        assert isinstance(registry.get("shell"), ShellTask)
        assert isinstance(registry.get("sh"), ShellTask)
        assert isinstance(registry.get("quality-gate"), QualityGateTask)
        assert isinstance(registry.get("health_check"), HealthCheckTask)
        assert isinstance(registry.get("manifest-update"), ManifestUpdateTask)
        assert isinstance(registry.get("noop"), NoOpTask)

    def test_poll_interval(self) -> None:
        gate = build_registry(poll_interval=0.5).get("quality_gate")
        assert isinstance(gate, QualityGateTask)
        assert gate.poll_interval == 0.5
