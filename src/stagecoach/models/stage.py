"""
Stage model.

A stage is one named unit of pipeline work. It names a task type (resolved
through the task registry), carries the commands a shell stage runs, the
parameters the task reads, an optional success predicate, and an optional
timeout. Stages are frozen once the pipeline is defined; the executor works
on a resolved copy with bindings substituted in.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stagecoach.models.bindings import EnvironmentBindings
    from stagecoach.tasks.result import TaskResult

# A predicate receives the task's result and returns False to reject it
Predicate = Callable[["TaskResult"], bool]


@dataclass(frozen=True)
class Stage:
    """
    Definition of one pipeline stage.

    Attributes:
        name: Unique, non-empty stage name
        type: Task type name (shell, quality_gate, health_check, manifest_update, noop)
        commands: Ordered shell commands (shell stages)
        context: Task parameters
        timeout: Seconds before the stage is failed as timed out, None for the default
        predicate: Optional check on the task result; False fails the stage
    """

    name: str
    type: str = "shell"
    commands: tuple[str, ...] = ()
    context: dict[str, Any] = field(default_factory=dict)
    timeout: float | None = None
    predicate: Predicate | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.commands, str):
            object.__setattr__(self, "commands", (self.commands,))
        elif not isinstance(self.commands, tuple):
            object.__setattr__(self, "commands", tuple(self.commands))

    def resolve(self, bindings: EnvironmentBindings) -> Stage:
        """Return a copy with {NAME} placeholders substituted from bindings."""
        return dataclasses.replace(
            self,
            commands=tuple(bindings.substitute(c) for c in self.commands),
            context=bindings.substitute_all(dict(self.context)),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Stage:
        """
        Build a stage from a pipeline-file entry.

        Known keys map to attributes; every other key becomes a task
        parameter in ``context``. ``command`` is accepted as a single-command
        shorthand for ``commands``.
        """
        data = dict(data)
        name = data.pop("name", "")
        stage_type = data.pop("type", "shell")
        commands = data.pop("commands", None)
        if commands is None:
            single = data.pop("command", None)
            commands = [single] if single else []
        elif isinstance(commands, str):
            commands = [commands]
        timeout = data.pop("timeout", None)
        context = dict(data.pop("context", {}) or {})
        context.update(data)
        return cls(
            name=str(name) if name is not None else "",
            type=str(stage_type),
            commands=tuple(str(c) for c in commands),
            context=context,
            timeout=float(timeout) if timeout is not None else None,
        )
