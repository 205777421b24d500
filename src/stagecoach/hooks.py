"""
Post-run hooks.

Hooks are stages that run after the main stage sequence finishes:

- ``success`` hooks run only if the run SUCCEEDED
- ``failure`` hooks run only if the run FAILED
- ``always`` hooks run after either, unconditionally

Hooks are informational and for cleanup. A failing hook is recorded in
its HookResult and logged; it never changes the run's status, and the
remaining hooks of the phase still run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from stagecoach.models.stage import Stage
from stagecoach.models.status import RunStatus


class HookPhase(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    ALWAYS = "always"


@dataclass
class HookResult:
    """Result of executing a single hook.

    Attributes:
        name: Name of the hook stage
        phase: Phase the hook ran in
        success: True if the hook completed without error
        error: Error message if the hook failed
        duration_ms: Execution time in milliseconds
    """

    name: str
    phase: HookPhase
    success: bool
    error: str | None = None
    duration_ms: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "phase": self.phase.value,
            "success": self.success,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class HookSet:
    """The hooks attached to a pipeline."""

    always: tuple[Stage, ...] = ()
    success: tuple[Stage, ...] = ()
    failure: tuple[Stage, ...] = ()

    def __post_init__(self) -> None:
        for name in ("always", "success", "failure"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    def phases_for(self, status: RunStatus) -> list[tuple[HookPhase, tuple[Stage, ...]]]:
        """
        Hooks to run for a terminal status, in order.

        Exactly one of success/failure, then always.
        """
        if not status.is_complete:
            raise ValueError(f"Hooks run only after a terminal status, got {status}")
        outcome = (
            (HookPhase.SUCCESS, self.success)
            if status is RunStatus.SUCCEEDED
            else (HookPhase.FAILURE, self.failure)
        )
        return [outcome, (HookPhase.ALWAYS, self.always)]

    def all_hooks(self) -> list[tuple[HookPhase, Stage]]:
        return (
            [(HookPhase.SUCCESS, h) for h in self.success]
            + [(HookPhase.FAILURE, h) for h in self.failure]
            + [(HookPhase.ALWAYS, h) for h in self.always]
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> HookSet:
        data = data or {}
        return cls(
            always=tuple(Stage.from_dict(h) for h in data.get("always") or []),
            success=tuple(Stage.from_dict(h) for h in data.get("success") or []),
            failure=tuple(Stage.from_dict(h) for h in data.get("failure") or []),
        )
