"""
RunStatus enum.

This enum represents the lifecycle of a pipeline run:

    PENDING -> RUNNING -> {SUCCEEDED | FAILED}

Each status carries a ``complete`` flag: whether the run has finished.
"""

from enum import Enum


class RunStatus(Enum):
    """
    Pipeline run status.

    Each value is a tuple of (name, complete).
    """

    # The run has been created but no stage has started
    PENDING = ("PENDING", False)

    # A stage is executing
    RUNNING = ("RUNNING", False)

    # Every stage succeeded
    SUCCEEDED = ("SUCCEEDED", True)

    # A stage failed; later stages were not executed
    FAILED = ("FAILED", True)

    def __init__(self, label: str, complete: bool) -> None:
        self._label = label
        self._complete = complete

    @property
    def is_complete(self) -> bool:
        """Indicates the run has reached a terminal state."""
        return self._complete

    @property
    def is_successful(self) -> bool:
        return self is RunStatus.SUCCEEDED

    @property
    def is_failure(self) -> bool:
        return self is RunStatus.FAILED

    def can_transition_to(self, target: "RunStatus") -> bool:
        """Check whether ``target`` is a legal next state."""
        return target in _TRANSITIONS[self]

    def __str__(self) -> str:
        return self._label

    def __repr__(self) -> str:
        return f"RunStatus.{self.name}"


_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.PENDING: frozenset({RunStatus.RUNNING}),
    RunStatus.RUNNING: frozenset({RunStatus.SUCCEEDED, RunStatus.FAILED}),
    RunStatus.SUCCEEDED: frozenset(),
    RunStatus.FAILED: frozenset(),
}

TERMINAL_STATUSES: frozenset[RunStatus] = frozenset({RunStatus.SUCCEEDED, RunStatus.FAILED})
