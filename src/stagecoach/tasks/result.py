"""
TaskResult - result of task execution.

This module defines the TaskResult class that encapsulates the result
of executing a stage's task: status, outputs, and failure details.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stagecoach.error_codes import ErrorKind, classify_error
from stagecoach.models.status import RunStatus


@dataclass
class TaskResult:
    """
    Result of a task execution.

    Attributes:
        status: SUCCEEDED or FAILED
        outputs: Values the task produced (stdout, parsed status, ...)
        error: Failure message
        error_kind: Failure category
        exit_code: Exit code of the failing command, if any
    """

    status: RunStatus
    outputs: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    error_kind: ErrorKind | None = None
    exit_code: int | None = None

    # ========== Factory Methods ==========

    @classmethod
    def success(cls, outputs: dict[str, Any] | None = None) -> TaskResult:
        """
        Create a successful result.

        Args:
            outputs: Values produced by the task

        Returns:
            A TaskResult with SUCCEEDED status
        """
        return cls(status=RunStatus.SUCCEEDED, outputs=outputs or {})

    @classmethod
    def failed(
        cls,
        error: str,
        kind: ErrorKind = ErrorKind.STAGE_EXECUTION,
        exit_code: int | None = None,
        outputs: dict[str, Any] | None = None,
    ) -> TaskResult:
        """
        Create a failed result.

        The run stops at this stage.

        Args:
            error: Error message
            kind: Failure category
            exit_code: Exit code of the failing command
            outputs: Values captured before the failure

        Returns:
            A TaskResult with FAILED status
        """
        return cls(
            status=RunStatus.FAILED,
            outputs=outputs or {},
            error=error,
            error_kind=kind,
            exit_code=exit_code,
        )

    @classmethod
    def from_error(cls, error: BaseException) -> TaskResult:
        """Create a failed result from an exception raised by a task."""
        details = getattr(error, "details", None) or {}
        return cls.failed(
            error=str(error) or type(error).__name__,
            kind=classify_error(error),
            exit_code=getattr(error, "exit_code", None),
            outputs=dict(details),
        )

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCEEDED
