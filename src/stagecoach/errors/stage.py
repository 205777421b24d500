"""Stage-level errors."""

from __future__ import annotations

from typing import Any

from stagecoach.error_codes import ErrorKind
from stagecoach.errors.base import StagecoachError


class StageError(StagecoachError):
    """A stage did not succeed.

    Attributes:
        exit_code: Exit code of the failing command, when there is one
        details: Task outputs captured before the failure
    """

    code: int = 200
    default_kind = ErrorKind.STAGE_EXECUTION

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.exit_code = exit_code
        self.details = details or {}


class StageExecutionError(StageError):
    """A stage command exited non-zero."""

    code: int = 201


class PredicateFailure(StageError):  # noqa: N818 - reads as an outcome, not an error
    """A stage ran but its success predicate rejected the result.

    Examples: quality gate returned ERROR, health status is not UP.
    """

    code: int = 202
    default_kind = ErrorKind.PREDICATE


class StageTimeoutError(StageError, TimeoutError):
    """A bounded wait was exceeded.

    Subclasses the builtin TimeoutError so generic handlers still match.
    """

    code: int = 203
    default_kind = ErrorKind.TIMEOUT
