"""Base exception hierarchy for Stagecoach.

Every error carries:

1. ``code`` - numeric code for programmatic handling
2. ``kind`` - semantic ErrorKind used to decide the run's failure reason
3. ``cause`` - optional original exception
"""

from __future__ import annotations

from stagecoach.error_codes import ErrorKind


class StagecoachError(Exception):
    """Base exception for all Stagecoach errors.

    Attributes:
        code: Numeric error code for programmatic handling
        kind: Semantic ErrorKind for categorization
        cause: Optional original exception that caused this error
        stage_name: Name of the stage that raised, when known
    """

    code: int = 100
    default_kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        cause: BaseException | None = None,
        kind: ErrorKind | None = None,
        stage_name: str | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.cause = cause
        self.kind = kind or self.default_kind
        self.stage_name = stage_name
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"caused by: {self.cause}")
        return " ".join(parts)
