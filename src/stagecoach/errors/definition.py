"""Pipeline definition errors."""

from __future__ import annotations

from stagecoach.error_codes import ErrorKind
from stagecoach.errors.base import StagecoachError


class DefinitionError(StagecoachError):
    """Invalid pipeline definition.

    Raised before any stage runs:
    - empty or duplicate stage names
    - unknown stage types
    - malformed pipeline files
    - required environment bindings that are not set

    Attributes:
        problems: Every problem found, when validation collects more than one
    """

    code: int = 101
    default_kind = ErrorKind.DEFINITION

    def __init__(self, message: str, *, problems: list[str] | None = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.problems = problems or [message]
