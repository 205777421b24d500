"""Collaborator errors."""

from __future__ import annotations

from stagecoach.error_codes import ErrorKind
from stagecoach.errors.stage import StageError


class ExternalDependencyError(StageError):
    """A collaborator was unreachable or rejected the request.

    Raised when:
    - an HTTP endpoint cannot be reached
    - a git push is rejected
    - a required tool is not installed
    """

    code: int = 300
    default_kind = ErrorKind.EXTERNAL_DEPENDENCY
