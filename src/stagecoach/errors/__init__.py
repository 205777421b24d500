"""Stagecoach error hierarchy.

All error classes are re-exported here. Import from ``stagecoach.errors``.
"""

from stagecoach.errors.base import StagecoachError
from stagecoach.errors.definition import DefinitionError
from stagecoach.errors.external import ExternalDependencyError
from stagecoach.errors.stage import (
    PredicateFailure,
    StageError,
    StageExecutionError,
    StageTimeoutError,
)

__all__ = [
    "DefinitionError",
    "ExternalDependencyError",
    "PredicateFailure",
    "StageError",
    "StageExecutionError",
    "StageTimeoutError",
    "StagecoachError",
]
