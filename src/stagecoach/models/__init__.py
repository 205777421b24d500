"""Pipeline data models."""

from stagecoach.models.bindings import EnvironmentBindings
from stagecoach.models.run import PipelineRun, StageOutcome
from stagecoach.models.stage import Stage
from stagecoach.models.status import RunStatus

__all__ = [
    "EnvironmentBindings",
    "PipelineRun",
    "RunStatus",
    "Stage",
    "StageOutcome",
]
