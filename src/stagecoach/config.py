"""
Executor configuration for Stagecoach.

Settings that belong to the machine running pipelines rather than to a
pipeline definition, with support for loading from environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def parse_level(name: str) -> int:
    """Map a level name such as "debug" to its logging constant (INFO if unknown)."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class ExecutorConfig:
    """Executor settings.

    Environment Variables:
        STAGECOACH_DEFAULT_STAGE_TIMEOUT_S: Timeout for stages that set none (default: 3600)
        STAGECOACH_POLL_INTERVAL_S: Default quality gate poll interval (default: 5)
        STAGECOACH_HOOK_TIMEOUT_S: Timeout for each post-run hook (default: 300)
        STAGECOACH_UNIFORM_EXIT_CODE: Map every failure to exit code 1 (default: false)
        STAGECOACH_LOG_JSON: Emit JSON logs (default: false)
        STAGECOACH_LOG_LEVEL: Minimum log level name (default: INFO)

    Attributes:
        default_stage_timeout_seconds: Applied to stages without their own timeout
        poll_interval_seconds: Fixed sleep between quality gate polls
        hook_timeout_seconds: Applied to hooks without their own timeout
        uniform_exit_code: Report 1 for every failure instead of the stage's code
        log_json: JSON renderer instead of the console renderer
        log_level: Minimum log level
    """

    default_stage_timeout_seconds: float = 3600.0
    poll_interval_seconds: float = 5.0
    hook_timeout_seconds: float = 300.0
    uniform_exit_code: bool = False
    log_json: bool = False
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls) -> ExecutorConfig:
        """Load configuration from environment variables with defaults."""
        return cls(
            default_stage_timeout_seconds=float(os.getenv("STAGECOACH_DEFAULT_STAGE_TIMEOUT_S", "3600")),
            poll_interval_seconds=float(os.getenv("STAGECOACH_POLL_INTERVAL_S", "5")),
            hook_timeout_seconds=float(os.getenv("STAGECOACH_HOOK_TIMEOUT_S", "300")),
            uniform_exit_code=_env_bool("STAGECOACH_UNIFORM_EXIT_CODE", False),
            log_json=_env_bool("STAGECOACH_LOG_JSON", False),
            log_level=parse_level(os.getenv("STAGECOACH_LOG_LEVEL", "INFO")),
        )
