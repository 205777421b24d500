"""Structured logging for pipeline runs.

Every run emits one event per lifecycle step (``run_started``,
``stage_started``, ``stage_failed``, ``hook_failed``, ``run_succeeded``...).
The executor binds ``run_id`` and ``pipeline`` into the context for the
duration of a run, so each event can be traced back to the run and stage
that produced it.

CI systems that ingest logs get one JSON object per line (``--json-logs`` or
``STAGECOACH_LOG_JSON``); a terminal gets the coloured console renderer.

Library modules (process, git, tasks) log through stdlib ``logging`` at
DEBUG; ``configure_logging`` routes both through the same level.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

_configured = False


def _renderer(json_format: bool) -> list[Processor]:
    if json_format:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(
    json_format: bool = False,
    level: int = logging.INFO,
    logger_factory: Any = None,
) -> None:
    """Set up run logging.

    The CLI calls this once, after flags and environment are merged into
    the ExecutorConfig. A logger obtained before then configures the
    console defaults itself.

    Args:
        json_format: One JSON object per event instead of console lines
        level: Minimum level for both structlog events and stdlib records
        logger_factory: structlog logger factory; tests pass a
            ``ReturnLoggerFactory`` to inspect rendered output
    """
    global _configured

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)
    logging.getLogger("stagecoach").setLevel(level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *_renderer(json_format),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=logger_factory or structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str) -> Any:
    """Event logger for the executor or a CLI command."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields (run_id, pipeline) to every event until cleared."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    # Runs in one process share the context; the executor clears it per run
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)
