"""
Error kinds for Stagecoach.

Every failure a pipeline run can end with is tagged with an ``ErrorKind``
so callers can tell retryable conditions (a timeout, an unreachable
collaborator) from fatal ones (a bad definition, a failing build).

Usage:
    from stagecoach.error_codes import ErrorKind, classify_error

    try:
        task.execute(stage, bindings)
    except Exception as e:
        kind = classify_error(e)
        if kind.retryable:
            ...
"""

from __future__ import annotations

import http.client
import socket
import subprocess
import urllib.error
from enum import Enum


class ErrorKind(Enum):
    """Semantic error kinds.

    Each value is a tuple of (name, retryable).
    """

    # Invalid pipeline definition or missing binding, raised before any stage runs
    DEFINITION = ("DEFINITION", False)

    # A stage command exited non-zero
    STAGE_EXECUTION = ("STAGE_EXECUTION", False)

    # A stage ran but its success predicate rejected the result
    PREDICATE = ("PREDICATE", False)

    # A bounded wait was exceeded
    TIMEOUT = ("TIMEOUT", True)

    # A collaborator was unreachable or rejected the request
    EXTERNAL_DEPENDENCY = ("EXTERNAL_DEPENDENCY", True)

    # A bug or unexpected exception inside the executor or a task
    INTERNAL = ("INTERNAL", False)

    def __init__(self, label: str, retryable: bool) -> None:
        self._label = label
        self._retryable = retryable

    @property
    def retryable(self) -> bool:
        """Whether the condition may resolve if the stage is run again."""
        return self._retryable

    def __str__(self) -> str:
        return self._label

    def __repr__(self) -> str:
        return f"ErrorKind.{self.name}"


_NETWORK_TYPES = (
    ConnectionError,
    socket.gaierror,
    http.client.HTTPException,
    urllib.error.URLError,
)


def error_chain(error: BaseException) -> list[BaseException]:
    """Traverse the __cause__ chain, return list from root to leaf.

    Args:
        error: The exception to traverse

    Returns:
        List of exceptions from root cause to the provided exception.
    """
    chain: list[BaseException] = []
    current: BaseException | None = error

    while current is not None:
        chain.append(current)
        cause = current.__cause__
        if cause is current or cause in chain:
            break
        current = cause

    chain.reverse()
    return chain


def find_in_chain(error: BaseException, error_type: type) -> BaseException | None:
    """Find the first error of the given type in the cause chain."""
    for exc in error_chain(error):
        if isinstance(exc, error_type):
            return exc
    return None


def classify_error(error: BaseException) -> ErrorKind:
    """Map any exception to an ErrorKind.

    Stagecoach exceptions carry their own kind. Anything else is classified
    by type: timeouts first (``socket.timeout`` is an ``OSError``), then
    network failures, then other OS-level failures talking to a tool.
    Unknown exceptions are ``INTERNAL``.
    """
    kind = getattr(error, "kind", None)
    if isinstance(kind, ErrorKind):
        return kind

    # Leaf first: the outermost explicit kind wins over causes
    for exc in reversed(error_chain(error)):
        kind = getattr(exc, "kind", None)
        if isinstance(kind, ErrorKind):
            return kind

    if isinstance(error, (TimeoutError, subprocess.TimeoutExpired)):
        return ErrorKind.TIMEOUT

    if isinstance(error, _NETWORK_TYPES):
        return ErrorKind.EXTERNAL_DEPENDENCY

    if isinstance(error, OSError):
        return ErrorKind.EXTERNAL_DEPENDENCY

    return ErrorKind.INTERNAL
