"""
Scoped subprocess execution.

Every external command a stage runs goes through ``run_command``. The child
process is acquired in a ``with`` block: whatever happens (normal exit,
timeout, KeyboardInterrupt, an exception while reading output) the child is
killed if still alive and reaped before the function returns.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from stagecoach.errors import StageExecutionError, StageTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Exit status and captured output of one command."""

    command: str
    returncode: int
    stdout: str
    stderr: str
    duration_ms: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def to_dict(self) -> dict[str, object]:
        return {
            "command": self.command,
            "returncode": self.returncode,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


def run_command(
    command: str | Sequence[str],
    *,
    timeout: float | None = None,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    shell: str | None = None,
    stdin: str | None = None,
    display: str | None = None,
) -> CommandResult:
    """
    Run one command and wait for it.

    Args:
        command: Shell string (run through the shell) or argv list (run directly)
        timeout: Seconds to wait before killing the process
        cwd: Working directory
        env: Extra environment variables layered over os.environ
        shell: Shell executable for string commands (default: /bin/sh)
        stdin: Text written to the process's stdin
        display: Text used for the command in logs and errors (masked form)

    Returns:
        CommandResult with exit code and stripped stdout/stderr

    Raises:
        StageTimeoutError: The command did not finish within ``timeout``
        StageExecutionError: The command could not be started
    """
    use_shell = isinstance(command, str)
    label = display or (command if isinstance(command, str) else " ".join(command))
    full_env = dict(os.environ)
    if env:
        full_env.update(env)

    logger.debug("Running command: %s", label)
    start = time.monotonic()

    try:
        proc = subprocess.Popen(
            command,
            shell=use_shell,
            executable=shell if use_shell else None,
            cwd=cwd,
            env=full_env,
            stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            start_new_session=True,
        )
    except OSError as e:
        raise StageExecutionError(f"Could not start command '{label}': {e}", cause=e) from e

    with proc:
        try:
            stdout, stderr = proc.communicate(input=stdin, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            _kill(proc)
            proc.communicate()
            raise StageTimeoutError(f"Command '{label}' timed out after {timeout}s") from e
        except BaseException:
            _kill(proc)
            proc.wait()
            raise

    duration_ms = (time.monotonic() - start) * 1000
    logger.debug("Command exited with %s after %.1fms: %s", proc.returncode, duration_ms, label)

    return CommandResult(
        command=label,
        returncode=proc.returncode,
        stdout=(stdout or "").strip(),
        stderr=(stderr or "").strip(),
        duration_ms=duration_ms,
    )


def _kill(proc: subprocess.Popen) -> None:
    """Kill the process and everything it spawned (it leads its own session)."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


class Deadline:
    """Remaining-time tracker for a stage that runs several commands."""

    def __init__(self, seconds: float | None) -> None:
        self.seconds = seconds
        self._expires = None if seconds is None else time.monotonic() + seconds

    def remaining(self) -> float | None:
        if self._expires is None:
            return None
        return max(0.0, self._expires - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._expires is not None and time.monotonic() >= self._expires
