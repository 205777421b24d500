"""
Built-in ShellTask for executing stage commands.

This module provides the ShellTask that:
- Runs a stage's commands in order through the system shell
- Exposes the run's bindings to each command as environment variables
- Stops at the first non-zero exit code
- Returns stdout, stderr, and returncode as outputs
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from stagecoach.error_codes import ErrorKind
from stagecoach.errors import StageTimeoutError
from stagecoach.process import Deadline, run_command
from stagecoach.tasks.interface import Task
from stagecoach.tasks.result import TaskResult

if TYPE_CHECKING:
    from stagecoach.models.bindings import EnvironmentBindings
    from stagecoach.models.stage import Stage

logger = logging.getLogger(__name__)


class ShellTask(Task):
    """
    Execute a stage's shell commands.

    Commands come from ``stage.commands`` (or a single ``command`` context
    parameter). {NAME} placeholders have already been substituted by the
    executor. The stage timeout bounds all commands together.

    Context Parameters:
        command: Single command, when the stage has no ``commands`` list
        cwd: Working directory
        env: Extra environment variables (dict)
        shell: Shell executable (default: /bin/sh)
        stdin: Text sent to each command's stdin

    Outputs:
        stdout: Standard output of the last command that ran (stripped)
        stderr: Standard error of the last command that ran (stripped)
        returncode: Exit code of the last command that ran
        commands: Per-command results

    Example:
        Stage(
            name="image",
            commands=(
                "docker build -t {IMAGE}:{COMMIT} .",
                "docker push {IMAGE}:{COMMIT}",
            ),
        )
    """

    def validate(self, stage: Stage) -> list[str]:
        if not stage.commands and not stage.context.get("command"):
            return [f"Stage '{stage.name}' has no commands"]
        return []

    def execute(self, stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
        commands = list(stage.commands)
        if not commands and stage.context.get("command"):
            commands = [str(stage.context["command"])]
        if not commands:
            return TaskResult.failed(error="No commands specified", kind=ErrorKind.DEFINITION)

        env = dict(bindings)
        env.update({str(k): str(v) for k, v in (stage.context.get("env") or {}).items()})
        deadline = Deadline(stage.timeout)

        results = []
        for command in commands:
            display = bindings.mask(command)
            remaining = deadline.remaining()
            if remaining is not None and remaining <= 0:
                raise StageTimeoutError(
                    f"Stage timed out after {stage.timeout}s before running '{display}'",
                    details={"commands": [r.to_dict() for r in results]},
                )

            result = run_command(
                command,
                timeout=remaining,
                cwd=stage.context.get("cwd"),
                env=env,
                shell=stage.context.get("shell"),
                stdin=stage.context.get("stdin"),
                display=display,
            )
            results.append(result)

            if not result.ok:
                logger.debug("Command failed with exit code %s: %s", result.returncode, display)
                return TaskResult.failed(
                    error=f"Command '{display}' failed with exit code {result.returncode}: "
                    f"{bindings.mask(result.stderr)}",
                    kind=ErrorKind.STAGE_EXECUTION,
                    exit_code=result.returncode,
                    outputs=self._outputs(results),
                )

        return TaskResult.success(outputs=self._outputs(results))

    @staticmethod
    def _outputs(results: list) -> dict:
        last = results[-1]
        return {
            "stdout": last.stdout,
            "stderr": last.stderr,
            "returncode": last.returncode,
            "commands": [r.to_dict() for r in results],
        }
