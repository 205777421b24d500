"""
QualityGateTask - wait for an external static-analysis judgment.

The scanner computes its verdict asynchronously after analysis is uploaded.
This task polls for the verdict at a fixed interval until it resolves or
the stage timeout passes. A timeout is a failed outcome, never a retry.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from stagecoach.error_codes import ErrorKind
from stagecoach.errors import PredicateFailure, StageExecutionError, StageTimeoutError
from stagecoach.process import Deadline, run_command
from stagecoach.tasks.http import DEFAULT_TIMEOUT, build_headers, extract_field, fetch_json
from stagecoach.tasks.interface import Task
from stagecoach.tasks.result import TaskResult

if TYPE_CHECKING:
    from stagecoach.models.bindings import EnvironmentBindings
    from stagecoach.models.stage import Stage

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_FIELD = "projectStatus.status"


class QualityGateTask(Task):
    """
    Poll a quality gate until it passes, fails, or times out.

    The judgment is read either from a JSON endpoint (``url`` + ``field``)
    or from the trimmed stdout of a ``command``.

    Context Parameters:
        url (str): Quality gate API endpoint
        field (str): Dotted path to the verdict (default: "projectStatus.status")
        command (str): Alternative to url; stdout is the verdict
        expected (str): Verdict meaning pass (default: "OK")
        failure_values (list[str]): Verdicts meaning fail (default: ["ERROR"])
        poll_interval (float): Seconds between polls
        request_timeout (float): Socket timeout per poll (default: 10)
        token, headers, auth, bearer_token: Request authentication

    The stage ``timeout`` bounds the whole wait.

    Outputs:
        verdict (str): Final verdict
        polls (int): Number of polls made
    """

    sleep = staticmethod(time.sleep)

    def __init__(self, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self.poll_interval = poll_interval

    def validate(self, stage: Stage) -> list[str]:
        if not stage.context.get("url") and not stage.context.get("command") and not stage.commands:
            return [f"Quality gate stage '{stage.name}' needs a 'url' or a 'command'"]
        return []

    def judge(self, stage: Stage, bindings: EnvironmentBindings, deadline: Deadline) -> str | None:
        """Read the current verdict. None means not yet available."""
        context = stage.context
        url = context.get("url")
        if url:
            reply = fetch_json(
                url,
                headers=build_headers(context),
                timeout=float(context.get("request_timeout", DEFAULT_TIMEOUT)),
                display_url=bindings.mask(url),
            )
            verdict = extract_field(reply.data, str(context.get("field", DEFAULT_FIELD)))
            return str(verdict) if verdict is not None else None

        command = context.get("command") or stage.commands[0]
        result = run_command(
            command,
            timeout=deadline.remaining(),
            cwd=context.get("cwd"),
            env=dict(bindings),
            display=bindings.mask(command),
        )
        if not result.ok:
            raise StageExecutionError(
                f"Quality gate command exited with {result.returncode}: {bindings.mask(result.stderr)}",
                exit_code=result.returncode,
            )
        return result.stdout or None

    def execute(self, stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
        context: dict[str, Any] = stage.context
        if self.validate(stage):
            return TaskResult.failed(error="No quality gate source specified", kind=ErrorKind.DEFINITION)

        expected = str(context.get("expected", "OK"))
        configured = context.get("failure_values", ["ERROR"])
        if isinstance(configured, str):
            configured = [configured]
        failure_values = {str(v) for v in configured}
        interval = float(context.get("poll_interval", self.poll_interval))
        deadline = Deadline(stage.timeout)

        polls = 0
        verdict: str | None = None
        while True:
            verdict = self.judge(stage, bindings, deadline)
            polls += 1
            logger.debug("Quality gate poll %d: %s", polls, verdict)

            if verdict == expected:
                return TaskResult.success(outputs={"verdict": verdict, "polls": polls})
            if verdict in failure_values:
                raise PredicateFailure(
                    f"Quality gate failed with verdict {verdict!r}",
                    details={"verdict": verdict, "polls": polls},
                )

            remaining = deadline.remaining()
            if remaining is not None and remaining <= 0:
                raise StageTimeoutError(
                    f"Quality gate did not reach {expected!r} within {stage.timeout}s (last verdict: {verdict!r})",
                    details={"verdict": verdict, "polls": polls},
                )
            self.sleep(interval if remaining is None else min(interval, remaining))
