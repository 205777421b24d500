"""
HealthCheckTask - verify a freshly deployed service reports healthy.

The check waits a fixed delay for the service to boot, then polls its
health endpoint once and reads a status field from the JSON body. Anything
other than the expected sentinel fails the stage. Retries are opt-in: with
``retries`` > 0 an unreachable endpoint is retried with exponential backoff,
but a reachable endpoint reporting DOWN is never retried.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from stagecoach.error_codes import ErrorKind
from stagecoach.errors import PredicateFailure
from stagecoach.tasks.http import DEFAULT_TIMEOUT, build_headers, extract_field, fetch_json
from stagecoach.tasks.interface import Task
from stagecoach.tasks.result import TaskResult

if TYPE_CHECKING:
    from stagecoach.models.bindings import EnvironmentBindings
    from stagecoach.models.stage import Stage

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED = "UP"
DEFAULT_FIELD = "status"


@dataclass
class HealthCheckResult:
    """
    One health poll.

    Attributes:
        url: Endpoint that was polled
        body: Raw response body
        status: Parsed status field, None if the body is malformed or lacks it
        status_code: HTTP status code
    """

    url: str
    body: str
    status: str | None
    status_code: int

    def is_healthy(self, expected: str = DEFAULT_EXPECTED) -> bool:
        return self.status == expected


class HealthCheckTask(Task):
    """
    Poll a health endpoint after a fixed delay.

    Context Parameters:
        url (str): Health endpoint (required)
        delay (float): Seconds to wait before polling (default: 0)
        expected (str): Status value that means healthy (default: "UP")
        field (str): Dotted path of the status field (default: "status")
        request_timeout (float): Socket timeout in seconds (default: 10)
        retries (int): Extra attempts if the endpoint is unreachable (default: 0)
        retry_delay (float): Initial backoff between attempts (default: 1.0)
        headers, auth, bearer_token: Request authentication

    Outputs:
        status (str|None): Parsed status
        status_code (int): HTTP status code
        body (str): Raw body
        url (str): Polled URL
    """

    sleep = staticmethod(time.sleep)

    def validate(self, stage: Stage) -> list[str]:
        if not stage.context.get("url"):
            return [f"Health check stage '{stage.name}' needs a 'url'"]
        return []

    def poll(self, url: str, context: dict[str, Any], display_url: str | None = None) -> HealthCheckResult:
        """Poll once and parse the status field."""
        reply = fetch_json(
            url,
            headers=build_headers(context),
            timeout=float(context.get("request_timeout", DEFAULT_TIMEOUT)),
            retries=int(context.get("retries", 0)),
            retry_delay=float(context.get("retry_delay", 1.0)),
            display_url=display_url,
        )
        status = extract_field(reply.data, str(context.get("field", DEFAULT_FIELD)))
        return HealthCheckResult(
            url=url,
            body=reply.body,
            status=status if isinstance(status, str) else None,
            status_code=reply.status_code,
        )

    def execute(self, stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
        context = stage.context
        url = context.get("url")
        if not url:
            return TaskResult.failed(error="No 'url' specified for health check", kind=ErrorKind.DEFINITION)

        display_url = bindings.mask(url)
        expected = str(context.get("expected", DEFAULT_EXPECTED))
        delay = float(context.get("delay", 0))
        if delay > 0:
            logger.debug("Waiting %.1fs before polling %s", delay, display_url)
            self.sleep(delay)

        result = self.poll(url, context, display_url=display_url)
        outputs = {
            "url": display_url,
            "status": result.status,
            "status_code": result.status_code,
            "body": result.body,
        }

        if result.status is None:
            raise PredicateFailure(
                f"Health endpoint {display_url} returned no readable status (HTTP {result.status_code})",
                details=outputs,
            )
        if not result.is_healthy(expected):
            raise PredicateFailure(
                f"Health endpoint {display_url} reported {result.status!r}, expected {expected!r}",
                details=outputs,
            )

        return TaskResult.success(outputs=outputs)
