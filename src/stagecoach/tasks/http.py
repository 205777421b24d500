"""
JSON-over-HTTP collaborator access for polling stages.

Health endpoints and quality-gate APIs are read with Python's stdlib
urllib. Non-2xx responses are not errors here: an unhealthy service
usually answers 503 with a JSON body, and the caller decides what the
body means. Only an unreachable endpoint raises.

Optional retries on unreachable endpoints use resilient-circuit's
exponential backoff.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from resilient_circuit import ExponentialDelay, RetryWithBackoffPolicy
from resilient_circuit.exceptions import RetryLimitReached

from stagecoach.errors import ExternalDependencyError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
MAX_BODY_SIZE = 1024 * 1024


@dataclass
class JsonReply:
    """
    A response from a JSON endpoint.

    Attributes:
        url: Requested URL
        status_code: HTTP status code
        body: Raw response body text
        data: Parsed JSON body, or None when the body is not valid JSON
    """

    url: str
    status_code: int
    body: str
    data: Any = None


def build_headers(context: dict[str, Any]) -> dict[str, str]:
    """Build request headers from stage parameters.

    Supports custom ``headers``, basic ``auth`` as [user, password],
    a SonarQube-style ``token`` (basic auth with empty password) and
    ``bearer_token``.
    """
    headers: dict[str, str] = {"Accept": "application/json"}
    for key, value in (context.get("headers") or {}).items():
        headers[str(key)] = str(value)

    auth = context.get("auth")
    if isinstance(auth, list | tuple) and len(auth) == 2:
        encoded = base64.b64encode(f"{auth[0]}:{auth[1]}".encode()).decode()
        headers["Authorization"] = f"Basic {encoded}"

    if context.get("token"):
        encoded = base64.b64encode(f"{context['token']}:".encode()).decode()
        headers["Authorization"] = f"Basic {encoded}"

    if context.get("bearer_token"):
        headers["Authorization"] = f"Bearer {context['bearer_token']}"

    return headers


def _parse(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return None


def _get_once(url: str, headers: dict[str, str], timeout: float) -> JsonReply:
    request = Request(url, headers=headers, method="GET")
    try:
        with urlopen(request, timeout=timeout) as response:
            raw = response.read(MAX_BODY_SIZE)
            status = response.status
    except HTTPError as e:
        raw = e.read(MAX_BODY_SIZE) if e.fp is not None else b""
        e.close()
        status = e.code
    body = raw.decode("utf-8", errors="replace")
    return JsonReply(url=url, status_code=status, body=body, data=_parse(body))


def fetch_json(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = 0,
    retry_delay: float = 1.0,
    display_url: str | None = None,
) -> JsonReply:
    """
    GET a JSON endpoint.

    Args:
        url: Endpoint URL
        headers: Request headers
        timeout: Socket timeout in seconds
        retries: Extra attempts when the endpoint is unreachable (0 = single attempt)
        retry_delay: Initial backoff between attempts in seconds
        display_url: URL as shown in logs and errors (masked form)

    Returns:
        JsonReply for any HTTP status

    Raises:
        ExternalDependencyError: The endpoint could not be reached
    """
    headers = headers or {}
    label = display_url or url
    logger.debug("GET %s", label)

    if retries <= 0:
        try:
            return _get_once(url, headers, timeout)
        except (URLError, TimeoutError, OSError) as e:
            raise ExternalDependencyError(f"Could not reach {label}: {_describe(e)}", cause=e) from e

    backoff = ExponentialDelay(
        min_delay=timedelta(seconds=retry_delay),
        max_delay=timedelta(seconds=retry_delay * 10),
        factor=2,
        jitter=0.1,
    )

    def should_retry(e: Exception) -> bool:
        return isinstance(e, (URLError, TimeoutError, OSError))

    policy = RetryWithBackoffPolicy(
        max_retries=retries,
        backoff=backoff,
        should_handle=should_retry,
    )

    @policy
    def attempt() -> JsonReply:
        return _get_once(url, headers, timeout)

    try:
        return attempt()
    except RetryLimitReached as e:
        cause = e.__cause__ or e
        raise ExternalDependencyError(
            f"Could not reach {label} after {retries + 1} attempts: {_describe(cause)}",
            cause=cause if isinstance(cause, Exception) else None,
        ) from e
    except (URLError, TimeoutError, OSError) as e:
        raise ExternalDependencyError(f"Could not reach {label}: {_describe(e)}", cause=e) from e


def extract_field(data: Any, path: str) -> Any:
    """
    Read a dotted path (``projectStatus.status``) from parsed JSON.

    Returns None when any step is missing or not an object.
    """
    current = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _describe(error: BaseException) -> str:
    if isinstance(error, URLError):
        return f"URL error: {error.reason}"
    if isinstance(error, TimeoutError):
        return "request timed out"
    return str(error)
