"""Shared pytest fixtures for Stagecoach tests."""

from __future__ import annotations

import json
import socket
import threading
from collections.abc import Generator
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, ClassVar

import pytest
import structlog

from stagecoach.config import ExecutorConfig
from stagecoach.executor import PipelineExecutor
from stagecoach.models.bindings import EnvironmentBindings
from stagecoach.models.stage import Stage
from stagecoach.tasks.interface import NoOpTask, Task
from stagecoach.tasks.registry import TaskRegistry
from stagecoach.tasks.result import TaskResult
from stagecoach.tasks.shell import ShellTask


@pytest.fixture(autouse=True)
def reset_log_context() -> Generator[None, None, None]:
    """Keep bound run context from leaking between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Shared Test Task Implementations
# =============================================================================


class RecordingTask(Task):
    """
    A task that records every stage it runs.

    Context ``fail: true`` makes it fail; ``exit_code`` sets the reported code;
    ``raise`` makes it raise the given exception instance.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.seen: list[Stage] = []

    def execute(self, stage: Stage, bindings: EnvironmentBindings) -> TaskResult:
        self.calls.append(stage.name)
        self.seen.append(stage)
        if "raise" in stage.context:
            raise stage.context["raise"]
        if stage.context.get("fail"):
            return TaskResult.failed(
                error=f"{stage.name} failed",
                exit_code=stage.context.get("exit_code"),
            )
        return TaskResult.success(outputs={"stage": stage.name, **stage.context.get("outputs", {})})


@pytest.fixture
def recorder() -> RecordingTask:
    return RecordingTask()


@pytest.fixture
def registry(recorder: RecordingTask) -> TaskRegistry:
    """Registry with the recording task plus real shell and noop tasks."""
    registry = TaskRegistry()
    registry.register("record", recorder)
    registry.register("shell", ShellTask)
    registry.register("noop", NoOpTask)
    return registry


@pytest.fixture
def config() -> ExecutorConfig:
    return ExecutorConfig(default_stage_timeout_seconds=30, poll_interval_seconds=0.01, hook_timeout_seconds=30)


@pytest.fixture
def executor(registry: TaskRegistry, config: ExecutorConfig) -> PipelineExecutor:
    return PipelineExecutor(registry=registry, config=config)


# =============================================================================
# Local JSON HTTP server
# =============================================================================


class JsonServer(HTTPServer):
    """
    Local HTTP server serving canned JSON responses per path.

    ``routes`` maps a path to a list of (status, body) pairs; each request
    takes the next pair, and the last one repeats.
    """

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), JsonHandler)
        self.routes: dict[str, list[tuple[int, Any]]] = {}
        self.requests: list[dict[str, Any]] = []

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.server_address[1]}"


class JsonHandler(BaseHTTPRequestHandler):
    server: JsonServer

    def log_message(self, format: str, *args: Any) -> None:
        """Suppress server logs during tests."""
        pass

    def do_GET(self) -> None:
        self.server.requests.append({"path": self.path, "headers": dict(self.headers)})
        responses = self.server.routes.get(self.path)
        if not responses:
            status, body = 404, {"error": "not found"}
        elif len(responses) > 1:
            status, body = responses.pop(0)
        else:
            status, body = responses[0]

        raw = body.encode() if isinstance(body, str) else json.dumps(body).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)


@pytest.fixture
def http_server() -> Generator[JsonServer, None, None]:
    """Start a local JSON server for the test."""
    server = JsonServer()
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def closed_url() -> str:
    """A URL on a port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/health"
