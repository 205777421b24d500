"""Tests for error kinds, the error hierarchy and error chain traversal."""

import socket
import subprocess
import urllib.error

from stagecoach.error_codes import ErrorKind, classify_error, error_chain, find_in_chain
from stagecoach.errors import (
    DefinitionError,
    ExternalDependencyError,
    PredicateFailure,
    StageError,
    StageExecutionError,
    StagecoachError,
    StageTimeoutError,
)
from stagecoach.tasks.result import TaskResult


class TestErrorChain:
    """Tests for error_chain() function."""

    def test_single_error_returns_list_with_one_item(self) -> None:
        error = ValueError("test")
        assert error_chain(error) == [error]

    def test_chained_errors_returns_root_to_leaf(self) -> None:
        root = ValueError("root")
        middle = RuntimeError("middle")
        middle.__cause__ = root
        leaf = TypeError("leaf")
        leaf.__cause__ = middle

        assert error_chain(leaf) == [root, middle, leaf]

    def test_cycle_terminates(self) -> None:
        a = ValueError("a")
        b = ValueError("b")
        a.__cause__ = b
        b.__cause__ = a
        assert len(error_chain(a)) == 2

    def test_find_in_chain(self) -> None:
        root = OSError("disk")
        leaf = StageExecutionError("failed", cause=root)
        assert find_in_chain(leaf, OSError) is root
        assert find_in_chain(leaf, KeyError) is None


class TestClassifyError:
    """Tests for classify_error()."""

    def test_stagecoach_errors_carry_their_kind(self) -> None:
        assert classify_error(DefinitionError("bad")) == ErrorKind.DEFINITION
        assert classify_error(StageExecutionError("exit 1")) == ErrorKind.STAGE_EXECUTION
        assert classify_error(PredicateFailure("DOWN")) == ErrorKind.PREDICATE
        assert classify_error(StageTimeoutError("slow")) == ErrorKind.TIMEOUT
        assert classify_error(ExternalDependencyError("unreachable")) == ErrorKind.EXTERNAL_DEPENDENCY

    def test_explicit_kind_respected(self) -> None:
        assert classify_error(StageError("x", kind=ErrorKind.TIMEOUT)) == ErrorKind.TIMEOUT

    def test_timeouts(self) -> None:
        assert classify_error(TimeoutError()) == ErrorKind.TIMEOUT
        assert classify_error(subprocess.TimeoutExpired("sleep", 1)) == ErrorKind.TIMEOUT

    def test_network_errors(self) -> None:
        assert classify_error(ConnectionRefusedError()) == ErrorKind.EXTERNAL_DEPENDENCY
        assert classify_error(urllib.error.URLError("down")) == ErrorKind.EXTERNAL_DEPENDENCY
        assert classify_error(socket.gaierror()) == ErrorKind.EXTERNAL_DEPENDENCY
        assert classify_error(FileNotFoundError("git")) == ErrorKind.EXTERNAL_DEPENDENCY

    def test_unknown_errors_are_internal(self) -> None:
        assert classify_error(ValueError("bug")) == ErrorKind.INTERNAL

    def test_kind_found_in_cause_chain(self) -> None:
        wrapper = RuntimeError("wrapped")
        wrapper.__cause__ = PredicateFailure("DOWN")
        assert classify_error(wrapper) == ErrorKind.PREDICATE


class TestErrorKind:
    def test_retryable(self) -> None:
        assert ErrorKind.TIMEOUT.retryable
        assert ErrorKind.EXTERNAL_DEPENDENCY.retryable
        assert not ErrorKind.DEFINITION.retryable
        assert not ErrorKind.STAGE_EXECUTION.retryable
        assert not ErrorKind.PREDICATE.retryable

    def test_labels_unique(self) -> None:
        labels = [str(kind) for kind in ErrorKind]
        assert len(labels) == len(set(labels))


class TestErrorHierarchy:
    def test_codes(self) -> None:
        assert StagecoachError("x").code == 100
        assert DefinitionError("x").code == 101
        assert StageExecutionError("x").code == 201
        assert PredicateFailure("x").code == 202
        assert StageTimeoutError("x").code == 203
        assert ExternalDependencyError("x").code == 300

    def test_timeout_is_builtin_timeout(self) -> None:
        assert isinstance(StageTimeoutError("x"), TimeoutError)

    def test_cause_in_message(self) -> None:
        error = ExternalDependencyError("push rejected", cause=OSError("network"))
        assert str(error) == "push rejected caused by: network"
        assert error.__cause__ is error.cause

    def test_definition_problems_default_to_message(self) -> None:
        assert DefinitionError("bad").problems == ["bad"]


class TestTaskResultFromError:
    def test_carries_exit_code_and_details(self) -> None:
        result = TaskResult.from_error(StageExecutionError("exit 2", exit_code=2, details={"stdout": "x"}))

        assert not result.succeeded
        assert result.exit_code == 2
        assert result.outputs == {"stdout": "x"}
        assert result.error_kind == ErrorKind.STAGE_EXECUTION

    def test_empty_message_uses_type_name(self) -> None:
        assert TaskResult.from_error(RuntimeError()).error == "RuntimeError"
