"""Tests for ExecutorConfig loading."""

from __future__ import annotations

import logging

import pytest

from stagecoach.config import ExecutorConfig, parse_level


class TestExecutorConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "STAGECOACH_DEFAULT_STAGE_TIMEOUT_S",
            "STAGECOACH_POLL_INTERVAL_S",
            "STAGECOACH_HOOK_TIMEOUT_S",
            "STAGECOACH_UNIFORM_EXIT_CODE",
            "STAGECOACH_LOG_JSON",
            "STAGECOACH_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

        config = ExecutorConfig.from_env()

        assert config == ExecutorConfig()
        assert config.default_stage_timeout_seconds == 3600
        assert config.poll_interval_seconds == 5
        assert config.uniform_exit_code is False

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STAGECOACH_DEFAULT_STAGE_TIMEOUT_S", "120")
        monkeypatch.setenv("STAGECOACH_POLL_INTERVAL_S", "0.5")
        monkeypatch.setenv("STAGECOACH_HOOK_TIMEOUT_S", "10")
        monkeypatch.setenv("STAGECOACH_UNIFORM_EXIT_CODE", "yes")
        monkeypatch.setenv("STAGECOACH_LOG_JSON", "1")
        monkeypatch.setenv("STAGECOACH_LOG_LEVEL", "debug")

        config = ExecutorConfig.from_env()

        assert config.default_stage_timeout_seconds == 120
        assert config.poll_interval_seconds == 0.5
        assert config.hook_timeout_seconds == 10
        assert config.uniform_exit_code is True
        assert config.log_json is True
        assert config.log_level == logging.DEBUG

    def test_false_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STAGECOACH_UNIFORM_EXIT_CODE", "off")
        assert ExecutorConfig.from_env().uniform_exit_code is False


class TestParseLevel:
    @pytest.mark.parametrize(
        ("name", "level"),
        [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), (" error ", logging.ERROR), ("loud", logging.INFO)],
    )
    def test_levels(self, name: str, level: int) -> None:
        assert parse_level(name) == level
