"""Tests for structlog/stdlib logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from vixgate.infrastructure.config import AppConfig
from vixgate.infrastructure.logging import build_logging_config, configure_logging
from vixgate.infrastructure.logging import setup as logging_setup


@pytest.fixture()
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    logging_setup._stop_listener()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestBuildLoggingConfig:
    def test_levels_follow_config(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="WARNING"))

        assert cfg["root"]["level"] == "WARNING"
        assert cfg["loggers"]["uvicorn.access"]["level"] == "WARNING"

    def test_json_renderer_in_prod(self) -> None:
        cfg = build_logging_config(AppConfig(environment="prod"))
        renderer = cfg["formatters"]["structlog"]["processors"][-1]

        assert isinstance(renderer, structlog.processors.JSONRenderer)

    def test_console_renderer_in_dev(self) -> None:
        cfg = build_logging_config(AppConfig())
        renderer = cfg["formatters"]["structlog"]["processors"][-1]

        assert isinstance(renderer, structlog.dev.ConsoleRenderer)

    def test_template_not_mutated(self) -> None:
        build_logging_config(AppConfig())

        assert logging_setup.UVICORN_LOGGING_CONFIG["formatters"] == {}


class TestLevelRangeFilter:
    def _record(self, level: int) -> logging.LogRecord:
        return logging.LogRecord("t", level, __file__, 1, "msg", None, None)

    def test_stdout_range(self) -> None:
        f = logging_setup._LevelRangeFilter(high=logging.WARNING)

        assert f.filter(self._record(logging.INFO)) is True
        assert f.filter(self._record(logging.ERROR)) is False

    def test_stderr_range(self) -> None:
        f = logging_setup._LevelRangeFilter(low=logging.ERROR)

        assert f.filter(self._record(logging.WARNING)) is False
        assert f.filter(self._record(logging.CRITICAL)) is True


class TestConfigureLogging:
    def test_root_routed_through_queue(self, restore_logging: None) -> None:
        configure_logging(AppConfig(log_level="INFO"))

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging_setup._DictPreservingQueueHandler)
        assert root.level == logging.INFO

    def test_debug_quiets_noisy_loggers(self, restore_logging: None) -> None:
        configure_logging(AppConfig(log_level="DEBUG"))

        assert logging.getLogger("httpx").level == logging.INFO
        assert logging.getLogger("asyncio").level == logging.INFO
