"""
Unit tests for the logging system.
"""

import logging

import pytest

from InventoryConsole.core.logging import (
    ColoredFormatter,
    LogConfig,
    configure_logging,
    create_testing_config,
    get_logging_manager,
)
from InventoryConsole.core.logging.utils import LogTimer, RequestLogger, timed


class TestLoggingManager:
    """Tests for LoggingManager configuration."""

    def teardown_method(self):
        configure_logging(create_testing_config())

    def test_file_output_creates_both_logs(self, tmp_path):
        log_dir = tmp_path / "logs"
        configure_logging(LogConfig(level="INFO", log_dir=str(log_dir), console_output=False))

        logging.getLogger("InventoryConsole.test").error("disk full")
        for handler in get_logging_manager().handlers:
            handler.flush()

        assert (log_dir / "inventory_console.log").exists()
        assert "disk full" in (log_dir / "inventory_console_errors.log").read_text(encoding="utf-8")

    def test_reconfigure_replaces_handlers(self, tmp_path):
        config = LogConfig(level="DEBUG", log_dir=str(tmp_path), console_output=True, file_output=True)
        configure_logging(config)
        configure_logging(config)

        manager = get_logging_manager()
        root_handlers = logging.getLogger().handlers
        assert len(manager.handlers) == 3
        assert all(h in root_handlers for h in manager.handlers)
        assert manager.config is config

    def test_component_levels(self):
        configure_logging(LogConfig(
            level="DEBUG", file_output=False, component_levels={"aiohttp.access": "ERROR"},
        ))

        assert logging.getLogger("aiohttp.access").level == logging.ERROR

    def test_set_level_keeps_error_handler(self, tmp_path):
        configure_logging(LogConfig(level="DEBUG", log_dir=str(tmp_path), console_output=False))

        get_logging_manager().set_level("WARNING")

        levels = sorted(h.level for h in get_logging_manager().handlers)
        assert levels == [logging.WARNING, logging.ERROR]


class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_does_not_mutate_record(self):
        formatter = ColoredFormatter("%(levelname)s %(message)s", use_colors=True)
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)

        formatter.format(record)

        assert record.levelname == "WARNING"


class TestLogUtils:
    """Tests for LogTimer, timed and RequestLogger."""

    def test_log_timer_records_duration(self):
        with LogTimer("merge") as timer:
            pass

        assert timer.duration is not None and timer.duration >= 0

    @pytest.mark.asyncio
    async def test_timed_coroutine(self, caplog):
        logger = logging.getLogger("InventoryConsole.test.timed")

        @timed("refresh", logger=logger)
        async def refresh():
            return 5

        with caplog.at_level(logging.DEBUG, logger="InventoryConsole.test.timed"):
            assert await refresh() == 5

        assert "Operation 'refresh' completed" in caplog.text

    def test_timed_plain_function(self):
        @timed()
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    def test_request_logger_levels(self, caplog):
        request_logger = RequestLogger(logging.getLogger("InventoryConsole.test.requests"))

        with caplog.at_level(logging.DEBUG, logger="InventoryConsole.test.requests"):
            request_logger.log_request("GET", "/chat", 200, 0.01, user="1")
            request_logger.log_request("PUT", "/inventory", 400, 0.02)

        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.DEBUG, logging.WARNING]
        assert "User: 1" in caplog.records[0].getMessage()


def test_auto_configure_reads_environment(monkeypatch):
    from InventoryConsole.core.logging import auto_configure

    monkeypatch.setenv("INVENTORY_CONSOLE_ENV", "testing")
    auto_configure()

    config = get_logging_manager().config
    assert config.file_output is False


def test_auto_configure_level_override(monkeypatch):
    from InventoryConsole.core.logging import auto_configure

    monkeypatch.setenv("INVENTORY_CONSOLE_LOG_LEVEL", "warning")
    auto_configure("testing")

    assert get_logging_manager().config.level == "WARNING"
    assert logging.getLogger().level == logging.WARNING
    configure_logging(create_testing_config())
