"""Tests for logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from photoingest.exceptions import ConfigurationError
from photoingest.logging_setup import LOGGER_NAME, setup_logging


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_rich_console_handler(self) -> None:
        logger = setup_logging("INFO")
        assert logger.name == "photoingest"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_plain_console_handler(self) -> None:
        logger = setup_logging("warning", rich_console=False)
        assert not isinstance(logger.handlers[0], RichHandler)
        assert logger.handlers[0].level == logging.WARNING

    def test_verbose_forces_debug(self) -> None:
        logger = setup_logging("ERROR", verbose=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_unknown_level_defaults_to_info(self) -> None:
        assert setup_logging("CHATTY").level == logging.INFO

    def test_log_file_always_debug(self, tmp_path: Path) -> None:
        """The file handler records DEBUG even when the console is at INFO."""
        log_file = tmp_path / "logs" / "photoingest.log"
        logger = setup_logging("INFO", log_file)

        logging.getLogger("photoingest.workflow").debug("probing %s", "img.jpg")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.INFO
        assert "probing img.jpg" in log_file.read_text(encoding="utf-8")

    def test_repeated_setup_replaces_handlers(self, tmp_path: Path) -> None:
        setup_logging("INFO", tmp_path / "a.log")
        logger = setup_logging("INFO")
        assert len(logger.handlers) == 1

    def test_unwritable_log_file(self, tmp_path: Path) -> None:
        """A log path that cannot be opened is a configuration error, not a crash."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")

        with pytest.raises(ConfigurationError, match="Unable to open log file") as exc_info:
            setup_logging("INFO", blocker / "photoingest.log")

        assert exc_info.value.field == "log_file"
