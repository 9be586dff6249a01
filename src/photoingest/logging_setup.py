"""
Logging configuration.

Everything logs under the ``photoingest`` logger. The console gets a rich
handler on stderr, so log records never mix with the progress output on
stdout; an optional log file always records DEBUG.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from photoingest.exceptions import ConfigurationError

LOGGER_NAME = "photoingest"

FILE_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-7s | [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def _make_console_handler(level: int, rich_console: bool) -> logging.Handler:
    handler: logging.Handler
    if rich_console:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            rich_tracebacks=True,
            # Paths and templates contain brackets
            markup=False,
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler.setLevel(level)
    return handler


def _make_file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(FILE_FORMAT)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | str | None = None,
    *,
    verbose: bool = False,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure the photoingest logger. Safe to call more than once.

    Args:
        log_level: Console level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file that receives every record from DEBUG up
        verbose: Force the console to DEBUG (skips, conflict checks, copies)
        rich_console: Use RichHandler instead of a plain stream handler

    Returns:
        The configured ``photoingest`` logger

    Raises:
        ConfigurationError: If the log file cannot be created or opened
    """
    console_level = logging.DEBUG if verbose else getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    logger.addHandler(_make_console_handler(console_level, rich_console))
    logger.setLevel(console_level)

    if log_file:
        try:
            file_handler = _make_file_handler(Path(log_file))
        except OSError as e:
            raise ConfigurationError(
                f"Unable to open log file {log_file}: {e}", field="log_file"
            ) from e
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger
