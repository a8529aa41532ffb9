"""Logging setup for the build tools.

Everything logs under the ``dotnet_build_tools`` namespace. Console output
goes to stderr so stdout stays free for command results (channels, JSON).
"""

import logging
import os
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "dotnet_build_tools"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_loggers: dict[str, logging.Logger] = {}
_initialized = False


def _running_in_ci() -> bool:
    return os.environ.get("GITHUB_ACTIONS", "").lower() == "true"


def _console_handler(log_format: str, rich_console: bool) -> logging.Handler:
    # Runner logs are plain text; rich wraps lines to a fake terminal width there
    if rich_console and not _running_in_ci():
        return RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(log_format))
    return handler


def setup_logging(
    level: str = "INFO",
    log_format: str = DEFAULT_FORMAT,
    log_file: Path | None = None,
    rich_console: bool = True,
) -> None:
    """
    Configure the package logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Console level (DEBUG, INFO, WARNING, ERROR)
        log_format: Format for plain console and file output
        log_file: Optional file that receives every record at DEBUG
        rich_console: Use rich for console output outside CI runners
    """
    global _initialized

    numeric_level = getattr(logging, level.upper())
    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(logging.DEBUG if log_file else numeric_level)
    package_logger.handlers.clear()

    console_handler = _console_handler(log_format, rich_console)
    console_handler.setLevel(numeric_level)
    package_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format))
        package_logger.addHandler(file_handler)

    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, nested under the package namespace."""
    if not _initialized:
        setup_logging()

    if name not in _loggers:
        qualified = name if name.startswith(ROOT_LOGGER) else f"{ROOT_LOGGER}.{name}"
        _loggers[name] = logging.getLogger(qualified)
    return _loggers[name]
