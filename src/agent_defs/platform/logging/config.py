"""Logger configuration bootstrap.

Where: platform/logging/config.py
What: Build the console and rotating-file handlers of the package logger.
Why: The CLI, the sync engine and the browser all log through one logger.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Final

from rich.console import Console

from .handlers import StatusRichHandler

LOGGER_NAME: Final[str] = "agent_defs"
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES: Final[int] = 10 * 1024 * 1024
LOG_BACKUP_COUNT: Final[int] = 5


def setup_logger(
    log_file: Path | None = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """(Re)configure the ``agent_defs`` logger.

    Existing handlers are closed first, so calling this again (for example
    after argument parsing picks a verbosity) replaces the previous setup.

    Args:
        log_file: Rotating log file; ``None`` keeps logging on the console only.
        console_level: Threshold for the Rich console handler on stderr.
        file_level: Threshold for the file handler.

    Returns:
        logging.Logger: The configured package logger.
    """

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG)
    package_logger.propagate = False

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = StatusRichHandler(console=Console(stderr=True, soft_wrap=True))
    console_handler.setLevel(console_level)
    package_logger.addHandler(console_handler)

    if log_file is not None:
        package_logger.addHandler(_rotating_file_handler(log_file, file_level))

    return package_logger


def _rotating_file_handler(log_file: Path, level: int) -> logging.Handler:
    target = Path(log_file).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        target,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def detach_console(target: logging.Logger | None = None) -> list[logging.Handler]:
    """Remove Rich console handlers so full-screen output stays intact.

    Returns:
        list[logging.Handler]: The removed handlers, for re-attaching later.
    """

    active = target or logging.getLogger(LOGGER_NAME)
    removed = [handler for handler in active.handlers if isinstance(handler, StatusRichHandler)]
    for handler in removed:
        active.removeHandler(handler)
    return removed


logger: Final[logging.Logger] = setup_logger()


__all__ = ["LOGGER_NAME", "detach_console", "logger", "setup_logger"]
