"""Logging helpers for the signal validation engine."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

from rich.logging import RichHandler

from signal_validation.config import (
    LOG_BACKUP_COUNT,
    LOG_FILE,
    LOG_MAX_BYTES,
    LOGS_DIR,
    QUIET_LOGGERS,
)


def setup_logging(
    log_level: int = logging.INFO,
    console_level: int = logging.ERROR,
    log_dir: Union[str, Path] = LOGS_DIR
) -> None:
    """Set up logging configuration.

    Everything at `log_level` goes to a rotating file under `log_dir`; only
    records at `console_level` or above reach the terminal.

    Args:
        log_level: Logging level to use (default: INFO)
        console_level: Minimum level shown in the terminal (default: ERROR)
        log_dir: Directory for the rotating log file
    """
    os.makedirs(log_dir, exist_ok=True)

    file_handler = RotatingFileHandler(
        Path(log_dir) / LOG_FILE,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    console_handler = RichHandler(rich_tracebacks=True)
    console_handler.setLevel(console_level)

    logging.basicConfig(
        level=log_level,
        handlers=[console_handler, file_handler]
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def set_console_level(level: int) -> None:
    """Change the level of the terminal handlers installed by setup_logging."""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)
