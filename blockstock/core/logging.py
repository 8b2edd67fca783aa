"""
Logging setup shared by the API process and the migration scripts.

- console: level from LOG_LEVEL
- file: optional, daily rotation when LOG_FILE is set

Usage:
    from blockstock.core.logging import setup_logging
    setup_logging()
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from blockstock.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "httpcore",
    "httpx",
    "multipart",
]

_configured = False


def setup_logging(level: str | None = None, log_file: str | None = None) -> logging.Logger:
    """Configure the root logger once.

    Args:
        level: level name, defaults to ``settings.log_level``
        log_file: path of a daily-rotated log file, defaults to ``settings.log_file``;
            an empty value disables file logging

    Returns:
        The root logger.
    """
    global _configured

    root_logger = logging.getLogger()
    if _configured:
        return root_logger

    resolved_level = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO
    root_logger.setLevel(resolved_level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_path = settings.log_file if log_file is None else log_file
    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            path,
            when="midnight",
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(resolved_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
    return root_logger
