"""
Logging setup shared by the API process and scripts.

- Console: LOG_LEVEL from settings
- File: optional, daily rotation when LOG_FILE is set

Usage:
    from admin_ledger.logging import setup_logging
    setup_logging()
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from admin_ledger.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic.runtime.migration",
    "httpx",
    "httpcore",
]


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the root logger once.

    Calling this again replaces the handlers it installed earlier,
    so tests and reloads don't end up with duplicated output.
    """
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_admin_ledger", False):
            root_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler._admin_ledger = True
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_path,
            when="midnight",
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler._admin_ledger = True
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
