"""
Logging configuration with a console handler and a rotating file handler.

Usage:
    from wayfinder.logging_config import setup_logging
    setup_logging()  # Call once at application startup
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR = Path("logs")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# 5 MB per file, 5 backups
MAX_LOG_SIZE_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5


def setup_logging(
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_dir: Path | None = LOG_DIR,
) -> None:
    """
    Configure root logging for the wayfinder service.

    Args:
        console_level: Minimum level for console output.
        file_level: Minimum level for the rotating `wayfinder.log` file.
        log_dir: Directory for log files; None disables file logging.
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    # Prevents duplicate records on re-init
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    package_logger = logging.getLogger("wayfinder")
    for handler in [h for h in package_logger.handlers if isinstance(h, RotatingFileHandler)]:
        package_logger.removeHandler(handler)
        handler.close()

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "wayfinder.log",
            maxBytes=MAX_LOG_SIZE_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized - console: %s, file: %s",
        logging.getLevelName(console_level),
        logging.getLevelName(file_level) if log_dir is not None else "off",
    )
