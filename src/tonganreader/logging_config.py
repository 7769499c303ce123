"""Logging configuration for the reader."""
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from tonganreader.config import settings


def setup_logging(first_message: str = "", level: Optional[Union[int, str]] = None) -> None:
    """Configure logging for the entire application.

    Args:
        first_message: Banner line logged once the handlers are installed.
        level: Optional logging level. If None, uses LOG_LEVEL.
    """
    if level is None:
        level = settings.logging.level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(settings.logging.format)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if first_message:
        root_logger.info(first_message)
    root_logger.info(f"Logging configured with level: {logging.getLevelName(level)}")

    log_dir = settings.logging.dir
    if log_dir is not None:
        try:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)

            log_file = log_path / "tonganreader.log"
            file_handler = TimedRotatingFileHandler(
                log_file,
                when=settings.logging.rotation,
                interval=settings.logging.interval,
                backupCount=settings.logging.backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            root_logger.info(
                f"Log file: {log_file} (rotation: {settings.logging.rotation}, "
                f"interval: {settings.logging.interval}, backup_count: {settings.logging.backup_count})"
            )
        except OSError as e:
            root_logger.warning(f"Could not set up file logging: {e}")

    # Set logging levels for third-party libraries
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
