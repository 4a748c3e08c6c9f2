"""
Logging configuration for the bot.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging():
    """Setup logging with proper format and handlers."""

    # Create logger
    logger = logging.getLogger("aptbot")
    logger.setLevel(logging.DEBUG)

    # Remove existing handlers
    logger.handlers.clear()

    # Create console handler with formatting
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    # Add handler to logger
    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def configure_file_logging(settings) -> None:
    """
    Apply log level and, if log_dir is set, add a rotating file handler.

    Called once on startup, after settings are available.
    """
    bot_logger.setLevel(settings.log_level.upper())

    if not settings.log_dir:
        return

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "aptbot.log"

    for existing in bot_logger.handlers:
        if isinstance(existing, RotatingFileHandler) and Path(existing.baseFilename) == log_file.resolve():
            return

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    bot_logger.addHandler(file_handler)
    bot_logger.info(f"Logging to {log_file} (max {settings.log_max_bytes} bytes x {settings.log_backup_count})")


# Global logger instance
bot_logger = setup_logging()
