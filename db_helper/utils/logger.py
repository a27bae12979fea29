"""
utils/logger.py
---------------
Logging helpers for the library.
All modules obtain their logger with `get_logger(__name__)`. Nothing is
printed until the application calls `configure_logging()`.
"""

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT_NAME = "db_helper"

logging.getLogger(_ROOT_NAME).addHandler(logging.NullHandler())

_handler: logging.Handler | None = None


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Attach a stdout handler to the package logger, once.

    Args:
        level: Level for the package logger.

    Returns:
        The configured package logger.
    """
    global _handler
    package_logger = logging.getLogger(_ROOT_NAME)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
        package_logger.addHandler(_handler)
    package_logger.setLevel(level)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A logging.Logger under the package hierarchy.
    """
    return logging.getLogger(name)
