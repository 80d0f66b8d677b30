"""Logging setup shared by the API and the data-loading scripts."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO", logger_name: Optional[str] = None) -> logging.Logger:
    """Attach a single console handler to the root (or named) logger."""
    logger = logging.getLogger(logger_name)
    logger.setLevel(level.upper())

    # Prevent duplicate handlers when the app factory runs more than once
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
