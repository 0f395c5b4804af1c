"""
Logging configuration for the ingestion framework.

All modules obtain loggers through get_logger() (or logging.getLogger with
their module name) so a single setup_logging() call from the CLI controls
level and destination for the whole package.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from ingestion_framework.core.constants import LOG_FORMAT, LOG_DATE_FORMAT

ROOT_LOGGER_NAME = "ingestion_framework"


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path; when given, records are also written there

    Returns:
        The configured package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Re-running setup (tests, repeated CLI invocations) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module, e.g. get_logger(__name__)."""
    return logging.getLogger(name)
