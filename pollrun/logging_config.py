"""Centralized logging configuration for pollrun.

Log records go to stderr only; stdout carries the relayed command output.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "pollrun"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    """Map ``-v`` repetitions to a logging level (WARNING, INFO, DEBUG)."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(level: int = logging.WARNING, format_string: str | None = None) -> logging.Logger:
    """Install a single stderr handler on the package logger.

    Calling this more than once replaces the previous handler instead of
    stacking duplicates.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
