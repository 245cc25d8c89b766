"""
Error Handling & Logging Infrastructure

Exception types raised across the package and the logging setup used by the CLI.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

LOGGER_NAME = "listenstats"


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Set up logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Optional directory for a dated log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"listenstats_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


class ListenStatsError(Exception):
    """Base class for errors raised by this package."""
    pass


class ConfigurationError(ListenStatsError):
    """Exception for configuration-related errors."""
    pass


class UnsupportedFileError(ListenStatsError):
    """One or more files were rejected at intake because of their name."""

    def __init__(self, names: Iterable[str], allowed: Iterable[str] = (".csv", ".json")):
        self.names = list(names)
        self.allowed = tuple(allowed)
        self.accepted = []
        self.summary = None
        super().__init__(
            f"Please import {' or '.join(s.lstrip('.').upper() for s in self.allowed)} files "
            f"(rejected: {', '.join(self.names)})"
        )


class IllegalTransitionError(ListenStatsError):
    """A file entry was asked to move to a state its lifecycle does not allow."""

    def __init__(self, name: str, current, target):
        self.current = current
        self.target = target
        super().__init__(f"{name}: cannot move from {current.value} to {target.value}")


class EntryNotRemovableError(ListenStatsError):
    """Only pending entries can be removed from the import queue."""
    pass


class NoDataError(ListenStatsError):
    """No record was imported from any file."""

    def __init__(self, message: str = "no valid data found in any imported file"):
        super().__init__(message)
