"""
Logging configuration for the Chittoor project tracker.

This module provides the logging infrastructure with configurable levels,
file output and helpers for the recurring tracker log lines.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Dict
from datetime import datetime


class TrackerLogger:
    """Custom logger for project tracker operations."""

    def __init__(self, name: str = "chittoor_tracker", level: str = "INFO",
                 log_file: Optional[str] = None):
        """
        Initialize the tracker logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path for log output
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Clear any existing handlers
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            self._setup_file_handler(log_file, formatter)

    def _setup_file_handler(self, log_file: str, formatter: logging.Formatter):
        """Set up file logging handler."""
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)

    def close(self):
        """Flush and detach all handlers."""
        for handler in list(self.logger.handlers):
            handler.flush()
            handler.close()
            self.logger.removeHandler(handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def critical(self, message: str):
        """Log critical message."""
        self.logger.critical(message)

    def log_session_start(self, user_email: Optional[str] = None):
        """Log the start of a dashboard session."""
        self.info("=" * 60)
        self.info("CHITTOOR TRACKER SESSION STARTED")
        self.info("=" * 60)
        self.info(f"User: {user_email or 'anonymous'}")
        self.info(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_session_end(self):
        """Log the end of a dashboard session."""
        self.info(f"Session closed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_status_counts(self, counts: Dict[str, int]):
        """Log approval status counts."""
        parts = ", ".join(f"{key}={value:,}" for key, value in counts.items())
        self.info(f"Approval status counts: {parts}")

    def log_file_operation(self, operation: str, file_path: str, record_count: int):
        """Log file operations."""
        self.info(f"{operation}: {file_path} ({record_count:,} records)")


def setup_logging(config) -> TrackerLogger:
    """
    Set up logging based on configuration.

    Args:
        config: TrackerConfig instance

    Returns:
        Configured TrackerLogger instance
    """
    return TrackerLogger(
        name="chittoor_tracker",
        level=config.log_level,
        log_file=config.log_file
    )
