"""
Logging configuration for the FRA atlas application.

This module provides the logging infrastructure with configurable levels,
optional file output, and helpers for session-level log banners.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime


class AtlasLogger:
    """Custom logger for atlas sessions."""

    def __init__(self, name: str = "fra_atlas", level: str = "INFO",
                 log_file: Optional[str] = None):
        """
        Initialize the atlas logger.

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

    def log_session_start(self, claims_count: int, basemap: str):
        """Log the start of a session with the loaded data."""
        self.info("=" * 60)
        self.info("FRA ATLAS SESSION STARTED")
        self.info("=" * 60)
        self.info(f"Loaded {claims_count:,} claim features")
        self.info(f"Basemap: {basemap}")
        self.info(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_session_complete(self, stats):
        """Log session completion with statistics."""
        self.info("=" * 60)
        self.info("FRA ATLAS SESSION COMPLETED")
        self.info("=" * 60)
        self.info(f"Boundary fetches issued: {stats.fetches_issued:,}")
        self.info(f"Cache hits: {stats.cache_hits:,} ({stats.get_cache_hit_rate():.1f}%)")
        self.info(f"Fetch failures: {stats.fetch_failures:,}")
        self.info(f"Stale results discarded: {stats.stale_results_discarded:,}")
        self.info(f"Layers attached/detached: {stats.layers_attached:,}/{stats.layers_detached:,}")
        self.info(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_file_operation(self, operation: str, file_path: str, record_count: int):
        """Log file operations."""
        self.info(f"{operation}: {file_path} ({record_count:,} records)")


def setup_logging(config) -> AtlasLogger:
    """
    Set up logging based on configuration.

    Args:
        config: AtlasConfig instance

    Returns:
        Configured AtlasLogger instance
    """
    return AtlasLogger(
        name="fra_atlas",
        level=config.log_level,
        log_file=config.log_file
    )
