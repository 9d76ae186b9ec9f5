"""
Logging module for the photo place renamer.

This module provides centralized logging configuration and progress
reporting for a rename run.
"""

import logging
import sys
from typing import Optional

from tqdm import tqdm


class Logger:
    """
    Centralized logging configuration for the photo place renamer.

    Console output goes to stderr; stdout is reserved for the rename plan.
    """

    def __init__(self, log_level: str = "WARNING", log_file: Optional[str] = None):
        """
        Initialize the logger.

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional log file path
        """
        self.log_level = getattr(logging, log_level.upper(), logging.WARNING)
        self.log_file = log_file
        self._setup_logging()

    def _setup_logging(self):
        """Set up logging configuration."""
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if self.log_file:
            try:
                file_handler = logging.FileHandler(self.log_file, mode='w', encoding='utf-8')
                file_handler.setLevel(self.log_level)
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)
                logging.info(f"Logging to file: {self.log_file}")
            except OSError as e:
                logging.error(f"Failed to set up file logging: {e}")

        # The API key travels in the query string; keep urllib3 from echoing URLs.
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('requests').setLevel(logging.WARNING)

        logging.debug("Logging system initialized")

    def get_logger(self, name: str) -> logging.Logger:
        """
        Get a logger instance for a specific module.

        Args:
            name: Logger name (usually __name__)

        Returns:
            Configured logger instance
        """
        return logging.getLogger(name)

    def log_run_summary(self, total_files: int, renamed_files: int,
                        unresolved_files: int, cache_hits: int, cache_misses: int,
                        applied: bool):
        """
        Log a summary of the rename run.

        Args:
            total_files: Number of files in the plan
            renamed_files: Number of files actually renamed
            unresolved_files: Number of files without a place segment
            cache_hits: Geocode lookups answered from the cache
            cache_misses: Geocode lookups sent to the network
            applied: Whether renames were applied or only previewed
        """
        logger = logging.getLogger(__name__)

        logger.info("=" * 50)
        logger.info("RUN SUMMARY (%s)", "apply" if applied else "preview")
        logger.info("=" * 50)
        logger.info(f"Files planned: {total_files}")
        logger.info(f"Files renamed: {renamed_files}")
        logger.info(f"Files without place: {unresolved_files}")
        logger.info(f"Geocoding cache: {cache_hits} hits, {cache_misses} misses")
        logger.info("=" * 50)

    def create_progress_bar(self, total: int, desc: str = "Processing") -> Optional[tqdm]:
        """
        Create a progress bar for tracking per-file work.

        Args:
            total: Total number of items to process
            desc: Description for the progress bar

        Returns:
            tqdm progress bar instance, or None when there is nothing to track
        """
        if total > 0:
            return tqdm(total=total, desc=desc, unit="files", ncols=80, file=sys.stderr)
        return None
