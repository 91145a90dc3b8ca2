"""
Base class for the I/O stages of a discovery cycle.

The flood prober, the neighbor-cache reader and the vendor resolver share
timing and logging helpers through this class.
"""

from datetime import datetime
from typing import Optional

from ..utils.logger import Logger, get_logger


class BaseScanner:
    """
    Common helpers for discovery stages that talk to the outside world.
    """

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the base scanner.

        Args:
            logger: Logger instance (defaults to a module logger)
        """
        self.logger = logger or get_logger(__name__)
        self.scan_start_time: Optional[datetime] = None
        self.scan_end_time: Optional[datetime] = None

    def _start_scan_timer(self) -> None:
        """Start the scan timing measurement."""
        self.scan_start_time = datetime.now()

    def _end_scan_timer(self) -> float:
        """
        End the scan timing measurement and return duration.

        Returns:
            Scan duration in seconds as a float
        """
        self.scan_end_time = datetime.now()
        if self.scan_start_time:
            return (self.scan_end_time - self.scan_start_time).total_seconds()
        return 0.0

    def _log_debug(self, message: str) -> None:
        self.logger.debug(f"[{type(self).__name__}] {message}")
