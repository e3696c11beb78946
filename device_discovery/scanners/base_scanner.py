"""
Base scanner for the Device Discovery Module.

Shared timing and logging helpers for the sweep, port scan and endpoint
discovery stages.
"""

from datetime import datetime
from typing import Optional


class BaseScanner:
    """
    Common base for all scanners.

    Provides optional logging (scanners are usable without a logger in
    tests) and a simple timer so the orchestrator can report phase durations.
    """

    scanner_type = "base"

    def __init__(self, logger=None):
        """
        Initialize the base scanner.

        Args:
            logger: Logger instance for outputting scan progress and errors
        """
        self.logger = logger
        self.scan_start_time: Optional[datetime] = None
        self.last_duration: float = 0.0

    def _start_scan_timer(self) -> None:
        self.scan_start_time = datetime.now()

    def _end_scan_timer(self) -> float:
        """
        End the scan timing measurement and return duration.

        Returns:
            Scan duration in seconds as a float
        """
        if self.scan_start_time:
            self.last_duration = (datetime.now() - self.scan_start_time).total_seconds()
        else:
            self.last_duration = 0.0
        return self.last_duration

    def _log_info(self, message: str) -> None:
        if self.logger:
            self.logger.info(message)

    def _log_warning(self, message: str) -> None:
        if self.logger:
            self.logger.warning(message)

    def _log_error(self, message: str) -> None:
        if self.logger:
            self.logger.error(message)

    def _log_debug(self, message: str) -> None:
        if self.logger:
            self.logger.debug(message)
