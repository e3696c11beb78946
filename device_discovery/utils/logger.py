"""
Colored console logging for device discovery operations.

Provides a Logger class built on colorama with leveled output, section
headers, progress markers and simple tables for the end-of-scan summary.
"""

import sys
from datetime import datetime
from enum import Enum
from typing import List, Optional
from colorama import Fore, Style, init

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class LogLevel(Enum):
    """Enumeration for different log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
}

# Shared threshold; set_log_level() changes it for every Logger
_min_level = LogLevel.INFO


class Logger:
    """
    Logger with colored console output and progress markers.

    All instances share the level set through set_log_level(), so
    components that create their own Logger follow the --verbose flag.
    """

    LEVEL_COLORS = {
        LogLevel.DEBUG: Fore.CYAN,
        LogLevel.INFO: Fore.GREEN,
        LogLevel.WARNING: Fore.YELLOW,
        LogLevel.ERROR: Fore.RED,
    }

    LEVEL_SYMBOLS = {
        LogLevel.DEBUG: "🔍",
        LogLevel.INFO: "ℹ️",
        LogLevel.WARNING: "⚠️",
        LogLevel.ERROR: "❌",
    }

    def __init__(self, name: str = "DeviceDiscovery", min_level: Optional[LogLevel] = None):
        """
        Initialize the Logger.

        Args:
            name: Name of the logger (default: "DeviceDiscovery")
            min_level: Per-instance minimum level; follows the global level when None
        """
        self.name = name
        self._min_level = min_level
        self._progress_active = False

    @property
    def min_level(self) -> LogLevel:
        return self._min_level or _min_level

    @min_level.setter
    def min_level(self, level: LogLevel) -> None:
        self._min_level = level

    def _should_log(self, level: LogLevel) -> bool:
        return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.min_level]

    def _timestamp(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _format_details(self, details: dict) -> str:
        if not details:
            return ""
        joined = " | ".join(f"{k}={v}" for k, v in details.items())
        return f" {Style.DIM}({joined}){Style.RESET_ALL}"

    def _log(self, level: LogLevel, message: str, **kwargs) -> None:
        """
        Format and print a message if it passes the level threshold.

        Args:
            level: Log level
            message: Message to log
            **kwargs: Extra context printed as key=value pairs
        """
        if not self._should_log(level):
            return

        color = self.LEVEL_COLORS[level]
        symbol = self.LEVEL_SYMBOLS[level]
        line = (
            f"{Style.DIM}[{self._timestamp()}]{Style.RESET_ALL} "
            f"{color}{symbol} {level.value:<7}{Style.RESET_ALL} "
            f"{message}{self._format_details(kwargs)}"
        )
        print(line, file=sys.stderr if level == LogLevel.ERROR else sys.stdout)

    def debug(self, message: str, **kwargs) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs) -> None:
        """
        Log an error message.

        Args:
            message: Error message
            exception: Optional exception object for additional context
            **kwargs: Additional context information
        """
        if exception:
            kwargs["exception"] = f"{type(exception).__name__}: {exception}"
        self._log(LogLevel.ERROR, message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        """Log a success message (INFO level with its own styling)."""
        if not self._should_log(LogLevel.INFO):
            return

        print(
            f"{Style.DIM}[{self._timestamp()}]{Style.RESET_ALL} "
            f"{Fore.GREEN}✅ SUCCESS {Style.RESET_ALL} "
            f"{Style.BRIGHT}{message}{Style.RESET_ALL}{self._format_details(kwargs)}"
        )

    def section(self, title: str) -> None:
        """Print a section header for organizing output."""
        if not self._should_log(LogLevel.INFO):
            return

        separator = "=" * 60
        print(f"\n{Fore.BLUE}{Style.BRIGHT}{separator}")
        print(f"  {title.upper()}")
        print(f"{separator}{Style.RESET_ALL}\n")

    def progress_start(self, message: str) -> None:
        """Mark the start of a long-running operation."""
        if not self._should_log(LogLevel.INFO):
            return

        print(
            f"{Style.DIM}[{self._timestamp()}]{Style.RESET_ALL} "
            f"{Fore.BLUE}⏳ PROGRESS{Style.RESET_ALL} {message}...",
            flush=True,
        )
        self._progress_active = True

    def progress_end(self, final_message: Optional[str] = None) -> None:
        """
        End the current progress marker.

        Args:
            final_message: Optional success message to display
        """
        if not self._progress_active:
            return

        self._progress_active = False
        if final_message:
            self.success(final_message)

    def table_header(self, headers: List[str], widths: List[int]) -> None:
        if not self._should_log(LogLevel.INFO):
            return

        header_row = " | ".join(f"{header:<{width}}" for header, width in zip(headers, widths))
        print(f"{Style.BRIGHT}{header_row}{Style.RESET_ALL}")
        separator = "-+-".join("-" * width for width in widths)
        print(f"{Style.DIM}{separator}{Style.RESET_ALL}")

    def table_row(self, values: List[str], widths: List[int], highlight: bool = False) -> None:
        if not self._should_log(LogLevel.INFO):
            return

        row = " | ".join(
            f"{str(value)[:width]:<{width}}" for value, width in zip(values, widths)
        )
        print(f"{Style.BRIGHT}{row}{Style.RESET_ALL}" if highlight else row)

    def subnet_info(self, subnets: List[str]) -> None:
        """
        Display the subnets selected for scanning.

        Args:
            subnets: Subnet descriptions (CIDR plus label)
        """
        if not self._should_log(LogLevel.INFO):
            return

        print(f"\n{Fore.CYAN}{Style.BRIGHT}🌐 SUBNETS TO SCAN{Style.RESET_ALL}")
        for subnet in subnets:
            print(f"  • {Style.BRIGHT}{subnet}{Style.RESET_ALL}")
        print()


# Global logger instance
logger = Logger()


def set_log_level(level: LogLevel) -> None:
    """
    Set the global log level.

    Args:
        level: Minimum log level to display
    """
    global _min_level
    _min_level = level


def get_logger(name: str = "DeviceDiscovery") -> Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return Logger(name)
