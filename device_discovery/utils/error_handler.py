"""
Error taxonomy and centralized error reporting for the Device Discovery Module.

Transport failures never reach this layer: probers convert them to False/None
where they occur. What remains are input validation problems, configuration
problems and output (file) failures, all of which are reported and skipped.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from .logger import Logger, get_logger


class ErrorType(Enum):
    """Enumeration for different types of errors."""
    VALIDATION_ERROR = "validation_error"
    CONFIGURATION_ERROR = "configuration_error"
    FILE_ERROR = "file_error"
    EMPTY_RESULT = "empty_result"


class ErrorSeverity(Enum):
    """Enumeration for error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """
    Context information for error handling.

    Attributes:
        error_type: Type of error that occurred
        severity: Severity level of the error
        operation: Operation that was being performed when error occurred
        component: Component/module where error occurred
        additional_info: Additional context information
    """
    error_type: ErrorType
    severity: ErrorSeverity
    operation: str
    component: str
    additional_info: Dict[str, Any] = field(default_factory=dict)


class DeviceDiscoveryError(Exception):
    """Base exception class for Device Discovery Module."""

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.error_context = error_context


class ValidationError(DeviceDiscoveryError):
    """Exception for malformed or out-of-range input."""
    pass


class ConfigurationError(DeviceDiscoveryError):
    """Exception for configuration-related errors."""
    pass


class OutputError(DeviceDiscoveryError):
    """Exception for failures writing reports or artifacts."""
    pass


class ErrorHandler:
    """
    Records and reports non-fatal errors.

    Each handled error is counted per type, logged at a level matching its
    severity and, for the first occurrence of a type, followed by
    troubleshooting suggestions.
    """

    SUGGESTIONS = {
        ErrorType.VALIDATION_ERROR: [
            "Use CIDR notation A.B.C.D/P (e.g., 192.168.1.0/24)",
            "Each octet must be 0-255 and the prefix 0-32",
        ],
        ErrorType.CONFIGURATION_ERROR: [
            "Check YAML syntax in scan_config.yml",
            "Delete the file to fall back to built-in defaults",
        ],
        ErrorType.FILE_ERROR: [
            "Check that the output directory is writable",
            "Check available disk space",
        ],
        ErrorType.EMPTY_RESULT: [
            "Pass subnets explicitly with --subnets",
            "Check that at least one non-loopback IPv4 interface is up",
        ],
    }

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the ErrorHandler.

        Args:
            logger: Logger instance for error reporting
        """
        self.logger = logger or get_logger(__name__)
        self.error_statistics: Dict[ErrorType, int] = {error_type: 0 for error_type in ErrorType}
        self.messages: List[str] = []

    def handle_error(self, error: Exception, context: ErrorContext) -> None:
        """
        Record and log an error.

        Args:
            error: The exception that occurred
            context: Error context information
        """
        self.error_statistics[context.error_type] += 1
        message = f"{context.component}.{context.operation}: {error}"
        self.messages.append(message)

        if context.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
            self.logger.error(message)
        elif context.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(message)
        else:
            self.logger.warning(str(error))

        if self.error_statistics[context.error_type] == 1:
            self._suggest(context.error_type)

    def _suggest(self, error_type: ErrorType) -> None:
        for suggestion in self.SUGGESTIONS.get(error_type, []):
            self.logger.info(f"  • {suggestion}")

    def get_error_summary(self) -> Dict[str, int]:
        """Return counts for error types that occurred at least once."""
        return {
            error_type.value: count
            for error_type, count in self.error_statistics.items()
            if count
        }
