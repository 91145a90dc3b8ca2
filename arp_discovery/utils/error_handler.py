"""
Error taxonomy and centralized error reporting for the ARP Discovery Module.

Only configuration errors are fatal (they stop engine construction). Command
failures and vendor lookup failures are reported through the ErrorHandler and
the engine's ``error`` event, after which the discovery cycle carries on with
whatever data it has.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .logger import Logger, get_logger


class ErrorType(Enum):
    """Enumeration for different types of errors."""
    CONFIGURATION_ERROR = "configuration_error"
    COMMAND_ERROR = "command_error"
    VENDOR_LOOKUP_ERROR = "vendor_lookup_error"
    LISTENER_ERROR = "listener_error"


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
    additional_info: Dict[str, Any] = None

    def __post_init__(self):
        if self.additional_info is None:
            self.additional_info = {}


class ARPDiscoveryError(Exception):
    """Base exception class for ARP Discovery Module."""

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.error_context = error_context


class ConfigurationError(ARPDiscoveryError):
    """No usable interface or invalid configuration; fatal at engine construction."""
    pass


class CommandError(ARPDiscoveryError):
    """The neighbor-cache dump command failed or wrote to stderr."""

    def __init__(self, message: str, command: Optional[List[str]] = None,
                 returncode: Optional[int] = None, stderr: str = "",
                 error_context: Optional[ErrorContext] = None):
        super().__init__(message, error_context)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class VendorLookupError(ARPDiscoveryError):
    """A single vendor lookup failed (transport error or unexpected status)."""

    def __init__(self, message: str, mac_address: Optional[str] = None,
                 status_code: Optional[int] = None,
                 error_context: Optional[ErrorContext] = None):
        super().__init__(message, error_context)
        self.mac_address = mac_address
        self.status_code = status_code


class ErrorHandler:
    """
    Centralized error reporting.

    Logs each error at a level matching its severity, prints troubleshooting
    hints for error types that need operator action, and keeps per-type
    counters that the CLI reports at shutdown.
    """

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the ErrorHandler.

        Args:
            logger: Logger instance for error reporting
        """
        self.logger = logger or get_logger(__name__)
        self.error_statistics: Dict[ErrorType, int] = {
            error_type: 0 for error_type in ErrorType
        }

    def handle_error(self, error: Exception, context: ErrorContext) -> None:
        """
        Record and log an error.

        Args:
            error: The exception that occurred
            context: Error context information
        """
        self.error_statistics[context.error_type] += 1
        self._log_error(error, context)

        if context.error_type == ErrorType.CONFIGURATION_ERROR:
            self._suggest_configuration_fixes()
        elif context.error_type == ErrorType.COMMAND_ERROR:
            # Only the first failure gets hints, monitor mode would repeat them every cycle
            if self.error_statistics[ErrorType.COMMAND_ERROR] == 1:
                self._suggest_command_solutions(error)

    def total_errors(self) -> int:
        return sum(self.error_statistics.values())

    def _log_error(self, error: Exception, context: ErrorContext) -> None:
        """
        Log error information with appropriate detail level.

        Args:
            error: The exception that occurred
            context: Error context information
        """
        error_msg = f"Error in {context.component}.{context.operation}: {str(error)}"

        if context.severity == ErrorSeverity.CRITICAL:
            self.logger.error(error_msg, exception=error)
        elif context.severity == ErrorSeverity.HIGH:
            self.logger.error(error_msg)
        elif context.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(error_msg)
        else:
            self.logger.debug(error_msg)

    def _suggest_configuration_fixes(self) -> None:
        """Provide configuration error solutions."""
        self.logger.info("Configuration error solutions:")
        self.logger.info("  • Check that a non-loopback IPv4 interface is up")
        self.logger.info("  • Verify the --restrict address belongs to this machine")
        self.logger.info("  • Check YAML syntax and indentation in discovery_config.yml")

    def _suggest_command_solutions(self, error: Exception) -> None:
        """Provide hints for a failing neighbor-cache dump command."""
        command = getattr(error, "command", None) or ["arp"]
        self.logger.info("Neighbor-cache command solutions:")
        self.logger.info(f"  • Verify '{command[0]}' is installed and in PATH")
        self.logger.info("  • Ubuntu/Debian: sudo apt-get install net-tools")
        self.logger.info("  • CentOS/RHEL: sudo yum install net-tools")
        self.logger.info("  • Set 'arp_command' in discovery_config.yml to use another tool")
