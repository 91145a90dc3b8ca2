"""
Logging system with colored output for ARP discovery operations.

This module provides a Logger class that supports colored console output
using colorama, different log levels with distinct colors, and dedicated
formatting for host lifecycle events (found, update, lost).
"""

import sys
from datetime import datetime
from enum import Enum
from typing import Optional
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

# Shared by every Logger instance so set_log_level() reaches module loggers too
_global_min_level = LogLevel.INFO


class Logger:
    """
    Logger class with colored console output.

    Provides structured logging with different levels, colors, and formatting
    utilities for discovery cycles and host tables.
    """

    # Color mapping for different log levels
    LEVEL_COLORS = {
        LogLevel.DEBUG: Fore.CYAN,
        LogLevel.INFO: Fore.GREEN,
        LogLevel.WARNING: Fore.YELLOW,
        LogLevel.ERROR: Fore.RED,
    }

    # Symbol mapping for different log levels
    LEVEL_SYMBOLS = {
        LogLevel.DEBUG: "🔍",
        LogLevel.INFO: "ℹ️",
        LogLevel.WARNING: "⚠️",
        LogLevel.ERROR: "❌",
    }

    # Color and symbol for host lifecycle events
    EVENT_STYLES = {
        "found": (Fore.GREEN, "➕ FOUND  "),
        "update": (Fore.YELLOW, "🔄 UPDATE "),
        "lost": (Fore.RED, "➖ LOST   "),
    }

    def __init__(self, name: str = "ARPDiscovery", min_level: Optional[LogLevel] = None):
        """
        Initialize the Logger.

        Args:
            name: Name of the logger (default: "ARPDiscovery")
            min_level: Minimum log level to display. When omitted the
                       global level set through set_log_level() applies.
        """
        self.name = name
        self._min_level = min_level

    @property
    def min_level(self) -> LogLevel:
        return self._min_level or _global_min_level

    @min_level.setter
    def min_level(self, level: LogLevel) -> None:
        self._min_level = level

    def _should_log(self, level: LogLevel) -> bool:
        """
        Check if a message should be logged based on minimum level.

        Args:
            level: Log level to check

        Returns:
            True if message should be logged, False otherwise
        """
        return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.min_level]

    def _format_timestamp(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _format_details(self, kwargs: dict) -> str:
        if not kwargs:
            return ""
        details = " | ".join([f"{k}={v}" for k, v in kwargs.items()])
        return f" {Style.DIM}({details}){Style.RESET_ALL}"

    def _log(self, level: LogLevel, message: str, **kwargs) -> None:
        """
        Internal logging method that handles formatting and output.

        Args:
            level: Log level
            message: Message to log
            **kwargs: Additional context rendered as key=value pairs
        """
        if not self._should_log(level):
            return

        timestamp = self._format_timestamp()
        color = self.LEVEL_COLORS[level]
        symbol = self.LEVEL_SYMBOLS[level]

        formatted_message = (
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{color}{symbol} {level.value:<7}{Style.RESET_ALL} "
            f"{message}"
        )
        formatted_message += self._format_details(kwargs)

        print(
            formatted_message,
            file=sys.stdout if level != LogLevel.ERROR else sys.stderr,
        )

    def debug(self, message: str, **kwargs) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(
        self, message: str, exception: Optional[Exception] = None, **kwargs
    ) -> None:
        """
        Log an error message.

        Args:
            message: Error message
            exception: Optional exception object for additional context
            **kwargs: Additional context information
        """
        if exception:
            kwargs["exception"] = f"{type(exception).__name__}: {str(exception)}"
        self._log(LogLevel.ERROR, message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        """
        Log a success message (formatted as INFO with special styling).

        Args:
            message: Success message
            **kwargs: Additional context information
        """
        if not self._should_log(LogLevel.INFO):
            return

        timestamp = self._format_timestamp()
        formatted_message = (
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{Fore.GREEN}✅ SUCCESS {Style.RESET_ALL} "
            f"{Style.BRIGHT}{message}{Style.RESET_ALL}"
        )
        formatted_message += self._format_details(kwargs)

        print(formatted_message)

    def host_event(self, event: str, ip_address: str, mac_address: str, **kwargs) -> None:
        """
        Log a host lifecycle event with its own color.

        Args:
            event: One of "found", "update", "lost"
            ip_address: IPv4 address of the host
            mac_address: Normalized MAC address of the host
            **kwargs: Additional context information (hostname, interface, ...)
        """
        if not self._should_log(LogLevel.INFO):
            return

        color, label = self.EVENT_STYLES.get(event, (Fore.WHITE, f"{event.upper():<9}"))
        timestamp = self._format_timestamp()
        formatted_message = (
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{color}{label}{Style.RESET_ALL} "
            f"{Style.BRIGHT}{ip_address:<15}{Style.RESET_ALL} {mac_address}"
        )
        formatted_message += self._format_details(kwargs)

        print(formatted_message)

    def section(self, title: str) -> None:
        """
        Log a section header for organizing output.

        Args:
            title: Section title
        """
        if not self._should_log(LogLevel.INFO):
            return

        separator = "=" * 60
        print(f"\n{Fore.BLUE}{Style.BRIGHT}{separator}")
        print(f"  {title.upper()}")
        print(f"{separator}{Style.RESET_ALL}\n")

    def table_header(self, headers: list[str], widths: list[int]) -> None:
        """
        Print a formatted table header.

        Args:
            headers: List of header names
            widths: List of column widths
        """
        if not self._should_log(LogLevel.INFO):
            return

        header_row = " | ".join(
            [f"{header:<{width}}" for header, width in zip(headers, widths)]
        )
        print(f"{Style.BRIGHT}{header_row}{Style.RESET_ALL}")

        separator = "-+-".join(["-" * width for width in widths])
        print(f"{Style.DIM}{separator}{Style.RESET_ALL}")

    def table_row(
        self, values: list[str], widths: list[int], highlight: bool = False
    ) -> None:
        """
        Print a formatted table row.

        Args:
            values: List of values to display
            widths: List of column widths
            highlight: Whether to highlight this row
        """
        if not self._should_log(LogLevel.INFO):
            return

        row = " | ".join(
            [f"{str(value):<{width}}" for value, width in zip(values, widths)]
        )

        if highlight:
            print(f"{Style.BRIGHT}{row}{Style.RESET_ALL}")
        else:
            print(row)

    def network_info(self, interface: str, network: str, own_address: str, candidates: int) -> None:
        """
        Display the selected interface and flood range.

        Args:
            interface: Name of the selected interface
            network: Subnet in CIDR notation
            own_address: IPv4 address of the selected interface
            candidates: Number of addresses that will be flooded
        """
        if not self._should_log(LogLevel.INFO):
            return

        print(f"\n{Fore.CYAN}{Style.BRIGHT}🌐 NETWORK CONFIGURATION{Style.RESET_ALL}")
        print(f"  Interface:     {Style.BRIGHT}{interface}{Style.RESET_ALL}")
        print(f"  Network:       {Style.BRIGHT}{network}{Style.RESET_ALL}")
        print(f"  Own address:   {Style.BRIGHT}{own_address}{Style.RESET_ALL}")
        print(f"  Flood targets: {Style.BRIGHT}{candidates}{Style.RESET_ALL}\n")


# Global logger instance
logger = Logger()


def set_log_level(level: LogLevel) -> None:
    """
    Set the global log level.

    Args:
        level: Minimum log level to display
    """
    global _global_min_level
    _global_min_level = level


def get_logger(name: str = "ARPDiscovery") -> Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return Logger(name)
