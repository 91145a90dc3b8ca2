"""
Utility functions and helper classes.
"""

from .logger import Logger, LogLevel, logger, set_log_level, get_logger
from .json_reporter import JSONReporter
from .error_handler import (
    ErrorHandler, ErrorContext, ErrorType, ErrorSeverity,
    ARPDiscoveryError, ConfigurationError, CommandError, VendorLookupError
)

__all__ = [
    'Logger',
    'LogLevel',
    'logger',
    'set_log_level',
    'get_logger',
    'JSONReporter',
    'ErrorHandler',
    'ErrorContext',
    'ErrorType',
    'ErrorSeverity',
    'ARPDiscoveryError',
    'ConfigurationError',
    'CommandError',
    'VendorLookupError',
]
