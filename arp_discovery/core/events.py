"""
Publish/subscribe surface for the user-facing discovery events.
"""

from typing import Any, Callable, Dict, List, Optional

from ..utils.error_handler import ErrorContext, ErrorHandler, ErrorSeverity, ErrorType
from ..utils.logger import Logger, get_logger


FOUND = "found"
UPDATE = "update"
LOST = "lost"
SUCCESS = "success"
ERROR = "error"

EVENT_NAMES = (FOUND, UPDATE, LOST, SUCCESS, ERROR)


class EventDispatcher:
    """
    Synchronous listener registry for found/update/lost/success/error.

    Listeners run on the thread that emits. A listener that raises is reported
    through the ErrorHandler and skipped; the remaining listeners still run.
    """

    def __init__(self, logger: Optional[Logger] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.logger = logger or get_logger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self._listeners: Dict[str, List[Callable[[Any], None]]] = {name: [] for name in EVENT_NAMES}

    def on(self, event: str, callback: Callable[[Any], None]) -> None:
        self._check_event(event)
        self._listeners[event].append(callback)

    def off(self, event: str, callback: Callable[[Any], None]) -> None:
        self._check_event(event)
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def emit(self, event: str, payload: Any) -> None:
        self._check_event(event)
        for callback in list(self._listeners[event]):
            try:
                callback(payload)
            except Exception as e:
                self.error_handler.handle_error(e, ErrorContext(
                    error_type=ErrorType.LISTENER_ERROR,
                    severity=ErrorSeverity.HIGH,
                    operation=f"emit_{event}",
                    component="EventDispatcher",
                ))

    def listener_count(self, event: str) -> int:
        self._check_event(event)
        return len(self._listeners[event])

    def _check_event(self, event: str) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown event '{event}'. Expected one of {', '.join(EVENT_NAMES)}")
