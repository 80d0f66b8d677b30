"""Explicit UI state shared by the round-entry views.

Holds the single transient notification (toast), the busy flag shown while a
request is in flight, and the last surfaced error. Views that render this state
register a listener for as long as they are active via `listening()`.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Literal, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Severity = Literal["success", "error", "warning", "info"]


class Notification(BaseModel):
    message: str
    severity: Severity = "info"
    action_label: Optional[str] = None


Listener = Callable[["AppState"], None]


class AppState:
    def __init__(self) -> None:
        self.notification: Optional[Notification] = None
        self.is_loading = False
        self.loading_message: Optional[str] = None
        self.error: Optional[str] = None
        self._listeners: List[Listener] = []

    def show_notification(
        self, message: str, severity: Severity = "info", action_label: Optional[str] = None
    ) -> Notification:
        self.notification = Notification(
            message=message, severity=severity, action_label=action_label
        )
        if severity == "error":
            self.error = message
        logger.debug("Notification (%s): %s", severity, message)
        self._emit()
        return self.notification

    def hide_notification(self) -> None:
        self.notification = None
        self._emit()

    def set_loading(self, loading: bool, message: Optional[str] = None) -> None:
        self.is_loading = loading
        self.loading_message = message if loading else None
        self._emit()

    def clear_error(self) -> None:
        self.error = None
        self._emit()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @contextmanager
    def listening(self, listener: Listener) -> Iterator["AppState"]:
        """Register `listener` for the duration of the block; always released."""
        self._listeners.append(listener)
        try:
            yield self
        finally:
            self._listeners.remove(listener)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def to_dict(self) -> dict:
        return {
            "notification": self.notification.model_dump() if self.notification else None,
            "is_loading": self.is_loading,
            "loading_message": self.loading_message,
            "error": self.error,
        }
