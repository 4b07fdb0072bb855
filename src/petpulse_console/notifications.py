"""
One-shot user notifications.

Screens report the outcome of an action once (a toast in the web console).
The ``Notifier`` logs each message and queues it until a UI drains it.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .exceptions import PetPulseException
from .utils.datetime_utils import get_current_utc

logger = logging.getLogger(__name__)


class NotificationLevel(str, enum.Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=get_current_utc)


class Notifier:
    """Collects notifications for display."""

    def __init__(self) -> None:
        self._pending: List[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(NotificationLevel(level), message)
        self._pending.append(notification)
        logger.log(
            _LOG_LEVELS[notification.level],
            message,
            extra={"notification_level": notification.level.value},
        )
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    def warning(self, message: str) -> Notification:
        return self.notify(NotificationLevel.WARNING, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def failure(
        self, error: Exception, fallback: Optional[str] = None
    ) -> Notification:
        """Report a failed action, preferring the backend's own message."""
        if isinstance(error, PetPulseException):
            message = error.message
        else:
            message = fallback or str(error) or "Something went wrong"
        return self.error(message)

    @property
    def pending(self) -> List[Notification]:
        return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and forget every queued notification."""
        drained, self._pending = self._pending, []
        return drained
