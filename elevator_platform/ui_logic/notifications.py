"""
Fire-and-forget user notifications.

Managers push messages here; the UI drains the queue on its next render and
shows each one as a toast.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List
import logging

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


class Notifier:
    """Queue of pending notifications for one browser session."""

    def __init__(self):
        self._pending: List[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> None:
        logger.debug("notify %s: %s", level.value, message)
        self._pending.append(Notification(level, message))

    def success(self, message: str) -> None:
        self.notify(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> None:
        self.notify(NotificationLevel.ERROR, message)

    def warning(self, message: str) -> None:
        self.notify(NotificationLevel.WARNING, message)

    def info(self, message: str) -> None:
        self.notify(NotificationLevel.INFO, message)

    @property
    def pending(self) -> List[Notification]:
        return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and clear the queued notifications."""
        items, self._pending = self._pending, []
        return items
