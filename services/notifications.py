"""
User-visible notifications (toasts) queued for the presentation layer.
"""
import logging
from collections import deque
from typing import List

from models import Notification

logger = logging.getLogger(__name__)


class Notifier:
    """Collects notifications until the presentation layer drains them."""

    MAX_PENDING = 50

    def __init__(self):
        self._pending = deque(maxlen=self.MAX_PENDING)

    def notify(self, message: str, type: str = "info") -> Notification:
        notification = Notification(message=message, type=type)
        self._pending.append(notification)
        logger.debug("Queued %s notification: %s", type, message)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(message, "success")

    def warning(self, message: str) -> Notification:
        return self.notify(message, "warning")

    def error(self, message: str) -> Notification:
        return self.notify(message, "error")

    def info(self, message: str) -> Notification:
        return self.notify(message, "info")

    def pending(self) -> List[Notification]:
        return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and forget all pending notifications."""
        items = list(self._pending)
        self._pending.clear()
        return items
