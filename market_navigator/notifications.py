"""
Market Navigator Notifications

Toast-style messages for the terminal:
  success   green  ✓
  error     red    ✗
  warning   yellow !
  info      cyan   i
"""

import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional, List

from rich.console import Console
from rich.markup import escape


class NotificationLevel(str, Enum):
    """Severity of a notification"""
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class Notification:
    """A notification that was shown (or would have been)"""
    level: NotificationLevel
    message: str
    timestamp: float


class Notifier:
    """
    Shows notifications on a rich console and remembers the recent ones.

    Usage:
        notifier = Notifier(console)
        notifier.success("Admin login successful")
        notifier.error("Invalid admin credentials")

        notifier.last.message   # "Invalid admin credentials"
    """

    STYLES = {
        NotificationLevel.SUCCESS: ("green", "✓"),
        NotificationLevel.ERROR: ("red", "✗"),
        NotificationLevel.WARNING: ("yellow", "!"),
        NotificationLevel.INFO: ("cyan", "i"),
    }

    def __init__(
        self,
        console: Optional[Console] = None,
        enabled: bool = True,
        max_history: int = 50
    ):
        self.console = console or Console(stderr=True)
        self.enabled = enabled
        self._history: deque = deque(maxlen=max_history)

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message, timestamp=time.time())
        self._history.append(notification)

        if self.enabled:
            color, icon = self.STYLES[level]
            self.console.print(f"[{color}]{icon} {escape(message)}[/{color}]")

        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def warning(self, message: str) -> Notification:
        return self.notify(NotificationLevel.WARNING, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    @property
    def history(self) -> List[Notification]:
        return list(self._history)

    @property
    def last(self) -> Optional[Notification]:
        return self._history[-1] if self._history else None

    def clear(self) -> None:
        self._history.clear()
