"""
User Notifications

Every failure in the sync subsystem reaches the user as a transient
notification rather than an exception. The UI supplies its own Notifier;
the default one writes to the structured log.
"""

from abc import ABC, abstractmethod
from enum import Enum

import structlog


class NotificationVariant(str, Enum):
    DEFAULT = "default"
    SUCCESS = "success"
    WARNING = "warning"
    DESTRUCTIVE = "destructive"


class Notifier(ABC):
    """Sink for transient, user-visible notifications."""

    @abstractmethod
    def notify(
        self,
        title: str,
        description: str = "",
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> None:
        pass


class LogNotifier(Notifier):
    """Notifier that only records notifications in the structured log."""

    def __init__(self):
        self._logger = structlog.get_logger("comptara.notifications")

    def notify(
        self,
        title: str,
        description: str = "",
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> None:
        if variant == NotificationVariant.DESTRUCTIVE:
            self._logger.error("notification", title=title, description=description)
        elif variant == NotificationVariant.WARNING:
            self._logger.warning("notification", title=title, description=description)
        else:
            self._logger.info(
                "notification",
                title=title,
                description=description,
                variant=variant.value,
            )
