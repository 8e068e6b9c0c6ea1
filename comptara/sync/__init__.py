"""Offline-first sync subsystem: queue, network monitor, engine and facade."""

from comptara.sync.engine import SyncEngine
from comptara.sync.errors import (
    AuthRequiredError,
    MalformedQueueData,
    NetworkUnavailableError,
    SyncError,
)
from comptara.sync.facade import LedgerDataService
from comptara.sync.network import NetworkMonitor
from comptara.sync.notifications import LogNotifier, NotificationVariant, Notifier
from comptara.sync.queue import LocalQueueStore
from comptara.sync.session import Session

__all__ = [
    "AuthRequiredError",
    "LedgerDataService",
    "LocalQueueStore",
    "LogNotifier",
    "MalformedQueueData",
    "NetworkMonitor",
    "NetworkUnavailableError",
    "NotificationVariant",
    "Notifier",
    "Session",
    "SyncEngine",
    "SyncError",
]
