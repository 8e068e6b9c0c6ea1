"""
Sync Error Taxonomy

None of these are fatal: the application stays usable offline and keeps
accumulating pending writes. RemoteWriteFailed and RemoteReadFailed are
raised by storage backends and live with the storage interfaces.
"""

from comptara.services.storage.interface import (
    RemoteReadFailed,
    RemoteWriteFailed,
    StorageError,
)


class SyncError(Exception):
    """Base exception for the offline sync subsystem."""
    pass


class AuthRequiredError(SyncError):
    """No authenticated identity: the operation is aborted with no side effect."""
    pass


class NetworkUnavailableError(SyncError):
    """The network monitor reports offline; the write goes to the queue."""
    pass


class MalformedQueueData(SyncError):
    """
    The persisted queue could not be parsed.

    Never propagated out of the queue store: it reads as an empty queue.
    """
    pass


__all__ = [
    "AuthRequiredError",
    "MalformedQueueData",
    "NetworkUnavailableError",
    "RemoteReadFailed",
    "RemoteWriteFailed",
    "StorageError",
    "SyncError",
]
