"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for every storage the
application touches. This allows us to:
1. Swap Google Sheets for a hosted database later
2. Use in-memory storage for testing
3. Keep the sync logic decoupled from storage implementation

Three kinds of storage exist:
- RemoteDataService: the authoritative, append-only record collections
- LocalStorage: a small durable key/value store on the user's machine
- AuditStorageInterface: append-only audit trail persistence
"""

from abc import ABC, abstractmethod
from typing import Optional

from comptara.models.audit import AuditEvent


class RemoteDataService(ABC):
    """
    Abstract interface for the hosted record service.

    Collections are append-only. The service assigns `id` and
    `created_at` to every inserted row.
    """

    @abstractmethod
    async def insert(self, collection: str, row: dict) -> dict:
        """
        Insert a row into a collection.

        Args:
            collection: Collection name (e.g. 'accounting_entries')
            row: Column values, including user_id and wallet_address tags

        Returns:
            The stored row, with server-assigned id and timestamps

        Raises:
            RemoteWriteFailed: If the insert is rejected or cannot be sent
        """
        pass

    @abstractmethod
    async def select(
        self,
        collection: str,
        filters: Optional[dict[str, str]] = None,
    ) -> list[dict]:
        """
        Read all rows of a collection matching equality filters.

        Args:
            collection: Collection name
            filters: Column -> value equality filters

        Returns:
            Matching rows, newest first (by created_at)

        Raises:
            RemoteReadFailed: If the read cannot be performed
        """
        pass


class LocalStorage(ABC):
    """
    Abstract durable key/value store with string keys and string values.

    Mirrors the semantics of a browser's local storage: missing keys
    read as None and removing a missing key is not an error.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class RemoteWriteFailed(StorageError):
    """The remote service rejected or could not receive an insert."""
    pass


class RemoteReadFailed(StorageError):
    """The remote service could not serve a read."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
