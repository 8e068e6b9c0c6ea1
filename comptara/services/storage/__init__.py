"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage:
the remote record service, the local key/value store and audit persistence.
Google Sheets is the hosted backend, but every layer is swappable.
"""

from comptara.services.storage.interface import (
    AuditStorageInterface,
    LocalStorage,
    RemoteDataService,
    RemoteReadFailed,
    RemoteWriteFailed,
    StorageConnectionError,
    StorageError,
)
from comptara.services.storage.local import JsonFileLocalStorage
from comptara.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRemoteDataService,
    MemoryLocalStorage,
)
from comptara.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRemoteDataService,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LocalStorage",
    "RemoteDataService",
    # Exceptions
    "RemoteReadFailed",
    "RemoteWriteFailed",
    "StorageConnectionError",
    "StorageError",
    # Local / in-memory implementations
    "InMemoryAuditStorage",
    "InMemoryRemoteDataService",
    "JsonFileLocalStorage",
    "MemoryLocalStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRemoteDataService",
]
