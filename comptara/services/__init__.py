"""Services package."""

from comptara.services.storage import (
    AuditStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRemoteDataService,
    InMemoryAuditStorage,
    InMemoryRemoteDataService,
    JsonFileLocalStorage,
    LocalStorage,
    MemoryLocalStorage,
    RemoteDataService,
    RemoteReadFailed,
    RemoteWriteFailed,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRemoteDataService",
    "InMemoryAuditStorage",
    "InMemoryRemoteDataService",
    "JsonFileLocalStorage",
    "LocalStorage",
    "MemoryLocalStorage",
    "RemoteDataService",
    "RemoteReadFailed",
    "RemoteWriteFailed",
    "StorageConnectionError",
    "StorageError",
]
