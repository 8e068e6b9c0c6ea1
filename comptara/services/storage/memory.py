"""
In-Memory Storage Implementations

Used by the test suite and for running the application without any
hosted backend. The remote double supports fault injection so offline
and partial-failure paths can be exercised deterministically.
"""

import asyncio
from typing import Callable, Optional
from uuid import uuid4

from comptara.models.audit import AuditEvent
from comptara.models.ledger import ENTRIES_COLLECTION, utcnow
from comptara.services.storage.interface import (
    AuditStorageInterface,
    LocalStorage,
    RemoteDataService,
    RemoteReadFailed,
    RemoteWriteFailed,
)


class InMemoryRemoteDataService(RemoteDataService):
    """
    Remote data service held in process memory.

    Attributes:
        fail_insert: Optional predicate (collection, row) -> bool; when it
            returns True the insert raises RemoteWriteFailed.
        fail_select: When True every select raises RemoteReadFailed.
        insert_delay: Seconds each insert awaits before completing.
    """

    def __init__(
        self,
        fail_insert: Optional[Callable[[str, dict], bool]] = None,
        fail_select: bool = False,
        insert_delay: float = 0.0,
    ):
        self._collections: dict[str, list[dict]] = {}
        self.fail_insert = fail_insert
        self.fail_select = fail_select
        self.insert_delay = insert_delay
        self.insert_calls = 0
        self.select_calls = 0

    async def insert(self, collection: str, row: dict) -> dict:
        self.insert_calls += 1
        if self.insert_delay:
            await asyncio.sleep(self.insert_delay)
        if self.fail_insert and self.fail_insert(collection, row):
            raise RemoteWriteFailed(f"Insert into {collection} rejected")

        now = utcnow().isoformat()
        stored = {**row, "id": str(uuid4()), "created_at": now}
        if collection == ENTRIES_COLLECTION:
            stored["updated_at"] = now
        self._collections.setdefault(collection, []).append(stored)
        return dict(stored)

    async def select(
        self,
        collection: str,
        filters: Optional[dict[str, str]] = None,
    ) -> list[dict]:
        self.select_calls += 1
        if self.fail_select:
            raise RemoteReadFailed(f"Select on {collection} failed")

        rows = [
            dict(row)
            for row in reversed(self._collections.get(collection, []))
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return rows

    def rows(self, collection: str) -> list[dict]:
        """All stored rows of a collection, in insertion order."""
        return [dict(row) for row in self._collections.get(collection, [])]


class MemoryLocalStorage(LocalStorage):
    """Local storage that lives only as long as the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit storage that keeps events in a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True
