"""
Local Queue Store

Persists pending writes as an ordered JSON list under one local storage key.

Every operation rewrites the whole list (read-modify-write); there is no
item-level locking. This is safe only under the single-writer assumption:
one application session owns the queue.
"""

import json

import structlog
from pydantic import ValidationError

from comptara.models.ledger import QUEUE_ADAPTER, QueueItem
from comptara.services.storage import LocalStorage
from comptara.sync.errors import MalformedQueueData


logger = structlog.get_logger(__name__)

DEFAULT_QUEUE_KEY = "comptara_offline_queue"


class LocalQueueStore:
    """
    Ordered list of pending writes in durable local storage.

    Wire format of each item: {"type": "entry"|"payment", "data": {...},
    "createdAt": "<ISO timestamp>"}.
    """

    def __init__(self, storage: LocalStorage, key: str = DEFAULT_QUEUE_KEY):
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def _parse(self, raw: str) -> list[QueueItem]:
        try:
            return QUEUE_ADAPTER.validate_json(raw)
        except (ValidationError, ValueError) as e:
            raise MalformedQueueData(str(e)) from e

    def read_all(self) -> list[QueueItem]:
        """
        Return the persisted queue in insertion order.

        Absent or unparsable data reads as an empty list; the malformed
        value is left in place and never surfaced as an error.
        """
        raw = self._storage.get_item(self._key)
        if raw is None:
            return []
        try:
            return self._parse(raw)
        except MalformedQueueData as e:
            logger.warning("offline_queue_malformed", key=self._key, error=str(e))
            return []

    def enqueue(self, item: QueueItem) -> int:
        """Append an item and persist the whole list. Returns the new length."""
        items = self.read_all()
        items.append(item)
        self.replace(items)
        return len(items)

    def replace(self, items: list[QueueItem]) -> None:
        """Overwrite the persisted list."""
        payload = QUEUE_ADAPTER.dump_python(items, mode="json", by_alias=True)
        self._storage.set_item(self._key, json.dumps(payload))

    def clear(self) -> None:
        """Remove the persisted key entirely."""
        self._storage.remove_item(self._key)

    def __len__(self) -> int:
        return len(self.read_all())

    @property
    def pending_count(self) -> int:
        return len(self)

