"""
File-backed Local Storage

DESIGN DECISION: All keys live in one JSON object on disk, rewritten in
full on every change. The queue and snapshot values are small, and a
single file keeps the on-disk state easy to inspect and to delete.

Writes go to a sibling temporary file first and are then renamed over
the target, so a crash mid-write leaves the previous contents intact.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

import structlog

from comptara.services.storage.interface import LocalStorage


logger = structlog.get_logger(__name__)


class JsonFileLocalStorage(LocalStorage):
    """
    Local storage persisted to a JSON file.

    Single-writer: only one process may own the file at a time.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(
                "local_storage_unreadable",
                path=str(self._path),
                error=str(e),
            )
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._dump(items)
