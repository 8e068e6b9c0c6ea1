"""Tests for file-backed local storage."""

from comptara.services.storage import JsonFileLocalStorage
from comptara.sync.queue import LocalQueueStore


class TestJsonFileLocalStorage:

    def test_missing_file_reads_none(self, tmp_path):
        storage = JsonFileLocalStorage(tmp_path / "state.json")
        assert storage.get_item("anything") is None

    def test_values_survive_a_new_instance(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        JsonFileLocalStorage(path).set_item("queue", "[1, 2]")

        assert JsonFileLocalStorage(path).get_item("queue") == "[1, 2]"

    def test_remove_item(self, tmp_path):
        storage = JsonFileLocalStorage(tmp_path / "state.json")
        storage.set_item("a", "1")
        storage.set_item("b", "2")

        storage.remove_item("a")
        storage.remove_item("missing")

        assert storage.get_item("a") is None
        assert storage.get_item("b") == "2"

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("not json at all")

        storage = JsonFileLocalStorage(path)
        assert storage.get_item("queue") is None
        storage.set_item("queue", "[]")
        assert storage.get_item("queue") == "[]"

    def test_invalid_utf8_file_reads_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_bytes(b'{"comptara_offline_queue": "\xff\xfe"}')

        storage = JsonFileLocalStorage(path)

        assert LocalQueueStore(storage).read_all() == []
        storage.set_item("queue", "[]")
        assert storage.get_item("queue") == "[]"
