"""Tests for settings and component wiring."""

import asyncio

import pytest

from comptara.config import AIClientSettings, Settings, SyncSettings
from comptara.models.ledger import ENTRIES_COLLECTION
from comptara.orchestrator import create_app_components
from comptara.services.storage import InMemoryRemoteDataService, MemoryLocalStorage

from conftest import RecordingNotifier


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("AI_FUNCTIONS_URL", "https://project.functions.test/functions/v1/")
    monkeypatch.setenv("AI_PUBLISHABLE_KEY", "anon-key")
    monkeypatch.delenv("SYNC_STORAGE_PATH", raising=False)
    monkeypatch.setenv("SYNC_START_ONLINE", "false")


class TestSettings:

    def test_sync_defaults(self, monkeypatch):
        monkeypatch.delenv("SYNC_QUEUE_KEY", raising=False)
        settings = SyncSettings()
        assert settings.queue_key == "comptara_offline_queue"
        assert settings.cache_key_prefix == "comptara_cache_"
        assert settings.offline_wallet_sentinel == "offline"

    def test_functions_url_trailing_slash(self):
        settings = AIClientSettings(functions_url="https://x.test/v1/", publishable_key="k")
        assert settings.functions_url == "https://x.test/v1"


class TestCreateAppComponents:

    def test_offline_write_drains_when_back_online(self, env):
        remote = InMemoryRemoteDataService()
        components = create_app_components(
            settings=Settings(),
            remote=remote,
            local_storage=MemoryLocalStorage(),
            notifier=RecordingNotifier(),
        )
        components.session.sign_in("user-1")

        record = asyncio.run(
            components.ledger.add_entry({"libelle": "Rent", "montant": "10"})
        )
        assert record.is_optimistic
        assert components.queue.pending_count == 1

        asyncio.run(components.monitor.set_online(True))

        assert components.queue.pending_count == 0
        assert len(remote.rows(ENTRIES_COLLECTION)) == 1
        assert components.sheets_client is None

    def test_json_file_storage_from_settings(self, env, monkeypatch, tmp_path):
        path = tmp_path / "state.json"
        monkeypatch.setenv("SYNC_STORAGE_PATH", str(path))

        components = create_app_components(use_storage=False, settings=Settings())
        components.session.sign_in("user-1")
        asyncio.run(components.ledger.add_entry({"libelle": "Rent", "montant": "10"}))

        assert "comptara_offline_queue" in path.read_text()

    def test_ai_client_uses_session(self, env):
        components = create_app_components(use_storage=False, settings=Settings())
        components.session.sign_in("user-1", access_token="jwt")
        assert components.ai_client.get_auth_header() == "Bearer jwt"

    def test_wiring_without_ai_settings(self, monkeypatch):
        monkeypatch.delenv("AI_FUNCTIONS_URL", raising=False)
        monkeypatch.delenv("AI_PUBLISHABLE_KEY", raising=False)
        monkeypatch.delenv("SYNC_STORAGE_PATH", raising=False)
        remote = InMemoryRemoteDataService()

        components = create_app_components(
            settings=Settings(),
            remote=remote,
            local_storage=MemoryLocalStorage(),
            notifier=RecordingNotifier(),
        )
        components.session.sign_in("user-1")

        assert components.ai_client is None
        record = asyncio.run(
            components.ledger.add_entry({"libelle": "Rent", "montant": "10"})
        )
        assert record is not None
