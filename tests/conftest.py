"""Shared fixtures: in-memory backends wired the way the orchestrator wires them."""

from dataclasses import dataclass

import pytest

from comptara.audit import AuditLogger
from comptara.services.storage import (
    InMemoryAuditStorage,
    InMemoryRemoteDataService,
    MemoryLocalStorage,
)
from comptara.sync import (
    LedgerDataService,
    LocalQueueStore,
    NetworkMonitor,
    NotificationVariant,
    Notifier,
    Session,
    SyncEngine,
)


class RecordingNotifier(Notifier):
    """Notifier that keeps every notification for assertions."""

    def __init__(self):
        self.notifications = []

    def notify(self, title, description="", variant=NotificationVariant.DEFAULT):
        self.notifications.append((title, description, variant))

    @property
    def titles(self):
        return [n[0] for n in self.notifications]

    def variants(self):
        return [n[2] for n in self.notifications]


@dataclass
class Harness:
    session: Session
    remote: InMemoryRemoteDataService
    storage: MemoryLocalStorage
    queue: LocalQueueStore
    monitor: NetworkMonitor
    engine: SyncEngine
    ledger: LedgerDataService
    notifier: RecordingNotifier
    audit_storage: InMemoryAuditStorage


def build_harness(online=True, user_id="user-1", wallet_address="0xabc", remote=None):
    session = Session()
    if user_id:
        session.sign_in(user_id)
    if wallet_address:
        session.connect_wallet(wallet_address)

    remote = remote or InMemoryRemoteDataService()
    storage = MemoryLocalStorage()
    notifier = RecordingNotifier()
    audit_storage = InMemoryAuditStorage()
    audit_logger = AuditLogger(audit_storage)

    queue = LocalQueueStore(storage)
    monitor = NetworkMonitor(is_online=online, notifier=notifier, audit_logger=audit_logger)
    engine = SyncEngine(queue, remote, session, notifier=notifier, audit_logger=audit_logger)
    ledger = LedgerDataService(
        session=session,
        remote=remote,
        queue=queue,
        monitor=monitor,
        engine=engine,
        local_storage=storage,
        notifier=notifier,
        audit_logger=audit_logger,
    )
    monitor.add_online_listener(engine.drain)

    return Harness(
        session=session,
        remote=remote,
        storage=storage,
        queue=queue,
        monitor=monitor,
        engine=engine,
        ledger=ledger,
        notifier=notifier,
        audit_storage=audit_storage,
    )


@pytest.fixture
def harness():
    return build_harness()


@pytest.fixture
def offline_harness():
    return build_harness(online=False)


@pytest.fixture
def entry_draft():
    return {
        "date": "2024-03-01",
        "libelle": "Office rent",
        "debit": "613",
        "credit": "512",
        "montant": "1200.50",
        "devise": "HBAR",
    }


@pytest.fixture
def payment_draft():
    return {
        "type": "paiement",
        "destinataire": "0x00000000000000000000000000000000000004d2",
        "montant": "25",
        "devise": "HBAR",
        "objet": "Supplier invoice",
    }
