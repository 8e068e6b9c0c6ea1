"""
Main Orchestrator for Comptara

Builds the object graph for one application session:

    Session ─┬─> LedgerDataService ──> RemoteDataService
             │        │    │
             │        │    └──> LocalQueueStore ──> LocalStorage
             │        └──> NetworkMonitor ──(online)──> SyncEngine.drain
             └─> AIAnalysisClient, HederaWallet

DESIGN DECISION: Everything is created once here and passed by
reference. Components never reach for module-level singletons, so each
session (or test) gets isolated queue, guard and identity state.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from pydantic import ValidationError

from comptara.ai import AIAnalysisClient
from comptara.audit import AuditLogger
from comptara.config import Settings, get_settings
from comptara.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRemoteDataService,
    InMemoryRemoteDataService,
    JsonFileLocalStorage,
    LocalStorage,
    MemoryLocalStorage,
    RemoteDataService,
)
from comptara.sync import (
    LedgerDataService,
    LocalQueueStore,
    NetworkMonitor,
    Notifier,
    Session,
    SyncEngine,
)
from comptara.wallet import HederaWallet, HttpJsonRpcProvider, WalletProvider


logger = structlog.get_logger(__name__)


@dataclass
class AppComponents:
    session: Session
    ledger: LedgerDataService
    monitor: NetworkMonitor
    engine: SyncEngine
    queue: LocalQueueStore
    wallet: HederaWallet
    audit_logger: AuditLogger
    ai_client: Optional[AIAnalysisClient] = None
    sheets_client: Optional[GoogleSheetsClient] = None


def create_app_components(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
    remote: Optional[RemoteDataService] = None,
    local_storage: Optional[LocalStorage] = None,
    notifier: Optional[Notifier] = None,
    wallet_provider: Optional[WalletProvider] = None,
    session: Optional[Session] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False for an in-memory remote service.
        remote: Remote data service to use instead of the configured one
        local_storage: Durable local storage; defaults to a JSON file at
                    the configured path, or memory when none is set
        notifier: User notification sink; defaults to the structured log
        wallet_provider: EVM provider; defaults to JSON-RPC over HTTP
    """
    settings = settings or get_settings()
    sync_settings = settings.sync
    session = session or Session()
    sheets_client = None

    if remote is not None:
        audit_logger = AuditLogger()
    elif use_storage:
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            remote = GoogleSheetsRemoteDataService(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            remote = InMemoryRemoteDataService()
            audit_logger = AuditLogger()
    else:
        remote = InMemoryRemoteDataService()
        audit_logger = AuditLogger()

    if local_storage is None:
        if sync_settings.storage_path:
            local_storage = JsonFileLocalStorage(sync_settings.storage_path)
        else:
            local_storage = MemoryLocalStorage()

    queue = LocalQueueStore(local_storage, key=sync_settings.queue_key)
    monitor = NetworkMonitor(
        is_online=sync_settings.start_online,
        notifier=notifier,
        audit_logger=audit_logger,
        connectivity_url=sync_settings.connectivity_url,
        connectivity_timeout=sync_settings.connectivity_timeout_seconds,
    )
    engine = SyncEngine(
        queue=queue,
        remote=remote,
        session=session,
        notifier=notifier,
        audit_logger=audit_logger,
        offline_wallet_sentinel=sync_settings.offline_wallet_sentinel,
    )
    ledger = LedgerDataService(
        session=session,
        remote=remote,
        queue=queue,
        monitor=monitor,
        engine=engine,
        local_storage=local_storage,
        notifier=notifier,
        audit_logger=audit_logger,
        cache_key_prefix=sync_settings.cache_key_prefix,
        offline_wallet_sentinel=sync_settings.offline_wallet_sentinel,
    )
    monitor.add_online_listener(engine.drain)

    try:
        ai_client = AIAnalysisClient(
            session=session,
            settings=settings.ai_client,
            audit_logger=audit_logger,
        )
    except ValidationError as e:
        # AI endpoint not configured - the ledger stays usable without it
        logger.warning("ai_client_not_configured", error=str(e))
        ai_client = None

    wallet = HederaWallet(
        wallet_provider or HttpJsonRpcProvider(
            settings.wallet.rpc_url,
            timeout=settings.wallet.timeout_seconds,
        ),
        audit_logger=audit_logger,
    )

    return AppComponents(
        session=session,
        ledger=ledger,
        monitor=monitor,
        engine=engine,
        queue=queue,
        ai_client=ai_client,
        wallet=wallet,
        audit_logger=audit_logger,
        sheets_client=sheets_client,
    )
