"""
Data Access Facade

The single entry point the UI uses for ledger data. For every write it
decides at call time whether to hit the remote service directly or to
queue the write locally.

WRITE PATHS:
- No identity: AuthRequiredError, nothing changes.
- Offline: an optimistic record with an `offline_<ms>` id is shown
  immediately and the draft is queued.
- Online, insert succeeds: the server record is shown and cached.
- Online, insert fails: the draft is queued, but NO optimistic record is
  shown; the caller gets None plus a "retry scheduled" notification.

The optimistic record is never matched to the server id once the queue
drains; the refetch that follows a successful drain replaces it.

READ PATH:
fetch_data() replaces in-memory state with a full remote read, falling
back to the cached snapshot for the identity when the read fails.
"""

import asyncio
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from comptara.audit import AuditLogger
from comptara.models.ledger import (
    ENTRIES_COLLECTION,
    PAYMENTS_COLLECTION,
    AccountingEntry,
    DrainResult,
    EntryDraft,
    LedgerSnapshot,
    Payment,
    PaymentDraft,
    make_offline_id,
    make_queue_item,
    utcnow,
)
from comptara.services.storage import LocalStorage, RemoteDataService, StorageError
from comptara.sync.engine import OFFLINE_WALLET_SENTINEL, SyncEngine
from comptara.sync.errors import AuthRequiredError
from comptara.sync.network import NetworkMonitor
from comptara.sync.notifications import LogNotifier, NotificationVariant, Notifier
from comptara.sync.queue import LocalQueueStore
from comptara.sync.session import Session


logger = structlog.get_logger(__name__)

DEFAULT_CACHE_KEY_PREFIX = "comptara_cache_"


class LedgerDataService:
    """
    Offline-aware access to accounting entries and payments.

    In-memory state (`entries`, `payments`) is newest first.
    """

    def __init__(
        self,
        session: Session,
        remote: RemoteDataService,
        queue: LocalQueueStore,
        monitor: NetworkMonitor,
        engine: SyncEngine,
        local_storage: LocalStorage,
        notifier: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
        cache_key_prefix: str = DEFAULT_CACHE_KEY_PREFIX,
        offline_wallet_sentinel: str = OFFLINE_WALLET_SENTINEL,
    ):
        self._session = session
        self._remote = remote
        self._queue = queue
        self._monitor = monitor
        self._engine = engine
        self._local_storage = local_storage
        self._notifier = notifier or LogNotifier()
        self._audit_logger = audit_logger
        self._cache_key_prefix = cache_key_prefix
        self._offline_wallet_sentinel = offline_wallet_sentinel

        self.entries: list[AccountingEntry] = []
        self.payments: list[Payment] = []
        self.is_loading = False

        engine.set_refetch_callback(self.fetch_data)

    # -------------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------------

    @property
    def pending_count(self) -> int:
        return self._queue.pending_count

    def _wallet_tag(self) -> str:
        return self._session.wallet_address or self._offline_wallet_sentinel

    def _cache_key(self, user_id: str) -> str:
        return f"{self._cache_key_prefix}{user_id}"

    def _save_snapshot(self, user_id: str) -> None:
        snapshot = LedgerSnapshot(entries=self.entries, payments=self.payments)
        self._local_storage.set_item(self._cache_key(user_id), snapshot.model_dump_json())

    def load_snapshot(self, user_id: str) -> Optional[LedgerSnapshot]:
        """Cached snapshot for an identity, or None when absent or unreadable."""
        raw = self._local_storage.get_item(self._cache_key(user_id))
        if raw is None:
            return None
        try:
            return LedgerSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("snapshot_cache_unreadable", user_id=user_id, error=str(e))
            return None

    def reset(self) -> None:
        """Drop in-memory state (e.g. after sign-out or wallet disconnect)."""
        self.entries = []
        self.payments = []

    def ledger_data(self) -> dict:
        """Current in-memory records as plain JSON-compatible data."""
        return {
            "entries": [e.model_dump(mode="json") for e in self.entries],
            "payments": [p.model_dump(mode="json") for p in self.payments],
        }

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def add_entry(
        self,
        draft: Union[EntryDraft, dict],
    ) -> Optional[AccountingEntry]:
        """
        Record a journal entry.

        Returns:
            The server record, the optimistic offline record, or None when
            the online insert failed and the entry was queued for retry.

        Raises:
            AuthRequiredError: If no identity is signed in
            ValidationError: If the draft is invalid
        """
        if not self._session.is_authenticated:
            if self._audit_logger:
                await self._audit_logger.log_auth_required("entry")
            raise AuthRequiredError("Sign in to record accounting entries")
        draft = EntryDraft.model_validate(draft)
        return await self._write(draft, "entry", AccountingEntry)

    async def add_payment(
        self,
        draft: Union[PaymentDraft, dict],
    ) -> Optional[Payment]:
        """
        Record a payment or receipt.

        Same contract as add_entry.
        """
        if not self._session.is_authenticated:
            if self._audit_logger:
                await self._audit_logger.log_auth_required("payment")
            raise AuthRequiredError("Sign in to record payments")
        draft = PaymentDraft.model_validate(draft)
        return await self._write(draft, "payment", Payment)

    def _prepend(self, record: Union[AccountingEntry, Payment]) -> None:
        if isinstance(record, AccountingEntry):
            self.entries = [record, *self.entries]
        else:
            self.payments = [record, *self.payments]

    def _optimistic_record(self, draft, model):
        now = utcnow()
        fields = {
            **draft.model_dump(),
            "id": make_offline_id(),
            "user_id": self._session.user_id,
            "wallet_address": self._wallet_tag(),
            "created_at": now,
        }
        if model is AccountingEntry:
            fields["updated_at"] = now
        return model(**fields)

    async def _write(self, draft, kind: str, model):
        user_id = self._session.user_id
        item = make_queue_item(draft)

        if not self._monitor.is_online:
            record = self._optimistic_record(draft, model)
            self._prepend(record)
            pending = self._queue.enqueue(item)
            logger.info("write_queued_offline", kind=kind, pending=pending)
            self._notifier.notify(
                "Saved offline",
                f"This {kind} will sync when the connection returns ({pending} pending).",
                NotificationVariant.WARNING,
            )
            if self._audit_logger:
                await self._audit_logger.log_write_queued(
                    entity_type=kind,
                    user_id=user_id,
                    reason="offline",
                    pending=pending,
                    display_id=record.id,
                )
            return record

        row = {
            **item.to_row(),
            "user_id": user_id,
            "wallet_address": self._wallet_tag(),
        }
        try:
            stored = await self._remote.insert(item.collection, row)
            record = model.model_validate(stored)
        except (StorageError, ValidationError) as e:
            pending = self._queue.enqueue(item)
            logger.warning("remote_write_failed", kind=kind, error=str(e), pending=pending)
            self._notifier.notify(
                "Save failed",
                f"The {kind} could not be saved; a retry is scheduled ({pending} pending).",
                NotificationVariant.DESTRUCTIVE,
            )
            if self._audit_logger:
                await self._audit_logger.log_remote_write_failed(kind, user_id, str(e))
                await self._audit_logger.log_write_queued(
                    entity_type=kind,
                    user_id=user_id,
                    reason="remote_write_failed",
                    pending=pending,
                )
            return None

        self._prepend(record)
        self._save_snapshot(user_id)
        if self._audit_logger:
            await self._audit_logger.log_record_saved(kind, record.id, user_id)
        return record

    # -------------------------------------------------------------------------
    # Reads and sync
    # -------------------------------------------------------------------------

    async def fetch_data(self) -> None:
        """
        Replace in-memory state with the remote records for the identity.

        Filters by wallet address too when one is connected. On failure
        the cached snapshot is used, or state is emptied when none exists.
        """
        user_id = self._session.user_id
        if not user_id:
            return

        filters = {"user_id": user_id}
        if self._session.wallet_address:
            filters["wallet_address"] = self._session.wallet_address

        self.is_loading = True
        try:
            entry_rows, payment_rows = await asyncio.gather(
                self._remote.select(ENTRIES_COLLECTION, filters),
                self._remote.select(PAYMENTS_COLLECTION, filters),
                return_exceptions=True,
            )
            for result in (entry_rows, payment_rows):
                if isinstance(result, BaseException):
                    raise result
            entries = [AccountingEntry.model_validate(row) for row in entry_rows]
            payments = [Payment.model_validate(row) for row in payment_rows]
        except (StorageError, ValidationError) as e:
            snapshot = self.load_snapshot(user_id)
            logger.warning("fetch_failed", error=str(e), used_cache=snapshot is not None)
            if snapshot is not None:
                self.entries = snapshot.entries
                self.payments = snapshot.payments
                self._notifier.notify(
                    "Cloud unavailable",
                    "Showing the last locally saved data.",
                    NotificationVariant.WARNING,
                )
            else:
                self.reset()
                self._notifier.notify(
                    "Cloud unavailable",
                    "Your data could not be loaded.",
                    NotificationVariant.DESTRUCTIVE,
                )
            if self._audit_logger:
                await self._audit_logger.log_fetch_failed(
                    user_id, str(e), used_cache=snapshot is not None
                )
            return
        finally:
            self.is_loading = False

        self.entries = entries
        self.payments = payments
        self._save_snapshot(user_id)
        if self._audit_logger:
            await self._audit_logger.log_data_fetched(user_id, len(entries), len(payments))

    async def sync(self) -> Optional[DrainResult]:
        """Explicit sync request: drain the offline queue now."""
        return await self._engine.drain()
