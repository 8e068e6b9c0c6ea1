"""
Sync Engine

Drains the offline queue against the remote data service.

CONTRACT:
1. A drain is a no-op while another drain is running, or when no
   identity is signed in.
2. Items are inserted strictly one at a time, in queue order, tagged with
   the current identity and wallet address.
3. A failed item is kept; a succeeded item is dropped. One item's failure
   never aborts the pass and is not retried within it.
4. If anything synced, the facade's refetch callback runs.

There is no backoff, no retry limit and no dead-letter list: an item that
always fails stays queued and is retried on every later trigger (the next
online transition or an explicit sync request).
"""

from typing import Any, Awaitable, Callable, Optional

import structlog

from comptara.audit import AuditLogger
from comptara.models.ledger import DrainResult, QueueItem
from comptara.services.storage import RemoteDataService
from comptara.sync.notifications import LogNotifier, NotificationVariant, Notifier
from comptara.sync.queue import LocalQueueStore
from comptara.sync.session import Session


logger = structlog.get_logger(__name__)

OFFLINE_WALLET_SENTINEL = "offline"

RefetchCallback = Callable[[], Awaitable[Any]]


class SyncEngine:
    """
    Flushes pending writes from a LocalQueueStore to a RemoteDataService.

    One engine exists per application session; its reentrancy guard is
    instance state, so separate engines (e.g. in tests) never interfere.
    """

    def __init__(
        self,
        queue: LocalQueueStore,
        remote: RemoteDataService,
        session: Session,
        notifier: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
        offline_wallet_sentinel: str = OFFLINE_WALLET_SENTINEL,
    ):
        self._queue = queue
        self._remote = remote
        self._session = session
        self._notifier = notifier or LogNotifier()
        self._audit_logger = audit_logger
        self._offline_wallet_sentinel = offline_wallet_sentinel
        self._refetch: Optional[RefetchCallback] = None
        self._draining = False

    @property
    def is_draining(self) -> bool:
        return self._draining

    def set_refetch_callback(self, callback: Optional[RefetchCallback]) -> None:
        """Coroutine function awaited after a drain that synced at least one item."""
        self._refetch = callback

    def _tag(self, item: QueueItem, user_id: str) -> dict:
        return {
            **item.to_row(),
            "user_id": user_id,
            "wallet_address": self._session.wallet_address or self._offline_wallet_sentinel,
        }

    async def drain(self) -> Optional[DrainResult]:
        """
        Attempt to flush every pending write once.

        Returns:
            The pass outcome, or None when the call was a no-op
            (drain already running or no identity).
        """
        if self._draining:
            logger.debug("drain_skipped", reason="already_running")
            return None
        user_id = self._session.user_id
        if not user_id:
            logger.debug("drain_skipped", reason="no_identity")
            return None

        self._draining = True
        try:
            items = self._queue.read_all()
            if not items:
                return DrainResult(attempted=0, succeeded=0, failed=0)

            logger.info("drain_started", pending=len(items), user_id=user_id)

            succeeded = 0
            failed_items: list[QueueItem] = []
            for index, item in enumerate(items):
                try:
                    await self._remote.insert(item.collection, self._tag(item, user_id))
                    succeeded += 1
                except Exception as e:
                    logger.warning(
                        "drain_item_failed",
                        index=index,
                        kind=item.kind,
                        error=str(e),
                    )
                    failed_items.append(item)

            # Writes queued while the pass was awaiting the remote service
            # sit after the drained prefix; failed items requeue behind them.
            arrived = self._queue.read_all()[len(items):]
            remaining = arrived + failed_items
            if remaining:
                self._queue.replace(remaining)
            else:
                self._queue.clear()

            result = DrainResult(
                attempted=len(items),
                succeeded=succeeded,
                failed=len(failed_items),
            )
            logger.info("drain_finished", **result.model_dump())

            if self._audit_logger:
                await self._audit_logger.log_drain_completed(
                    user_id=user_id,
                    attempted=result.attempted,
                    succeeded=result.succeeded,
                    failed=result.failed,
                )

            if succeeded:
                self._notifier.notify(
                    "Synchronized",
                    f"{succeeded} pending change(s) saved to the cloud.",
                    NotificationVariant.SUCCESS,
                )
                if self._refetch:
                    await self._refetch()
            if failed_items:
                self._notifier.notify(
                    "Sync incomplete",
                    f"{len(remaining)} change(s) still pending.",
                    NotificationVariant.WARNING,
                )

            return result
        finally:
            self._draining = False
