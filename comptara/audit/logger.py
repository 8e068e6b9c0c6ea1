"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of direct, queued and drained writes
2. Debugging capability when the remote service is flaky
3. A user-visible history of what happened while offline

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

from typing import Optional

import structlog

from comptara.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from comptara.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when configured (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("comptara.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_record_saved(
        self,
        entity_type: str,
        record_id: str,
        user_id: str,
    ) -> None:
        """Log a successful direct remote write."""
        await self.log(AuditEventBuilder.record_saved(entity_type, record_id, user_id))

    async def log_write_queued(
        self,
        entity_type: str,
        user_id: str,
        reason: str,
        pending: int,
        display_id: Optional[str] = None,
    ) -> None:
        """Log a write that went to the offline queue."""
        await self.log(
            AuditEventBuilder.write_queued(
                entity_type=entity_type,
                user_id=user_id,
                reason=reason,
                pending=pending,
                display_id=display_id,
            )
        )

    async def log_remote_write_failed(
        self,
        entity_type: str,
        user_id: str,
        error_message: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.remote_write_failed(entity_type, user_id, error_message)
        )

    async def log_auth_required(self, entity_type: str) -> None:
        await self.log(AuditEventBuilder.auth_required(entity_type))

    async def log_drain_completed(
        self,
        user_id: str,
        attempted: int,
        succeeded: int,
        failed: int,
    ) -> None:
        """Log the outcome of a drain pass."""
        await self.log(
            AuditEventBuilder.drain_completed(user_id, attempted, succeeded, failed)
        )

    async def log_data_fetched(self, user_id: str, entries: int, payments: int) -> None:
        await self.log(AuditEventBuilder.data_fetched(user_id, entries, payments))

    async def log_fetch_failed(
        self,
        user_id: str,
        error_message: str,
        used_cache: bool,
    ) -> None:
        await self.log(AuditEventBuilder.fetch_failed(user_id, error_message, used_cache))

    async def log_network_changed(self, is_online: bool) -> None:
        await self.log(AuditEventBuilder.network_changed(is_online))

    async def log_transaction_sent(
        self,
        tx_hash: str,
        from_address: str,
        anchored: bool,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_sent(tx_hash, from_address, anchored))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(error_type, error_message, details))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(service, error_message))
