"""
Audit Models for Comptara

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every write, whether direct, queued or drained
2. Debugging information when the remote service misbehaves
3. A history the user can inspect after long offline periods

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from comptara.models.ledger import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Direct writes
    RECORD_SAVED = "record_saved"
    REMOTE_WRITE_FAILED = "remote_write_failed"
    AUTH_REQUIRED = "auth_required"

    # Offline queue
    WRITE_QUEUED = "write_queued"
    DRAIN_COMPLETED = "drain_completed"

    # Reads
    DATA_FETCHED = "data_fetched"
    FETCH_FAILED = "fetch_failed"

    # Connectivity
    NETWORK_ONLINE = "network_online"
    NETWORK_OFFLINE = "network_offline"

    # Wallet
    TRANSACTION_SENT = "transaction_sent"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'payment', 'queue')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Server id, temporary offline id or transaction hash"
    )
    user_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         user_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            self.user_id or "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_saved("entry", record_id, user_id)
        event = AuditEventBuilder.drain_completed(user_id, 3, 2, 1)
    """

    @staticmethod
    def record_saved(
        entity_type: str,
        record_id: str,
        user_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            entity_type=entity_type,
            entity_id=record_id,
            user_id=user_id,
            description=f"{entity_type.capitalize()} saved remotely",
        )

    @staticmethod
    def write_queued(
        entity_type: str,
        user_id: str,
        reason: str,
        pending: int,
        display_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WRITE_QUEUED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=display_id,
            user_id=user_id,
            description=f"{entity_type.capitalize()} queued for later sync ({reason})",
            details={
                "reason": reason,
                "pending": pending,
            },
        )

    @staticmethod
    def remote_write_failed(
        entity_type: str,
        user_id: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            user_id=user_id,
            description=f"Remote insert of {entity_type} rejected",
            error_message=error_message,
        )

    @staticmethod
    def auth_required(entity_type: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_REQUIRED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"{entity_type.capitalize()} write refused: no authenticated identity",
        )

    @staticmethod
    def drain_completed(
        user_id: str,
        attempted: int,
        succeeded: int,
        failed: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAIN_COMPLETED,
            severity=AuditSeverity.WARNING if failed else AuditSeverity.INFO,
            entity_type="queue",
            user_id=user_id,
            description=f"Offline queue drained: {succeeded}/{attempted} synced",
            details={
                "attempted": attempted,
                "succeeded": succeeded,
                "failed": failed,
            },
        )

    @staticmethod
    def data_fetched(
        user_id: str,
        entries: int,
        payments: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_FETCHED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            description=f"Fetched {entries} entries and {payments} payments",
            details={"entries": entries, "payments": payments},
        )

    @staticmethod
    def fetch_failed(
        user_id: str,
        error_message: str,
        used_cache: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FETCH_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description=(
                "Remote read failed, using cached snapshot"
                if used_cache
                else "Remote read failed, no cached snapshot"
            ),
            details={"used_cache": used_cache},
            error_message=error_message,
        )

    @staticmethod
    def network_changed(is_online: bool) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.NETWORK_ONLINE
                if is_online
                else AuditEventType.NETWORK_OFFLINE
            ),
            severity=AuditSeverity.INFO if is_online else AuditSeverity.WARNING,
            description="Connection restored" if is_online else "Connection lost",
        )

    @staticmethod
    def transaction_sent(
        tx_hash: str,
        from_address: str,
        anchored: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SENT,
            entity_type="transaction",
            entity_id=tx_hash,
            description=(
                "Ledger data anchored on-chain" if anchored else "Native transfer sent"
            ),
            details={"from": from_address, "anchored": anchored},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
        )
