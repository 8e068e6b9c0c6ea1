"""
Data Models Package

This package contains all Pydantic models used in Comptara.
All data flowing through the system must conform to these schemas.
"""

from comptara.models.ledger import (
    ENTRIES_COLLECTION,
    PAYMENTS_COLLECTION,
    AccountingEntry,
    DrainResult,
    EntryDraft,
    EntryQueueItem,
    LedgerRecord,
    LedgerSnapshot,
    Payment,
    PaymentDraft,
    PaymentQueueItem,
    PaymentType,
    QueueItem,
    make_offline_id,
    make_queue_item,
)
from comptara.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "ENTRIES_COLLECTION",
    "PAYMENTS_COLLECTION",
    "AccountingEntry",
    "DrainResult",
    "EntryDraft",
    "EntryQueueItem",
    "LedgerRecord",
    "LedgerSnapshot",
    "Payment",
    "PaymentDraft",
    "PaymentQueueItem",
    "PaymentType",
    "QueueItem",
    "make_offline_id",
    "make_queue_item",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
