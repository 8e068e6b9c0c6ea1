"""
Core Data Models for Comptara

These models define the strict schemas for the ledger records flowing
between the data access facade, the offline queue and the remote service.
They are designed to:
1. Validate write payloads before they are queued or sent
2. Be serializable for local storage and remote rows
3. Keep the two record kinds explicit (no loosely-typed dicts)

DESIGN DECISION: Remote records (AccountingEntry, Payment) and write
payloads (EntryDraft, PaymentDraft) are separate models. Only the remote
service assigns ids and timestamps; a draft never carries them.
"""

import time
from datetime import date as DateType, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
)


OFFLINE_ID_PREFIX = "offline_"

ENTRIES_COLLECTION = "accounting_entries"
PAYMENTS_COLLECTION = "payments"


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def make_offline_id() -> str:
    """Temporary client id for a record displayed before remote confirmation."""
    return f"{OFFLINE_ID_PREFIX}{int(time.time() * 1000)}"


def is_offline_id(record_id: str) -> bool:
    return record_id.startswith(OFFLINE_ID_PREFIX)


# =============================================================================
# ENUMS
# =============================================================================

class PaymentType(str, Enum):
    """Direction of a payment."""
    PAIEMENT = "paiement"          # outgoing
    ENCAISSEMENT = "encaissement"  # incoming


# =============================================================================
# WRITE PAYLOADS (validated at the facade boundary)
# =============================================================================

class EntryDraft(BaseModel):
    """
    A journal entry as entered by the user.

    This is the canonical payload that gets queued or inserted.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: DateType = Field(
        default_factory=DateType.today,
        description="Accounting date of the entry"
    )
    libelle: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Entry label"
    )
    debit: str = Field(
        default="",
        max_length=50,
        description="Debited account"
    )
    credit: str = Field(
        default="",
        max_length=50,
        description="Credited account"
    )
    montant: Decimal = Field(
        ...,
        ge=0,
        description="Amount"
    )
    devise: str = Field(
        default="HBAR",
        min_length=1,
        max_length=10,
        description="Currency code"
    )
    tx_hash: str = Field(
        default="",
        description="On-chain transaction hash, if anchored"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=1000
    )
    category: Optional[str] = Field(
        default=None,
        max_length=100
    )


class PaymentDraft(BaseModel):
    """A payment or receipt as entered by the user."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: PaymentType = Field(
        default=PaymentType.PAIEMENT,
        description="paiement (outgoing) or encaissement (incoming)"
    )
    destinataire: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Counterparty address or name"
    )
    montant: Decimal = Field(
        ...,
        ge=0,
        description="Amount"
    )
    devise: str = Field(
        default="HBAR",
        min_length=1,
        max_length=10
    )
    objet: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Purpose of the payment"
    )
    tx_hash: str = Field(default="")
    status: str = Field(
        default="success",
        max_length=50
    )


# =============================================================================
# REMOTE RECORDS (server-assigned identity)
# =============================================================================

class AccountingEntry(EntryDraft):
    """
    A journal entry as stored by the remote service.

    Optimistic copies built while offline carry an `offline_` id that is
    never reconciled with the server id; a full refetch replaces them.
    """

    id: str
    user_id: Optional[str] = None
    wallet_address: str
    created_at: datetime
    updated_at: datetime

    @property
    def is_optimistic(self) -> bool:
        return is_offline_id(self.id)


class Payment(PaymentDraft):
    """A payment as stored by the remote service."""

    id: str
    user_id: Optional[str] = None
    wallet_address: str
    created_at: datetime

    @property
    def is_optimistic(self) -> bool:
        return is_offline_id(self.id)


LedgerRecord = Union[AccountingEntry, Payment]


# =============================================================================
# OFFLINE QUEUE ITEMS
# =============================================================================

class _QueueItemBase(BaseModel):
    """
    Common shape of a pending write.

    Persisted with the wire names {type, data, createdAt}.
    Identity is positional: no id exists until the remote write succeeds.
    """
    model_config = ConfigDict(populate_by_name=True)

    collection: ClassVar[str]

    enqueued_at: datetime = Field(
        default_factory=utcnow,
        alias="createdAt"
    )

    def to_row(self) -> dict:
        """Remote insert payload for this item (without identity tags)."""
        return self.payload.model_dump(mode="json")


class EntryQueueItem(_QueueItemBase):
    collection: ClassVar[str] = ENTRIES_COLLECTION

    kind: Literal["entry"] = Field(default="entry", alias="type")
    payload: EntryDraft = Field(..., alias="data")


class PaymentQueueItem(_QueueItemBase):
    collection: ClassVar[str] = PAYMENTS_COLLECTION

    kind: Literal["payment"] = Field(default="payment", alias="type")
    payload: PaymentDraft = Field(..., alias="data")


QueueItem = Annotated[
    Union[EntryQueueItem, PaymentQueueItem],
    Field(discriminator="kind"),
]

QUEUE_ADAPTER = TypeAdapter(list[QueueItem])


def make_queue_item(draft: Union[EntryDraft, PaymentDraft]) -> QueueItem:
    """Wrap a validated draft into the matching queue item."""
    if isinstance(draft, EntryDraft):
        return EntryQueueItem(payload=draft)
    if isinstance(draft, PaymentDraft):
        return PaymentQueueItem(payload=draft)
    raise TypeError(f"Unsupported draft type: {type(draft).__name__}")


# =============================================================================
# SNAPSHOT / SYNC RESULTS
# =============================================================================

class LedgerSnapshot(BaseModel):
    """Locally cached copy of the last known records for one identity."""

    entries: list[AccountingEntry] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)


class DrainResult(BaseModel):
    """Outcome of one drain pass over the offline queue."""

    attempted: int = Field(ge=0)
    succeeded: int = Field(ge=0)
    failed: int = Field(ge=0)

    @property
    def fully_synced(self) -> bool:
        return self.failed == 0
