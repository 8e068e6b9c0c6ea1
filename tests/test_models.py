"""
Tests for Comptara models

Test strategy:
1. Unit tests for individual components (models, queue, engine, facade)
2. Integration tests for flows (with in-memory backends)
3. No real API calls in tests (use mocks)
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from comptara.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from comptara.models.ledger import (
    QUEUE_ADAPTER,
    AccountingEntry,
    DrainResult,
    EntryDraft,
    EntryQueueItem,
    PaymentDraft,
    PaymentQueueItem,
    PaymentType,
    is_offline_id,
    make_offline_id,
    make_queue_item,
)


class TestDrafts:
    """Tests for write payload models."""

    def test_entry_draft_defaults(self):
        draft = EntryDraft(libelle="Rent", montant="100")
        assert draft.devise == "HBAR"
        assert draft.date == date.today()
        assert draft.debit == ""
        assert draft.tx_hash == ""

    def test_entry_draft_strips_whitespace(self):
        draft = EntryDraft(libelle="  Rent  ", montant="1")
        assert draft.libelle == "Rent"

    def test_entry_draft_rejects_negative_amount(self):
        with pytest.raises(ValidationError):
            EntryDraft(libelle="Rent", montant=Decimal("-1"))

    def test_entry_draft_requires_label(self):
        with pytest.raises(ValidationError):
            EntryDraft(libelle="   ", montant="1")

    def test_payment_draft_types(self):
        assert PaymentDraft(destinataire="a", montant="1", objet="x").type == PaymentType.PAIEMENT
        received = PaymentDraft(type="encaissement", destinataire="a", montant="1", objet="x")
        assert received.type == PaymentType.ENCAISSEMENT

    def test_payment_draft_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            PaymentDraft(type="refund", destinataire="a", montant="1", objet="x")


class TestRecords:

    def test_offline_ids(self):
        record_id = make_offline_id()
        assert is_offline_id(record_id)
        assert record_id[len("offline_"):].isdigit()
        assert not is_offline_id("6f1c2c0e-uuid")

    def test_entry_from_remote_row(self):
        entry = AccountingEntry.model_validate({
            "id": "abc",
            "date": "2024-02-01",
            "libelle": "Sale",
            "montant": "12.30",
            "wallet_address": "offline",
            "user_id": "u1",
            "created_at": "2024-02-01T10:00:00+00:00",
            "updated_at": "2024-02-01T10:00:00+00:00",
        })
        assert entry.montant == Decimal("12.30")
        assert entry.date == date(2024, 2, 1)
        assert not entry.is_optimistic


class TestQueueItems:

    def test_make_queue_item_dispatches_on_draft(self):
        assert isinstance(make_queue_item(EntryDraft(libelle="a", montant="1")), EntryQueueItem)
        item = make_queue_item(PaymentDraft(destinataire="a", montant="1", objet="x"))
        assert isinstance(item, PaymentQueueItem)
        assert item.collection == "payments"

    def test_make_queue_item_rejects_other_types(self):
        with pytest.raises(TypeError):
            make_queue_item({"libelle": "a"})

    def test_to_row_is_json_ready(self):
        item = make_queue_item(EntryDraft(date=date(2024, 1, 5), libelle="a", montant="1.5"))
        row = item.to_row()
        assert row["date"] == "2024-01-05"
        assert row["montant"] == "1.5"
        assert json.dumps(row)

    def test_adapter_discriminates_on_type(self):
        items = QUEUE_ADAPTER.validate_python([
            {"type": "payment", "data": {"destinataire": "a", "montant": "1", "objet": "x"}},
            {"type": "entry", "data": {"libelle": "a", "montant": "1"}},
        ])
        assert [i.kind for i in items] == ["payment", "entry"]

    def test_enqueued_at_alias(self):
        stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
        item = EntryQueueItem.model_validate(
            {"type": "entry", "data": {"libelle": "a", "montant": "1"}, "createdAt": stamp.isoformat()}
        )
        assert item.enqueued_at == stamp

    def test_drain_result(self):
        assert DrainResult(attempted=2, succeeded=2, failed=0).fully_synced
        assert not DrainResult(attempted=2, succeeded=1, failed=1).fully_synced


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            description="Entry saved remotely",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.record_saved("entry", "abc", "u1")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "record_saved"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["user_id"] == "u1"

    def test_audit_event_to_sheets_row(self):
        event = AuditEventBuilder.drain_completed("u1", attempted=3, succeeded=2, failed=1)
        row = event.to_sheets_row()
        assert len(row) == 10
        assert row[2] == "drain_completed"
        assert row[3] == "warning"
        assert json.loads(row[8]) == {"attempted": 3, "succeeded": 2, "failed": 1}

    def test_write_queued_keeps_display_id(self):
        event = AuditEventBuilder.write_queued(
            "payment", "u1", reason="offline", pending=4, display_id="offline_1"
        )
        assert event.entity_id == "offline_1"
        assert event.details == {"reason": "offline", "pending": 4}

    def test_network_changed(self):
        assert AuditEventBuilder.network_changed(True).event_type == AuditEventType.NETWORK_ONLINE
        offline = AuditEventBuilder.network_changed(False)
        assert offline.event_type == AuditEventType.NETWORK_OFFLINE
        assert offline.severity == AuditSeverity.WARNING
