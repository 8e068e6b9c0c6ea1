"""
Ledger payloads and health metrics for the audit action.

Metrics are computed locally and shown before the model's audit arrives.
"""

from decimal import Decimal
from enum import Enum
from typing import Sequence

from pydantic import BaseModel

from comptara.models.ledger import AccountingEntry, Payment


GOOD_THRESHOLD = 80
WARNING_THRESHOLD = 50
BALANCE_TOLERANCE = Decimal("0.01")
BALANCE_WARNING_SHARE = Decimal("0.1")
# Hashes shorter than this are treated as placeholders, not anchored transactions
MIN_TX_HASH_LENGTH = 11


class MetricStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
    INFO = "info"


class LedgerMetric(BaseModel):
    label: str
    value: str
    status: MetricStatus


def _rate_status(rate: Decimal) -> MetricStatus:
    if rate >= GOOD_THRESHOLD:
        return MetricStatus.GOOD
    if rate >= WARNING_THRESHOLD:
        return MetricStatus.WARNING
    return MetricStatus.CRITICAL


def _is_verified(tx_hash: str) -> bool:
    return len(tx_hash or "") >= MIN_TX_HASH_LENGTH


def build_ledger_payload(
    entries: Sequence[AccountingEntry],
    payments: Sequence[Payment],
) -> dict:
    """Ledger data sent with an audit request, with a summary block."""
    return {
        "entries": [
            {
                "id": e.id,
                "date": e.date.isoformat(),
                "debit": e.debit,
                "credit": e.credit,
                "montant": str(e.montant),
                "description": e.description or e.libelle,
                "txHash": e.tx_hash,
                "category": e.category,
            }
            for e in entries
        ],
        "payments": [
            {
                "id": p.id,
                "date": p.created_at.isoformat(),
                "type": p.type.value,
                "montant": str(p.montant),
                "devise": p.devise,
                "destinataire": p.destinataire,
                "objet": p.objet,
                "txHash": p.tx_hash,
                "status": p.status,
            }
            for p in payments
        ],
        "summary": {
            "totalEntries": len(entries),
            "totalPayments": len(payments),
            "totalDebits": str(sum((e.montant for e in entries), Decimal("0"))),
            "totalPaymentAmount": str(sum((p.montant for p in payments), Decimal("0"))),
        },
    }


def calculate_metrics(
    entries: Sequence[AccountingEntry],
    payments: Sequence[Payment],
) -> list[LedgerMetric]:
    """
    Compute the four ledger health indicators.

    1. Verified transactions: share of records carrying a transaction hash
    2. Debit/credit balance
    3. Total volume
    4. Categorization: share of entries with a category (100% when empty)
    """
    total_records = len(entries) + len(payments)
    entries_amount = sum((e.montant for e in entries), Decimal("0"))
    payments_amount = sum((p.montant for p in payments), Decimal("0"))

    debits = sum((e.montant for e in entries if e.debit), Decimal("0"))
    credits = sum((e.montant for e in entries if e.credit), Decimal("0"))

    verified = sum(1 for e in entries if _is_verified(e.tx_hash))
    verified += sum(1 for p in payments if _is_verified(p.tx_hash))
    verification_rate = (
        Decimal(verified) / total_records * 100 if total_records else Decimal("0")
    )

    balance = debits - credits
    is_balanced = abs(balance) < BALANCE_TOLERANCE
    if is_balanced:
        balance_status = MetricStatus.GOOD
        balance_value = "Balanced"
    else:
        balance_status = (
            MetricStatus.WARNING
            if abs(balance) < entries_amount * BALANCE_WARNING_SHARE
            else MetricStatus.CRITICAL
        )
        balance_value = f"{'+' if balance > 0 else ''}{balance:.2f}"

    categorized = sum(1 for e in entries if e.category)
    categorization_rate = (
        Decimal(categorized) / len(entries) * 100 if entries else Decimal("100")
    )

    return [
        LedgerMetric(
            label="Verified transactions",
            value=f"{verification_rate:.0f}%",
            status=_rate_status(verification_rate),
        ),
        LedgerMetric(
            label="Debit/credit balance",
            value=balance_value,
            status=balance_status,
        ),
        LedgerMetric(
            label="Total volume",
            value=f"{entries_amount + payments_amount:,} HBAR",
            status=MetricStatus.INFO,
        ),
        LedgerMetric(
            label="Categorization",
            value=f"{categorization_rate:.0f}%",
            status=_rate_status(categorization_rate),
        ),
    ]
