from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from salonbook.domain.money import ZERO, to_money


class TransactionKind(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionReason(str, Enum):
    CASHBACK = "cashback"
    RECHARGE = "recharge"
    REFERRAL = "referral"
    BOOKING = "booking"
    REFUND = "refund"


@dataclass(frozen=True)
class WalletTransaction:
    id: str
    kind: TransactionKind
    amount: Decimal
    reason: TransactionReason
    description: str
    created_at: str
    reference: str | None = None  # idempotency key
    booking_id: str | None = None

    @staticmethod
    def from_document(doc: dict[str, Any]) -> "WalletTransaction":
        return WalletTransaction(
            id=str(doc["id"]),
            kind=TransactionKind(doc["type"]),
            amount=to_money(doc["amount"]),
            reason=TransactionReason(doc.get("reason", TransactionReason.BOOKING.value)),
            description=doc.get("description", ""),
            created_at=doc.get("date", ""),
            reference=doc.get("reference"),
            booking_id=doc.get("bookingId"),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "amount": str(self.amount),
            "reason": self.reason.value,
            "description": self.description,
            "date": self.created_at,
            "reference": self.reference,
            "bookingId": self.booking_id,
        }


@dataclass(frozen=True)
class Wallet:
    user_id: str
    balance: Decimal = ZERO
    currency: str = "INR"
    transactions: tuple[WalletTransaction, ...] = field(default_factory=tuple)
    version: int = 1  # version of the owning user document

    def has_reference(self, reference: str) -> bool:
        return any(t.reference == reference for t in self.transactions)

    @staticmethod
    def from_user_document(user_id: str, doc: dict[str, Any]) -> "Wallet":
        wallet = doc.get("wallet") or {}
        return Wallet(
            user_id=user_id,
            balance=to_money(wallet.get("balance", 0)),
            currency=wallet.get("currency", "INR"),
            transactions=tuple(WalletTransaction.from_document(t) for t in wallet.get("transactions", [])),
            version=int(doc.get("version", 1)),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "balance": str(self.balance),
            "currency": self.currency,
            "transactions": [t.to_document() for t in self.transactions],
        }
