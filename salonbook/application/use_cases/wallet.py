from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from salonbook.application.exceptions import InsufficientBalanceError, NotFoundError
from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.domain.entities.wallet import (
    TransactionKind,
    TransactionReason,
    Wallet,
    WalletTransaction,
)
from salonbook.domain.money import ZERO, to_money

USERS = "users"


def compute_wallet_usage(use_wallet: bool, balance: Decimal, amount_due: Decimal) -> Decimal:
    """How much of the balance would be drawn for `amount_due`. Does not debit."""
    balance = to_money(balance)
    if not use_wallet or balance <= ZERO:
        return ZERO
    return to_money(max(ZERO, min(balance, to_money(amount_due))))


class WalletService:
    """Reads and mutates the stored-value balance kept on the user document."""

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def get_wallet(self, user_id: str) -> Wallet:
        doc = self._store.get(USERS, user_id)
        if doc is None:
            raise NotFoundError(f"User {user_id} not found")
        return Wallet.from_user_document(user_id, doc)

    def get_balance(self, user_id: str) -> Decimal:
        return self.get_wallet(user_id).balance

    def debit(
        self,
        user_id: str,
        amount: Decimal,
        reason: TransactionReason,
        description: str,
        reference: str,
        booking_id: str | None = None,
    ) -> Wallet:
        return self._apply(user_id, TransactionKind.DEBIT, amount, reason, description, reference, booking_id)

    def credit(
        self,
        user_id: str,
        amount: Decimal,
        reason: TransactionReason,
        description: str,
        reference: str,
        booking_id: str | None = None,
    ) -> Wallet:
        return self._apply(user_id, TransactionKind.CREDIT, amount, reason, description, reference, booking_id)

    def _apply(
        self,
        user_id: str,
        kind: TransactionKind,
        amount: Decimal,
        reason: TransactionReason,
        description: str,
        reference: str,
        booking_id: str | None,
    ) -> Wallet:
        amount = to_money(amount)
        if amount < ZERO:
            raise ValueError("Wallet transaction amount must not be negative")

        wallet = self.get_wallet(user_id)
        if amount == ZERO or wallet.has_reference(reference):
            return wallet

        if kind is TransactionKind.DEBIT:
            if amount > wallet.balance:
                raise InsufficientBalanceError(
                    f"Wallet balance {wallet.balance} is less than {amount}"
                )
            new_balance = wallet.balance - amount
        else:
            new_balance = wallet.balance + amount

        transaction = WalletTransaction(
            id=f"txn_{uuid.uuid4().hex[:12]}",
            kind=kind,
            amount=amount,
            reason=reason,
            description=description,
            created_at=datetime.now(timezone.utc).isoformat(),
            reference=reference,
            booking_id=booking_id,
        )
        updated = replace(
            wallet,
            balance=to_money(new_balance),
            transactions=(transaction,) + wallet.transactions,
            version=wallet.version + 1,
        )
        # a concurrent write to the same user raises ConcurrentModificationError
        self._store.update(USERS, user_id, {"wallet": updated.to_document()}, expected_version=wallet.version)
        self._logger.info(
            "Wallet updated",
            extra={"user_id": user_id, "amount": str(amount), "status": kind.value, "reason": reason.value},
        )
        return updated
