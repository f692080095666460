import threading
from decimal import Decimal

import pytest

from salonbook.application.exceptions import ConcurrentModificationError, InsufficientBalanceError, NotFoundError
from salonbook.application.use_cases.wallet import WalletService, compute_wallet_usage
from salonbook.domain.entities.wallet import TransactionKind, TransactionReason
from salonbook.infrastructure.store.memory_store import MemoryDocumentStore

from conftest import seed_documents


def test_wallet_usage_is_min_of_balance_and_due():
    assert compute_wallet_usage(True, Decimal("500"), Decimal("300")) == Decimal("300.00")
    assert compute_wallet_usage(True, Decimal("120"), Decimal("300")) == Decimal("120.00")
    assert compute_wallet_usage(False, Decimal("500"), Decimal("300")) == 0
    assert compute_wallet_usage(True, Decimal("0"), Decimal("300")) == 0


def test_debit_persists_balance_and_transaction(wallet, store):
    updated = wallet.debit(
        "cust_1", Decimal("120"), reason=TransactionReason.BOOKING, description="Booking", reference="intent:a"
    )

    assert updated.balance == Decimal("380.00")
    doc = store.get("users", "cust_1")
    assert doc["wallet"]["balance"] == "380.00"
    assert doc["wallet"]["transactions"][0]["type"] == TransactionKind.DEBIT.value
    assert doc["wallet"]["transactions"][0]["reference"] == "intent:a"


def test_repeated_reference_is_noop(wallet):
    wallet.debit("cust_1", Decimal("100"), reason=TransactionReason.BOOKING, description="x", reference="intent:b")
    again = wallet.debit("cust_1", Decimal("100"), reason=TransactionReason.BOOKING, description="x", reference="intent:b")

    assert again.balance == Decimal("400.00")
    assert len(again.transactions) == 1


def test_debit_beyond_balance_is_refused(wallet):
    with pytest.raises(InsufficientBalanceError):
        wallet.debit("cust_1", Decimal("500.01"), reason=TransactionReason.BOOKING, description="x", reference="r")

    assert wallet.get_balance("cust_1") == Decimal("500.00")


def test_credit_for_user_without_wallet(wallet):
    updated = wallet.credit("cust_2", Decimal("50"), reason=TransactionReason.CASHBACK, description="Cashback", reference="c1")

    assert updated.balance == Decimal("50.00")
    assert updated.currency == "INR"


def test_unknown_user(wallet):
    with pytest.raises(NotFoundError):
        wallet.get_wallet("ghost")


class _InterleavedReads(MemoryDocumentStore):
    """Holds every user read until two callers have both read."""

    def __init__(self, seed) -> None:
        super().__init__(seed=seed)
        self.barrier = threading.Barrier(2, timeout=5)

    def get(self, collection, doc_id):
        doc = super().get(collection, doc_id)
        if collection == "users":
            self.barrier.wait()
        return doc


def test_concurrent_debits_cannot_overdraw():
    store = _InterleavedReads(seed_documents())
    service = WalletService(store=store)
    outcomes = []

    def spend(reference: str) -> None:
        try:
            service.debit("cust_1", Decimal("300"), reason=TransactionReason.BOOKING, description="x", reference=reference)
            outcomes.append("ok")
        except ConcurrentModificationError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=spend, args=(f"intent:{n}",)) for n in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["conflict", "ok"]
    [doc] = [d for d in store.get_all("users") if d["id"] == "cust_1"]
    assert doc["wallet"]["balance"] == "200.00"
    assert len(doc["wallet"]["transactions"]) == 1
    assert doc["version"] == 2


def test_wallet_write_bumps_user_version(wallet, store):
    wallet.credit("cust_1", Decimal("10"), reason=TransactionReason.CASHBACK, description="x", reference="c2")

    assert store.get("users", "cust_1")["version"] == 2
    assert wallet.get_wallet("cust_1").version == 2
