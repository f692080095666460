from decimal import Decimal

import pytest

from salonbook.application.exceptions import (
    ConcurrentModificationError,
    EmptySelectionError,
    InsufficientBalanceError,
    InvalidPromoCodeError,
    NotAuthorizedError,
    PaymentGatewayError,
    PaymentVerificationError,
)
from salonbook.application.use_cases.settlement import PAYMENT_INTENTS, SettlementUseCase, compute_quote
from salonbook.application.use_cases.wallet import WalletService
from salonbook.domain.entities.booking import BookingStatus, PaymentMethod, PaymentStatus
from salonbook.domain.entities.settlement import IntentStatus
from salonbook.domain.entities.wallet import TransactionReason
from salonbook.infrastructure.promotions.promo_registry import StaticPromoRegistry
from salonbook.infrastructure.store.memory_store import MemoryDocumentStore

from conftest import seed_documents


def test_quote_with_percentage_promo(settlement, customer, make_request, haircut):
    quote, applied = settlement.quote(customer, make_request(haircut), "FIRST20", use_wallet=False)

    assert quote.subtotal == Decimal("499.00")
    assert quote.promo_discount == Decimal("99.80")
    assert quote.final_amount == Decimal("399.20")
    assert quote.wallet_usage == 0
    assert quote.amount_to_pay == Decimal("399.20")
    assert applied.code == "FIRST20"


def test_quote_rejects_unknown_promo(settlement, customer, make_request, haircut):
    with pytest.raises(InvalidPromoCodeError):
        settlement.quote(customer, make_request(haircut), "BADCODE", use_wallet=False)


def test_compute_quote_partial_wallet():
    quote = compute_quote(Decimal("800"), Decimal("100"), True, Decimal("250"))

    assert quote.final_amount == Decimal("700.00")
    assert quote.wallet_usage == Decimal("250.00")
    assert quote.amount_to_pay == Decimal("450.00")


def test_gateway_checkout_charges_minor_units(settlement, gateway, customer, make_request, haircut, store):
    result = settlement.checkout(customer, make_request(haircut), promo_code="FIRST20")

    assert result.requires_payment
    assert result.order.amount_minor == 39920
    assert result.intent.status is IntentStatus.AWAITING_PAYMENT
    assert store.get(PAYMENT_INTENTS, result.intent.id)["status"] == "awaiting_payment"
    assert store.get_all("bookings") == []


def test_wallet_only_checkout_skips_gateway(settlement, gateway, wallet, customer, make_request, manicure):
    result = settlement.checkout(customer, make_request(manicure), use_wallet=True)

    assert gateway.orders == {}
    assert result.order is None
    assert result.intent.status is IntentStatus.SETTLED
    assert result.booking.status is BookingStatus.CONFIRMED
    assert result.booking.payment.method is PaymentMethod.WALLET
    assert result.booking.wallet_used == Decimal("300.00")
    assert wallet.get_balance("cust_1") == Decimal("200.00")


def test_confirm_settles_and_debits_wallet(settlement, gateway, wallet, customer, make_request, haircut, manicure):
    result = settlement.checkout(customer, make_request(haircut, manicure), use_wallet=True)
    assert result.intent.quote.wallet_usage == Decimal("500.00")
    assert result.order.amount_minor == 29900

    order_id = result.order.id
    booking = settlement.confirm_payment(
        customer, result.intent.id, order_id, "pay_1", gateway.sign(order_id, "pay_1")
    )

    assert booking.status is BookingStatus.CONFIRMED
    assert booking.payment.status is PaymentStatus.PAID
    assert booking.payment.payment_id == "pay_1"
    assert booking.amount_paid == Decimal("299.00")
    assert booking.final_amount == Decimal("799.00")
    assert wallet.get_balance("cust_1") == 0
    assert settlement.get_intent(customer, result.intent.id).status is IntentStatus.SETTLED


def test_confirm_twice_returns_same_booking(settlement, gateway, wallet, customer, make_request, haircut, facial, store):
    result = settlement.checkout(customer, make_request(haircut, facial), use_wallet=True)
    order_id = result.order.id
    signature = gateway.sign(order_id, "pay_2")

    first = settlement.confirm_payment(customer, result.intent.id, order_id, "pay_2", signature)
    second = settlement.confirm_payment(customer, result.intent.id, order_id, "pay_2", signature)

    assert first.id == second.id
    assert len(store.get_all("bookings")) == 1
    assert len(wallet.get_wallet("cust_1").transactions) == 1


def test_bad_signature_writes_nothing(settlement, customer, make_request, haircut, facial, wallet, store):
    result = settlement.checkout(customer, make_request(haircut, facial), use_wallet=True)

    with pytest.raises(PaymentVerificationError):
        settlement.confirm_payment(customer, result.intent.id, result.order.id, "pay_3", "forged")

    assert store.get_all("bookings") == []
    assert wallet.get_balance("cust_1") == Decimal("500.00")
    assert settlement.get_intent(customer, result.intent.id).status is IntentStatus.AWAITING_PAYMENT


def test_failure_then_retry_reuses_amount(settlement, gateway, customer, make_request, facial, store):
    result = settlement.checkout(customer, make_request(facial), promo_code="SAVE100")

    failed = settlement.fail_payment(customer, result.intent.id, "dismissed")
    assert failed.status is IntentStatus.FAILED
    assert store.get_all("bookings") == []

    retried = settlement.retry_payment(customer, result.intent.id)
    assert retried.order.id != result.order.id
    assert retried.order.amount_minor == result.order.amount_minor == 40000

    booking = settlement.confirm_payment(
        customer, result.intent.id, retried.order.id, "pay_4", gateway.sign(retried.order.id, "pay_4")
    )
    assert booking.promo.code == "SAVE100"


def test_wallet_spent_after_quote_refunds_gateway_payment(settlement, gateway, wallet, customer, make_request, haircut, facial):
    result = settlement.checkout(customer, make_request(haircut, facial), use_wallet=True)
    wallet.debit("cust_1", Decimal("450"), reason=TransactionReason.BOOKING, description="Another booking", reference="intent:other")

    with pytest.raises(InsufficientBalanceError):
        settlement.confirm_payment(
            customer, result.intent.id, result.order.id, "pay_5", gateway.sign(result.order.id, "pay_5")
        )

    assert list(gateway.refunds.values()) == [("pay_5", 49900)]
    assert settlement.get_intent(customer, result.intent.id).status is IntentStatus.FAILED


def test_webhook_capture_settles_intent(settlement, customer, make_request, facial):
    result = settlement.checkout(customer, make_request(facial))

    booking = settlement.capture_from_webhook(result.order.id, "pay_6")

    assert booking.status is BookingStatus.CONFIRMED
    assert settlement.capture_from_webhook(result.order.id, "pay_6").id == booking.id
    assert settlement.capture_from_webhook("order_unknown", "pay_7") is None


def test_gateway_outage_marks_intent_failed(settlement, gateway, customer, make_request, facial, store):
    gateway.fail_orders = True

    with pytest.raises(PaymentGatewayError):
        settlement.checkout(customer, make_request(facial))

    [intent] = store.get_all(PAYMENT_INTENTS)
    assert intent["status"] == "failed"


def test_empty_selection_is_internal_error(settlement, customer, make_request):
    with pytest.raises(EmptySelectionError):
        settlement.checkout(customer, make_request())


def test_only_customers_check_out(settlement, owner, make_request, haircut):
    with pytest.raises(NotAuthorizedError):
        settlement.checkout(owner, make_request(haircut))


def test_intent_is_private(settlement, customer, other_customer, make_request, haircut):
    result = settlement.checkout(customer, make_request(haircut))

    with pytest.raises(NotAuthorizedError):
        settlement.get_intent(other_customer, result.intent.id)


class _RacingWalletStore(MemoryDocumentStore):
    """Lets another writer touch the user document just before the next wallet write."""

    def __init__(self, seed) -> None:
        super().__init__(seed=seed)
        self.pending_races = 1

    def update(self, collection, doc_id, fields, expected_version=None):
        if collection == "users" and expected_version is not None and self.pending_races:
            self.pending_races -= 1
            super().update(collection, doc_id, {"lastLogin": "elsewhere"}, expected_version=expected_version)
        return super().update(collection, doc_id, fields, expected_version=expected_version)


def test_wallet_conflict_fails_intent_and_retry_settles(gateway, customer, make_request, manicure):
    store = _RacingWalletStore(seed_documents())
    wallet = WalletService(store=store)
    settlement = SettlementUseCase(store=store, gateway=gateway, wallet=wallet, promos=StaticPromoRegistry())

    with pytest.raises(ConcurrentModificationError):
        settlement.checkout(customer, make_request(manicure), use_wallet=True)

    [intent] = store.get_all(PAYMENT_INTENTS)
    assert intent["status"] == "failed"
    assert intent["failureReason"] == "wallet_conflict"
    assert wallet.get_balance("cust_1") == Decimal("500.00")

    retried = settlement.retry_payment(customer, intent["id"])
    assert retried.booking.status is BookingStatus.CONFIRMED
    assert wallet.get_balance("cust_1") == Decimal("200.00")
