from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal

from salonbook.application.exceptions import (
    ConcurrentModificationError,
    EmptySelectionError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotAuthorizedError,
    NotFoundError,
    PaymentGatewayError,
    PaymentVerificationError,
)
from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.application.ports.payment_gateway import GatewayOrder, PaymentGatewayPort
from salonbook.application.ports.promo_registry import PromoRegistryPort
from salonbook.application.use_cases.pricing import summarize
from salonbook.application.use_cases.promotion import PromotionEngine
from salonbook.application.use_cases.wallet import WalletService, compute_wallet_usage
from salonbook.domain.entities.booking import (
    Booking,
    BookingStatus,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
)
from salonbook.domain.entities.promo import AppliedPromo
from salonbook.domain.entities.session import Session
from salonbook.domain.entities.settlement import (
    BookingRequest,
    IntentStatus,
    SettlementIntent,
    SettlementQuote,
)
from salonbook.domain.entities.wallet import TransactionReason
from salonbook.domain.money import ZERO, to_minor_units, to_money

BOOKINGS = "bookings"
PAYMENT_INTENTS = "paymentIntents"


def compute_quote(
    subtotal: Decimal,
    promo_discount: Decimal,
    use_wallet: bool,
    wallet_balance: Decimal,
) -> SettlementQuote:
    subtotal = to_money(subtotal)
    promo_discount = to_money(promo_discount)
    final_amount = to_money(max(ZERO, subtotal - promo_discount))
    wallet_usage = compute_wallet_usage(use_wallet, wallet_balance, final_amount)
    amount_to_pay = to_money(max(ZERO, final_amount - wallet_usage))
    return SettlementQuote(
        subtotal=subtotal,
        promo_discount=promo_discount,
        final_amount=final_amount,
        wallet_usage=wallet_usage,
        amount_to_pay=amount_to_pay,
    )


@dataclass(frozen=True)
class CheckoutResult:
    intent: SettlementIntent
    booking: Booking | None = None
    order: GatewayOrder | None = None

    @property
    def requires_payment(self) -> bool:
        return self.booking is None and self.order is not None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def booking_id_for(intent_id: str) -> str:
    # one intent settles into exactly one booking
    return f"booking_{intent_id.removeprefix('intent_')}"


class SettlementUseCase:
    def __init__(
        self,
        store: DocumentStorePort,
        gateway: PaymentGatewayPort,
        wallet: WalletService,
        promos: PromoRegistryPort,
        currency: str = "INR",
        enforce_promo_expiry: bool = False,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._wallet = wallet
        self._promos = promos
        self._currency = currency
        self._enforce_promo_expiry = enforce_promo_expiry
        self._logger = logging.getLogger(__name__)

    def quote(
        self,
        session: Session,
        request: BookingRequest,
        promo_code: str | None,
        use_wallet: bool,
    ) -> tuple[SettlementQuote, AppliedPromo | None]:
        """Price a request without side effects. Raises InvalidPromoCodeError."""
        subtotal = summarize(request.services).total_price
        engine = PromotionEngine(self._promos, enforce_expiry=self._enforce_promo_expiry)
        if promo_code:
            engine.apply(promo_code, subtotal)
        balance = self._wallet.get_balance(session.user_id) if use_wallet else ZERO
        return compute_quote(subtotal, engine.discount, use_wallet, balance), engine.applied

    def checkout(
        self,
        session: Session,
        request: BookingRequest,
        promo_code: str | None = None,
        use_wallet: bool = False,
        payment_method: PaymentMethod = PaymentMethod.RAZORPAY,
    ) -> CheckoutResult:
        if not request.services:
            self._logger.error("Checkout reached with no services", extra={"user_id": session.user_id})
            raise EmptySelectionError("Checkout requires at least one selected service")
        if not session.is_customer:
            raise NotAuthorizedError("Only customers can check out a booking")

        quote, applied = self.quote(session, request, promo_code, use_wallet)

        now = _now()
        intent = SettlementIntent(
            id=f"intent_{uuid.uuid4().hex[:16]}",
            user_id=session.user_id,
            request=request,
            quote=quote,
            payment_method=payment_method,
            status=IntentStatus.CREATED,
            created_at=now,
            updated_at=now,
            promo=applied,
        )
        self._store.create(PAYMENT_INTENTS, intent.to_document(), doc_id=intent.id)
        self._logger.info(
            "Settlement intent created",
            extra={"intent_id": intent.id, "user_id": session.user_id, "amount": str(quote.amount_to_pay)},
        )

        if quote.amount_to_pay == ZERO:
            intent = replace(intent, payment_method=PaymentMethod.WALLET)
            booking = self._settle_wallet_only(intent)
            intent = self._load_intent(intent.id)
            return CheckoutResult(intent=intent, booking=booking)

        return self._open_order(intent)

    def retry_payment(self, session: Session, intent_id: str) -> CheckoutResult:
        """Re-open checkout for the same computed amount after a failure."""
        intent = self._owned_intent(session, intent_id)
        if intent.status in (IntentStatus.SETTLED, IntentStatus.CAPTURED):
            raise InvalidTransitionError(f"Intent {intent_id} is already paid")

        if intent.quote.amount_to_pay == ZERO:
            booking = self._settle_wallet_only(intent)
            return CheckoutResult(intent=self._load_intent(intent.id), booking=booking)
        return self._open_order(intent)

    def confirm_payment(
        self,
        session: Session,
        intent_id: str,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> Booking:
        intent = self._owned_intent(session, intent_id)
        if intent.status is IntentStatus.SETTLED:
            return self._load_booking(intent)

        if order_id not in intent.attempts:
            raise PaymentVerificationError(f"Order {order_id} does not belong to intent {intent_id}")
        if not self._gateway.verify_payment_signature(order_id, payment_id, signature):
            self._logger.warning(
                "Payment signature mismatch",
                extra={"intent_id": intent_id, "reason": "bad_signature"},
            )
            raise PaymentVerificationError("Payment signature verification failed")

        return self._capture(intent, order_id, payment_id, signature)

    def capture_from_webhook(self, order_id: str, payment_id: str) -> Booking | None:
        """Settle a payment reported by an authenticated gateway webhook."""
        intent = self._find_intent_by_order(order_id)
        if intent is None:
            self._logger.warning("Webhook for unknown order", extra={"reason": "unknown_order"})
            return None
        if intent.status is IntentStatus.SETTLED:
            return self._load_booking(intent)
        return self._capture(intent, order_id, payment_id, intent.signature)

    def fail_payment(self, session: Session, intent_id: str, reason: str) -> SettlementIntent:
        intent = self._owned_intent(session, intent_id)
        return self._mark_failed(intent, reason)

    def fail_from_webhook(self, order_id: str, reason: str) -> SettlementIntent | None:
        intent = self._find_intent_by_order(order_id)
        if intent is None:
            return None
        return self._mark_failed(intent, reason)

    def get_intent(self, session: Session, intent_id: str) -> SettlementIntent:
        return self._owned_intent(session, intent_id)

    def _mark_failed(self, intent: SettlementIntent, reason: str) -> SettlementIntent:
        if intent.status in (IntentStatus.SETTLED, IntentStatus.CAPTURED):
            raise InvalidTransitionError(f"Intent {intent.id} is already paid")
        intent = self._save_intent(intent, status=IntentStatus.FAILED, failure_reason=reason or "dismissed")
        self._logger.info("Payment failed", extra={"intent_id": intent.id, "reason": intent.failure_reason})
        return intent

    def _open_order(self, intent: SettlementIntent) -> CheckoutResult:
        amount_minor = to_minor_units(intent.quote.amount_to_pay)
        try:
            order = self._gateway.create_order(amount_minor, self._currency, receipt=intent.id)
        except PaymentGatewayError as e:
            self._save_intent(intent, status=IntentStatus.FAILED, failure_reason=str(e))
            self._logger.error("Payment order creation failed", extra={"intent_id": intent.id, "error": str(e)})
            raise

        intent = self._save_intent(
            intent,
            status=IntentStatus.AWAITING_PAYMENT,
            order_id=order.id,
            failure_reason=None,
            attempts=intent.attempts + (order.id,),
        )
        self._logger.info(
            "Payment order opened",
            extra={"intent_id": intent.id, "amount": str(intent.quote.amount_to_pay)},
        )
        return CheckoutResult(intent=intent, order=order)

    def _capture(
        self,
        intent: SettlementIntent,
        order_id: str,
        payment_id: str,
        signature: str | None,
    ) -> Booking:
        if intent.status is not IntentStatus.CAPTURED:
            intent = self._save_intent(
                intent,
                status=IntentStatus.CAPTURED,
                order_id=order_id,
                payment_id=payment_id,
                signature=signature,
                failure_reason=None,
            )

        try:
            self._debit_wallet(intent)
        except InsufficientBalanceError:
            # balance spent elsewhere since the quote; give the gateway payment back
            self._logger.error(
                "Wallet draw no longer covered after payment",
                extra={"intent_id": intent.id, "reason": "wallet_balance_changed"},
            )
            self._gateway.refund(payment_id, to_minor_units(intent.quote.amount_to_pay))
            self._save_intent(intent, status=IntentStatus.FAILED, failure_reason="wallet_balance_changed")
            raise

        payment = PaymentRecord(
            method=intent.payment_method,
            status=PaymentStatus.PAID,
            order_id=order_id,
            payment_id=payment_id,
            signature=signature,
        )
        return self._finalize(intent, payment)

    def _settle_wallet_only(self, intent: SettlementIntent) -> Booking:
        try:
            self._debit_wallet(intent)
        except InsufficientBalanceError:
            self._save_intent(intent, status=IntentStatus.FAILED, failure_reason="insufficient_wallet_balance")
            raise
        except ConcurrentModificationError:
            self._logger.warning(
                "Wallet changed during settlement", extra={"intent_id": intent.id, "reason": "wallet_conflict"}
            )
            self._save_intent(intent, status=IntentStatus.FAILED, failure_reason="wallet_conflict")
            raise
        payment = PaymentRecord(method=PaymentMethod.WALLET, status=PaymentStatus.PAID)
        return self._finalize(intent, payment)

    def _debit_wallet(self, intent: SettlementIntent) -> None:
        if intent.quote.wallet_usage == ZERO:
            return
        self._wallet.debit(
            intent.user_id,
            intent.quote.wallet_usage,
            reason=TransactionReason.BOOKING,
            description=f"Used wallet for booking at salon {intent.request.salon_id}",
            reference=f"intent:{intent.id}",
            booking_id=booking_id_for(intent.id),
        )

    def _finalize(self, intent: SettlementIntent, payment: PaymentRecord) -> Booking:
        booking_id = booking_id_for(intent.id)
        existing = self._store.get(BOOKINGS, booking_id)
        if existing is not None:
            booking = Booking.from_document(existing)
        else:
            now = _now()
            request = intent.request
            booking = Booking(
                id=booking_id,
                user_id=intent.user_id,
                salon_id=request.salon_id,
                services=request.services,
                staff_id=request.staff_id,
                appointment_date=request.appointment_date,
                time_slot=request.time_slot,
                duration_minutes=request.duration_minutes,
                status=BookingStatus.CONFIRMED,
                created_at=now,
                updated_at=now,
                payment=payment,
                promo=intent.promo,
                wallet_used=intent.quote.wallet_usage,
                amount_paid=intent.quote.amount_to_pay,
                final_amount=intent.quote.final_amount,
                special_request=request.special_request,
                intent_id=intent.id,
            )
            self._store.create(BOOKINGS, booking.to_document(), doc_id=booking.id)

        self._save_intent(
            intent,
            status=IntentStatus.SETTLED,
            payment_method=payment.method,
            booking_id=booking.id,
        )
        self._logger.info(
            "Booking confirmed",
            extra={"booking_id": booking.id, "intent_id": intent.id, "amount": str(booking.final_amount)},
        )
        return booking

    def _save_intent(self, intent: SettlementIntent, **changes) -> SettlementIntent:
        updated = replace(intent, updated_at=_now(), **changes)
        self._store.update(PAYMENT_INTENTS, intent.id, updated.to_document())
        return updated

    def _load_intent(self, intent_id: str) -> SettlementIntent:
        doc = self._store.get(PAYMENT_INTENTS, intent_id)
        if doc is None:
            raise NotFoundError(f"Payment intent {intent_id} not found")
        return SettlementIntent.from_document(doc)

    def _owned_intent(self, session: Session, intent_id: str) -> SettlementIntent:
        intent = self._load_intent(intent_id)
        if intent.user_id != session.user_id:
            raise NotAuthorizedError("Payment intent belongs to another user")
        return intent

    def _load_booking(self, intent: SettlementIntent) -> Booking:
        doc = self._store.get(BOOKINGS, intent.booking_id or booking_id_for(intent.id))
        if doc is None:
            raise NotFoundError(f"Booking for intent {intent.id} not found")
        return Booking.from_document(doc)

    def _find_intent_by_order(self, order_id: str) -> SettlementIntent | None:
        for doc in self._store.get_all(PAYMENT_INTENTS):
            if order_id in doc.get("attempts", []):
                return SettlementIntent.from_document(doc)
        return None
