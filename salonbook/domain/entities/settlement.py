from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from salonbook.domain.entities.booking import PaymentMethod
from salonbook.domain.entities.promo import AppliedPromo
from salonbook.domain.entities.service_item import ServiceItem
from salonbook.domain.money import ZERO, to_money


@dataclass(frozen=True)
class BookingRequest:
    """What the wizard hands to checkout once the customer confirms."""

    salon_id: str
    services: tuple[ServiceItem, ...]
    staff_id: str | None
    appointment_date: date
    time_slot: str
    special_request: str = ""

    @property
    def duration_minutes(self) -> int:
        return sum(s.duration_minutes for s in self.services)

    @staticmethod
    def from_document(doc: dict[str, Any]) -> "BookingRequest":
        return BookingRequest(
            salon_id=doc["salonId"],
            services=tuple(ServiceItem.from_document(s) for s in doc.get("services", [])),
            staff_id=doc.get("staffId"),
            appointment_date=date.fromisoformat(doc["date"]),
            time_slot=doc["time"],
            special_request=doc.get("specialRequests", ""),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "salonId": self.salon_id,
            "services": [s.to_document() for s in self.services],
            "staffId": self.staff_id,
            "date": self.appointment_date.isoformat(),
            "time": self.time_slot,
            "specialRequests": self.special_request,
        }


@dataclass(frozen=True)
class SettlementQuote:
    subtotal: Decimal = ZERO
    promo_discount: Decimal = ZERO
    final_amount: Decimal = ZERO
    wallet_usage: Decimal = ZERO
    amount_to_pay: Decimal = ZERO

    @staticmethod
    def from_document(doc: dict[str, Any]) -> "SettlementQuote":
        return SettlementQuote(
            subtotal=to_money(doc.get("subtotal")),
            promo_discount=to_money(doc.get("promoDiscount")),
            final_amount=to_money(doc.get("finalAmount")),
            wallet_usage=to_money(doc.get("walletUsage")),
            amount_to_pay=to_money(doc.get("amountToPay")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "subtotal": str(self.subtotal),
            "promoDiscount": str(self.promo_discount),
            "finalAmount": str(self.final_amount),
            "walletUsage": str(self.wallet_usage),
            "amountToPay": str(self.amount_to_pay),
        }


class IntentStatus(str, Enum):
    CREATED = "created"
    AWAITING_PAYMENT = "awaiting_payment"
    CAPTURED = "captured"  # paid, booking/debit not yet both written
    SETTLED = "settled"
    FAILED = "failed"


@dataclass(frozen=True)
class SettlementIntent:
    """Write-ahead record tying one payment attempt to one booking."""

    id: str
    user_id: str
    request: BookingRequest
    quote: SettlementQuote
    payment_method: PaymentMethod
    status: IntentStatus
    created_at: str
    updated_at: str
    promo: AppliedPromo | None = None
    order_id: str | None = None
    payment_id: str | None = None
    signature: str | None = None
    booking_id: str | None = None
    failure_reason: str | None = None
    attempts: tuple[str, ...] = field(default_factory=tuple)  # gateway order ids, oldest first

    @staticmethod
    def from_document(doc: dict[str, Any]) -> "SettlementIntent":
        promo = doc.get("promoApplied")
        return SettlementIntent(
            id=str(doc["id"]),
            user_id=doc["userId"],
            request=BookingRequest.from_document(doc["request"]),
            quote=SettlementQuote.from_document(doc["quote"]),
            payment_method=PaymentMethod(doc["paymentMethod"]),
            status=IntentStatus(doc["status"]),
            created_at=doc.get("createdAt", ""),
            updated_at=doc.get("updatedAt", ""),
            promo=AppliedPromo(code=promo["code"], discount=to_money(promo["discount"])) if promo else None,
            order_id=doc.get("orderId"),
            payment_id=doc.get("paymentId"),
            signature=doc.get("signature"),
            booking_id=doc.get("bookingId"),
            failure_reason=doc.get("failureReason"),
            attempts=tuple(doc.get("attempts", [])),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "request": self.request.to_document(),
            "quote": self.quote.to_document(),
            "paymentMethod": self.payment_method.value,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "promoApplied": (
                {"code": self.promo.code, "discount": str(self.promo.discount)} if self.promo else None
            ),
            "orderId": self.order_id,
            "paymentId": self.payment_id,
            "signature": self.signature,
            "bookingId": self.booking_id,
            "failureReason": self.failure_reason,
            "attempts": list(self.attempts),
        }
