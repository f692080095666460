from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from salonbook.domain.entities.promo import AppliedPromo
from salonbook.domain.entities.service_item import ServiceItem
from salonbook.domain.money import ZERO, to_money


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


class PaymentMethod(str, Enum):
    RAZORPAY = "razorpay"
    UPI = "upi"
    NETBANKING = "netbanking"
    WALLET = "wallet"
    NONE = "none"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


@dataclass(frozen=True)
class PaymentRecord:
    method: PaymentMethod = PaymentMethod.NONE
    status: PaymentStatus = PaymentStatus.UNPAID
    order_id: str | None = None
    payment_id: str | None = None
    signature: str | None = None

    @staticmethod
    def from_document(doc: dict[str, Any] | None) -> "PaymentRecord":
        doc = doc or {}
        return PaymentRecord(
            method=PaymentMethod(doc.get("method", PaymentMethod.NONE.value)),
            status=PaymentStatus(doc.get("status", PaymentStatus.UNPAID.value)),
            order_id=doc.get("razorpayOrderId"),
            payment_id=doc.get("razorpayPaymentId"),
            signature=doc.get("razorpaySignature"),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "status": self.status.value,
            "razorpayOrderId": self.order_id,
            "razorpayPaymentId": self.payment_id,
            "razorpaySignature": self.signature,
        }


@dataclass(frozen=True)
class RefundRecord:
    amount: Decimal
    gateway_amount: Decimal
    wallet_amount: Decimal
    gateway_refund_id: str | None
    created_at: str
    status: str = "processed"  # processed | pending

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    @staticmethod
    def from_document(doc: dict[str, Any] | None) -> "RefundRecord | None":
        if not doc:
            return None
        return RefundRecord(
            amount=to_money(doc["amount"]),
            gateway_amount=to_money(doc.get("gatewayAmount")),
            wallet_amount=to_money(doc.get("walletAmount")),
            gateway_refund_id=doc.get("gatewayRefundId"),
            created_at=doc.get("createdAt", ""),
            status=doc.get("status", "processed"),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "amount": str(self.amount),
            "gatewayAmount": str(self.gateway_amount),
            "walletAmount": str(self.wallet_amount),
            "gatewayRefundId": self.gateway_refund_id,
            "createdAt": self.created_at,
            "status": self.status,
        }


@dataclass(frozen=True)
class Booking:
    id: str
    user_id: str
    salon_id: str
    services: tuple[ServiceItem, ...]  # snapshot, prices frozen at booking time
    staff_id: str | None
    appointment_date: date
    time_slot: str  # HH:MM
    duration_minutes: int
    status: BookingStatus
    created_at: str
    updated_at: str
    payment: PaymentRecord = PaymentRecord()
    promo: AppliedPromo | None = None
    wallet_used: Decimal = ZERO
    amount_paid: Decimal = ZERO
    final_amount: Decimal = ZERO
    special_request: str = ""
    intent_id: str | None = None
    refund: RefundRecord | None = None
    cancelled_by: str | None = None
    version: int = 1

    @staticmethod
    def from_document(doc: dict[str, Any]) -> "Booking":
        promo = doc.get("promoApplied")
        return Booking(
            id=str(doc["id"]),
            user_id=doc["userId"],
            salon_id=doc["salonId"],
            services=tuple(ServiceItem.from_document(s) for s in doc.get("services", [])),
            staff_id=doc.get("staffId"),
            appointment_date=date.fromisoformat(doc["date"]),
            time_slot=doc["time"],
            duration_minutes=int(doc.get("duration") or 0),
            status=BookingStatus(doc["status"]),
            created_at=doc.get("createdAt", ""),
            updated_at=doc.get("updatedAt", ""),
            payment=PaymentRecord.from_document(doc.get("paymentDetails")),
            promo=AppliedPromo(code=promo["code"], discount=to_money(promo["discount"])) if promo else None,
            wallet_used=to_money(doc.get("walletUsed")),
            amount_paid=to_money(doc.get("amountPaid")),
            final_amount=to_money(doc.get("finalAmount")),
            special_request=doc.get("specialRequests", ""),
            intent_id=doc.get("intentId"),
            refund=RefundRecord.from_document(doc.get("refund")),
            cancelled_by=doc.get("cancelledBy"),
            version=int(doc.get("version", 1)),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "salonId": self.salon_id,
            "services": [s.to_document() for s in self.services],
            "staffId": self.staff_id,
            "date": self.appointment_date.isoformat(),
            "time": self.time_slot,
            "duration": self.duration_minutes,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "paymentDetails": self.payment.to_document(),
            "promoApplied": (
                {"code": self.promo.code, "discount": str(self.promo.discount)} if self.promo else None
            ),
            "walletUsed": str(self.wallet_used),
            "amountPaid": str(self.amount_paid),
            "finalAmount": str(self.final_amount),
            "specialRequests": self.special_request,
            "intentId": self.intent_id,
            "refund": self.refund.to_document() if self.refund else None,
            "cancelledBy": self.cancelled_by,
            "version": self.version,
        }
