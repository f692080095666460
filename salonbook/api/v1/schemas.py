import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from salonbook.domain.entities.account import Account
from salonbook.domain.entities.booking import Booking, BookingStatus, PaymentMethod
from salonbook.domain.entities.salon import ApprovalStatus, Salon
from salonbook.domain.entities.selection import PriceSummary
from salonbook.domain.entities.settlement import SettlementIntent, SettlementQuote
from salonbook.domain.entities.wallet import Wallet


class SessionSchema(BaseModel):
    user_id: str
    role: str
    home_path: str


class BookingRequestSchema(BaseModel):
    salon_id: str
    service_ids: list[str] = Field(default_factory=list)
    staff_id: str | None = None
    date: dt.date
    time: str = Field(pattern=r"^\d{2}:\d{2}$")
    special_request: str = ""


class QuoteRequestSchema(BaseModel):
    booking: BookingRequestSchema
    promo_code: str | None = None
    use_wallet: bool = False


class CheckoutRequestSchema(QuoteRequestSchema):
    payment_method: PaymentMethod = PaymentMethod.RAZORPAY


class QuoteSchema(BaseModel):
    subtotal: Decimal
    promo_discount: Decimal
    final_amount: Decimal
    wallet_usage: Decimal
    amount_to_pay: Decimal
    promo_code: str | None = None

    @staticmethod
    def from_quote(quote: SettlementQuote, promo_code: str | None = None) -> "QuoteSchema":
        return QuoteSchema(
            subtotal=quote.subtotal,
            promo_discount=quote.promo_discount,
            final_amount=quote.final_amount,
            wallet_usage=quote.wallet_usage,
            amount_to_pay=quote.amount_to_pay,
            promo_code=promo_code,
        )


class GatewayOrderSchema(BaseModel):
    key: str
    order_id: str
    amount: int  # minor units
    currency: str
    name: str
    description: str


class IntentSchema(BaseModel):
    id: str
    status: str
    quote: QuoteSchema
    payment_method: str
    order_id: str | None = None
    booking_id: str | None = None
    failure_reason: str | None = None

    @staticmethod
    def from_intent(intent: SettlementIntent) -> "IntentSchema":
        return IntentSchema(
            id=intent.id,
            status=intent.status.value,
            quote=QuoteSchema.from_quote(intent.quote, intent.promo.code if intent.promo else None),
            payment_method=intent.payment_method.value,
            order_id=intent.order_id,
            booking_id=intent.booking_id,
            failure_reason=intent.failure_reason,
        )


class BookingSchema(BaseModel):
    id: str
    user_id: str
    salon_id: str
    staff_id: str | None
    date: dt.date
    time: str
    duration_minutes: int
    status: BookingStatus
    services: list[dict[str, Any]]
    final_amount: Decimal
    wallet_used: Decimal
    amount_paid: Decimal
    payment: dict[str, Any]
    promo_applied: dict[str, Any] | None = None
    refund: dict[str, Any] | None = None
    version: int

    @staticmethod
    def from_booking(booking: Booking) -> "BookingSchema":
        doc = booking.to_document()
        return BookingSchema(
            id=booking.id,
            user_id=booking.user_id,
            salon_id=booking.salon_id,
            staff_id=booking.staff_id,
            date=booking.appointment_date,
            time=booking.time_slot,
            duration_minutes=booking.duration_minutes,
            status=booking.status,
            services=doc["services"],
            final_amount=booking.final_amount,
            wallet_used=booking.wallet_used,
            amount_paid=booking.amount_paid,
            payment=doc["paymentDetails"],
            promo_applied=doc["promoApplied"],
            refund=doc["refund"],
            version=booking.version,
        )


class CheckoutResponseSchema(BaseModel):
    intent: IntentSchema
    booking: BookingSchema | None = None
    order: GatewayOrderSchema | None = None


class PaymentConfirmationSchema(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentFailureSchema(BaseModel):
    reason: str = "dismissed"


class StatusChangeSchema(BaseModel):
    status: BookingStatus
    expected_version: int | None = None


class WalkInSchema(BaseModel):
    booking: BookingRequestSchema
    customer_id: str


class WalletSchema(BaseModel):
    balance: Decimal
    currency: str
    transactions: list[dict[str, Any]]

    @staticmethod
    def from_wallet(wallet: Wallet) -> "WalletSchema":
        doc = wallet.to_document()
        return WalletSchema(balance=wallet.balance, currency=wallet.currency, transactions=doc["transactions"])


class RechargeRequestSchema(BaseModel):
    amount: Decimal = Field(gt=0)


class RechargeResponseSchema(BaseModel):
    recharge_id: str
    order: GatewayOrderSchema


class RechargeConfirmationSchema(BaseModel):
    razorpay_payment_id: str
    razorpay_signature: str


class PriceSummarySchema(BaseModel):
    total_price: Decimal
    original_price: Decimal
    savings: Decimal
    total_duration: int

    @staticmethod
    def from_summary(summary: PriceSummary) -> "PriceSummarySchema":
        return PriceSummarySchema(
            total_price=summary.total_price,
            original_price=summary.original_price,
            savings=summary.savings,
            total_duration=summary.total_duration,
        )


class WizardStateSchema(BaseModel):
    stage: int = Field(default=1, ge=1, le=4)
    service_ids: list[str] = Field(default_factory=list)
    staff_id: str | None = None
    date: dt.date | None = None
    time: str | None = None
    special_request: str = ""


class WizardActionSchema(BaseModel):
    salon_id: str
    state: WizardStateSchema = Field(default_factory=WizardStateSchema)
    service_id: str | None = None
    staff_id: str | None = None
    date: dt.date | None = None
    time: str | None = None
    text: str | None = None


class WizardResponseSchema(BaseModel):
    state: WizardStateSchema
    can_advance: bool
    blocking_reason: str | None = None
    summary: PriceSummarySchema
    compatible_staff_ids: list[str]


class TimeSlotSchema(BaseModel):
    time: str
    available: bool


class EarningsSchema(BaseModel):
    completed_bookings: int
    gross: Decimal
    commission: Decimal
    net: Decimal
    paid_out: Decimal
    pending_payouts: Decimal
    available_balance: Decimal
    commission_rate: Decimal


class PayoutRequestSchema(BaseModel):
    amount: Decimal = Field(gt=0)


class SalonSchema(BaseModel):
    id: str
    name: str
    area: str
    city: str
    rating: float
    review_count: int
    starting_price: Decimal
    categories: list[str]
    is_featured: bool
    approval_status: ApprovalStatus

    @staticmethod
    def from_salon(salon: Salon) -> "SalonSchema":
        return SalonSchema(
            id=salon.id,
            name=salon.name,
            area=salon.area,
            city=salon.city,
            rating=salon.rating,
            review_count=salon.review_count,
            starting_price=salon.starting_price,
            categories=sorted(salon.categories),
            is_featured=salon.is_featured,
            approval_status=salon.approval_status,
        )


class SalonApprovalSchema(BaseModel):
    status: ApprovalStatus


class AccountSchema(BaseModel):
    user_id: str
    role: str
    email: str | None = None
    name: str | None = None
    is_active: bool

    @staticmethod
    def from_account(account: Account) -> "AccountSchema":
        return AccountSchema(
            user_id=account.user_id,
            role=account.role.value,
            email=account.email,
            name=account.name,
            is_active=account.is_active,
        )


class AccountActivationSchema(BaseModel):
    is_active: bool
