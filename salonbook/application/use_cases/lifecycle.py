from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from salonbook.application.exceptions import (
    EmptySelectionError,
    InvalidTransitionError,
    NotAuthorizedError,
    NotFoundError,
    PaymentGatewayError,
)
from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.application.ports.payment_gateway import PaymentGatewayPort
from salonbook.application.use_cases.pricing import summarize
from salonbook.application.use_cases.wallet import WalletService
from salonbook.domain.entities.booking import Booking, BookingStatus, PaymentStatus, RefundRecord
from salonbook.domain.entities.session import Role, Session
from salonbook.domain.entities.settlement import BookingRequest
from salonbook.domain.entities.wallet import TransactionReason
from salonbook.domain.money import ZERO, to_minor_units

BOOKINGS = "bookings"
SALONS = "salons"

# (from, to) -> roles allowed to make the change
TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[Role]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): frozenset({Role.SALON_OWNER}),
    (BookingStatus.PENDING, BookingStatus.CANCELLED): frozenset({Role.USER, Role.SALON_OWNER}),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): frozenset({Role.USER, Role.SALON_OWNER}),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): frozenset({Role.SALON_OWNER}),
}

INITIAL_STATES: dict[BookingStatus, frozenset[Role]] = {
    BookingStatus.PENDING: frozenset({Role.USER}),
    BookingStatus.CONFIRMED: frozenset({Role.USER, Role.SALON_OWNER}),
}


def allowed_targets(current: BookingStatus, role: Role) -> list[BookingStatus]:
    return [to for (frm, to), roles in TRANSITIONS.items() if frm is current and role in roles]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BookingLifecycleUseCase:
    def __init__(
        self,
        store: DocumentStorePort,
        gateway: PaymentGatewayPort,
        wallet: WalletService,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._wallet = wallet
        self._logger = logging.getLogger(__name__)

    def get(self, session: Session, booking_id: str) -> Booking:
        booking = self._load(booking_id)
        if not session.is_admin and not self._is_party(session, booking):
            raise NotAuthorizedError("Booking belongs to another account")
        return booking

    def list_for_session(self, session: Session, status: BookingStatus | None = None) -> list[Booking]:
        owned_salons = self._owned_salon_ids(session) if session.is_salon_owner else set()
        bookings = []
        for doc in self._store.get_all(BOOKINGS):
            booking = Booking.from_document(doc)
            if session.is_customer and booking.user_id != session.user_id:
                continue
            if session.is_salon_owner and booking.salon_id not in owned_salons:
                continue
            if status is not None and booking.status is not status:
                continue
            bookings.append(booking)
        bookings.sort(key=lambda b: (b.appointment_date, b.time_slot))
        return bookings

    def create_request(self, session: Session, request: BookingRequest) -> Booking:
        """Customer submits a booking request that waits for salon acceptance."""
        self._check_creation(session, BookingStatus.PENDING)
        return self._create(session.user_id, request, BookingStatus.PENDING)

    def accept_walk_in(self, session: Session, request: BookingRequest, customer_id: str) -> Booking:
        """Salon owner records a booking that is confirmed from the start."""
        self._check_creation(session, BookingStatus.CONFIRMED)
        if request.salon_id not in self._owned_salon_ids(session):
            raise NotAuthorizedError("Salon belongs to another owner")
        return self._create(customer_id, request, BookingStatus.CONFIRMED)

    def transition(
        self,
        session: Session,
        booking_id: str,
        target: BookingStatus,
        expected_version: int | None = None,
    ) -> Booking:
        booking = self._load(booking_id)

        roles = TRANSITIONS.get((booking.status, target))
        if roles is None:
            self._logger.info(
                "Booking transition rejected",
                extra={"booking_id": booking_id, "status": target.value, "reason": f"from_{booking.status.value}"},
            )
            raise InvalidTransitionError(
                f"Cannot move booking from {booking.status.value} to {target.value}"
            )
        if session.role not in roles or not self._is_party(session, booking):
            raise NotAuthorizedError(
                f"{session.role.value} may not move this booking to {target.value}"
            )

        fields = {"status": target.value, "updatedAt": _now()}
        if target is BookingStatus.CANCELLED:
            fields["cancelledBy"] = session.role.value
        stored = self._store.update(
            BOOKINGS,
            booking_id,
            fields,
            expected_version=expected_version if expected_version is not None else booking.version,
        )
        booking = Booking.from_document(stored)
        self._logger.info(
            "Booking status changed",
            extra={"booking_id": booking_id, "status": target.value, "user_id": session.user_id},
        )

        if target is BookingStatus.CANCELLED:
            booking = self._refund(booking)
        return booking

    def retry_refund(self, session: Session, booking_id: str) -> Booking:
        if not session.is_admin:
            raise NotAuthorizedError("Only admins can re-issue refunds")
        booking = self._load(booking_id)
        if booking.status is not BookingStatus.CANCELLED:
            raise InvalidTransitionError("Only cancelled bookings are refunded")
        return self._refund(booking)

    def delete(self, session: Session, booking_id: str) -> None:
        if not session.is_admin:
            raise NotAuthorizedError("Only admins can delete bookings")
        if not self._store.delete(BOOKINGS, booking_id):
            raise NotFoundError(f"Booking {booking_id} not found")
        self._logger.info("Booking deleted", extra={"booking_id": booking_id, "user_id": session.user_id})

    def _refund(self, booking: Booking) -> Booking:
        charged = booking.amount_paid + booking.wallet_used
        if charged == ZERO or (booking.refund is not None and not booking.refund.is_pending):
            return booking

        if booking.wallet_used > ZERO:
            self._wallet.credit(
                booking.user_id,
                booking.wallet_used,
                reason=TransactionReason.REFUND,
                description=f"Refund for cancelled booking {booking.id}",
                reference=f"refund:{booking.id}",
                booking_id=booking.id,
            )

        status = "processed"
        gateway_refund_id = None
        if booking.amount_paid > ZERO and booking.payment.payment_id:
            try:
                gateway_refund_id = self._gateway.refund(
                    booking.payment.payment_id, to_minor_units(booking.amount_paid)
                )
            except PaymentGatewayError as e:
                # booking stays cancelled; an admin re-issues through retry_refund
                self._logger.error(
                    "Gateway refund failed",
                    extra={"booking_id": booking.id, "amount": str(booking.amount_paid), "error": str(e)},
                )
                status = "pending"

        refund = RefundRecord(
            amount=charged,
            gateway_amount=booking.amount_paid,
            wallet_amount=booking.wallet_used,
            gateway_refund_id=gateway_refund_id,
            created_at=_now(),
            status=status,
        )
        fields = {"refund": refund.to_document()}
        if not refund.is_pending:
            fields["paymentDetails"] = replace(booking.payment, status=PaymentStatus.REFUNDED).to_document()

        stored = self._store.update(BOOKINGS, booking.id, fields)
        self._logger.info(
            "Refund recorded",
            extra={"booking_id": booking.id, "amount": str(refund.amount), "status": refund.status},
        )
        return Booking.from_document(stored)

    def _create(self, customer_id: str, request: BookingRequest, status: BookingStatus) -> Booking:
        if not request.services:
            self._logger.error("Booking creation with no services", extra={"user_id": customer_id})
            raise EmptySelectionError("A booking needs at least one service")

        now = _now()
        summary = summarize(request.services)
        booking = Booking(
            id=f"booking_{uuid.uuid4().hex[:16]}",
            user_id=customer_id,
            salon_id=request.salon_id,
            services=request.services,
            staff_id=request.staff_id,
            appointment_date=request.appointment_date,
            time_slot=request.time_slot,
            duration_minutes=summary.total_duration,
            status=status,
            created_at=now,
            updated_at=now,
            final_amount=summary.total_price,
            special_request=request.special_request,
        )
        self._store.create(BOOKINGS, booking.to_document(), doc_id=booking.id)
        self._logger.info("Booking created", extra={"booking_id": booking.id, "status": status.value})
        return booking

    def _check_creation(self, session: Session, status: BookingStatus) -> None:
        if session.role not in INITIAL_STATES[status]:
            raise NotAuthorizedError(f"{session.role.value} may not create a {status.value} booking")

    def _is_party(self, session: Session, booking: Booking) -> bool:
        if session.is_customer:
            return booking.user_id == session.user_id
        if session.is_salon_owner:
            return booking.salon_id in self._owned_salon_ids(session)
        return False

    def _owned_salon_ids(self, session: Session) -> set[str]:
        return {
            str(doc["id"])
            for doc in self._store.get_all(SALONS)
            if doc.get("ownerId") == session.user_id
        }

    def _load(self, booking_id: str) -> Booking:
        doc = self._store.get(BOOKINGS, booking_id)
        if doc is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return Booking.from_document(doc)
