from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from salonbook.application.exceptions import InsufficientBalanceError, NotAuthorizedError
from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.domain.entities.booking import Booking, BookingStatus
from salonbook.domain.entities.session import Session
from salonbook.domain.money import ZERO, to_money

BOOKINGS = "bookings"
SALONS = "salons"
PAYOUTS = "payouts"


@dataclass(frozen=True)
class EarningsSummary:
    completed_bookings: int
    gross: Decimal
    commission: Decimal
    net: Decimal
    paid_out: Decimal
    pending_payouts: Decimal
    available_balance: Decimal
    commission_rate: Decimal


class EarningsUseCase:
    """Salon owner earnings: completed bookings less platform commission."""

    def __init__(self, store: DocumentStorePort, commission_rate: Decimal = Decimal("0.15")) -> None:
        self._store = store
        self._commission_rate = commission_rate
        self._logger = logging.getLogger(__name__)

    def summary(self, session: Session) -> EarningsSummary:
        salon_ids = self._owned_salon_ids(session)

        gross = ZERO
        count = 0
        for doc in self._store.get_all(BOOKINGS):
            booking = Booking.from_document(doc)
            if booking.salon_id in salon_ids and booking.status is BookingStatus.COMPLETED:
                gross += booking.final_amount
                count += 1

        commission = to_money(gross * self._commission_rate)
        net = to_money(gross - commission)

        paid_out = ZERO
        pending = ZERO
        for payout in self._store.get_all(PAYOUTS):
            if payout.get("ownerId") != session.user_id:
                continue
            if payout.get("status") == "pending":
                pending += to_money(payout["amount"])
            else:
                paid_out += to_money(payout["amount"])

        return EarningsSummary(
            completed_bookings=count,
            gross=to_money(gross),
            commission=commission,
            net=net,
            paid_out=to_money(paid_out),
            pending_payouts=to_money(pending),
            available_balance=to_money(max(ZERO, net - paid_out - pending)),
            commission_rate=self._commission_rate,
        )

    def request_payout(self, session: Session, amount: Decimal) -> dict:
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValueError("Payout amount must be positive")

        available = self.summary(session).available_balance
        if amount > available:
            raise InsufficientBalanceError("Insufficient balance for payout")

        payout_id = f"payout_{uuid.uuid4().hex[:12]}"
        payout = {
            "id": payout_id,
            "ownerId": session.user_id,
            "amount": str(amount),
            "status": "pending",
            "reference": f"PAY_{payout_id[7:].upper()}",
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        self._store.create(PAYOUTS, payout, doc_id=payout_id)
        self._logger.info("Payout requested", extra={"user_id": session.user_id, "amount": str(amount)})
        return payout

    def _owned_salon_ids(self, session: Session) -> set[str]:
        if not session.is_salon_owner:
            raise NotAuthorizedError("Earnings are only available to salon owners")
        return {
            str(doc["id"])
            for doc in self._store.get_all(SALONS)
            if doc.get("ownerId") == session.user_id
        }
