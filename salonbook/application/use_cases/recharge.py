from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from salonbook.application.exceptions import (
    NotAuthorizedError,
    NotFoundError,
    PaymentVerificationError,
)
from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.application.ports.payment_gateway import GatewayOrder, PaymentGatewayPort
from salonbook.application.use_cases.wallet import WalletService
from salonbook.domain.entities.session import Session
from salonbook.domain.entities.wallet import TransactionReason, Wallet
from salonbook.domain.money import ZERO, to_minor_units, to_money

RECHARGES = "walletRecharges"


class WalletRechargeUseCase:
    """Top up a wallet through the payment gateway; credited only after a verified payment."""

    def __init__(
        self,
        store: DocumentStorePort,
        gateway: PaymentGatewayPort,
        wallet: WalletService,
        currency: str = "INR",
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._wallet = wallet
        self._currency = currency
        self._logger = logging.getLogger(__name__)

    def start(self, session: Session, amount: Decimal) -> tuple[str, GatewayOrder]:
        if not session.is_customer:
            raise NotAuthorizedError("Only customers have a wallet")
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValueError("Recharge amount must be positive")

        recharge_id = f"recharge_{uuid.uuid4().hex[:12]}"
        order = self._gateway.create_order(to_minor_units(amount), self._currency, receipt=recharge_id)
        self._store.create(
            RECHARGES,
            {
                "id": recharge_id,
                "userId": session.user_id,
                "amount": str(amount),
                "orderId": order.id,
                "status": "awaiting_payment",
                "createdAt": datetime.now(timezone.utc).isoformat(),
            },
            doc_id=recharge_id,
        )
        return recharge_id, order

    def confirm(
        self,
        session: Session,
        recharge_id: str,
        payment_id: str,
        signature: str,
    ) -> Wallet:
        doc = self._store.get(RECHARGES, recharge_id)
        if doc is None:
            raise NotFoundError(f"Recharge {recharge_id} not found")
        if doc["userId"] != session.user_id:
            raise NotAuthorizedError("Recharge belongs to another user")
        if doc["status"] == "completed":
            return self._wallet.get_wallet(session.user_id)

        if not self._gateway.verify_payment_signature(doc["orderId"], payment_id, signature):
            raise PaymentVerificationError("Payment signature verification failed")

        wallet = self._wallet.credit(
            session.user_id,
            to_money(doc["amount"]),
            reason=TransactionReason.RECHARGE,
            description="Wallet recharge",
            reference=f"recharge:{recharge_id}",
        )
        self._store.update(RECHARGES, recharge_id, {"status": "completed", "paymentId": payment_id})
        self._logger.info("Wallet recharged", extra={"user_id": session.user_id, "amount": doc["amount"]})
        return wallet
