from __future__ import annotations

import logging

from salonbook.application.exceptions import PaymentGatewayError
from salonbook.application.ports.payment_gateway import GatewayOrder, PaymentGatewayPort
from salonbook.infrastructure.payments.signature import sign_payment, verify_payment_signature


class MockPaymentGateway(PaymentGatewayPort):
    """In-process stand-in for hosted checkout; signs payments with a local secret."""

    def __init__(
        self,
        key_secret: str = "mock_secret",
        fail_orders: bool = False,
        fail_refunds: bool = False,
    ) -> None:
        self._key_secret = key_secret
        self.fail_orders = fail_orders
        self.fail_refunds = fail_refunds
        self.orders: dict[str, GatewayOrder] = {}
        self.refunds: dict[str, tuple[str, int]] = {}
        self._logger = logging.getLogger(__name__)

    @property
    def public_key(self) -> str:
        return "rzp_test_mock"

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> GatewayOrder:
        if self.fail_orders:
            raise PaymentGatewayError("Mock gateway unavailable")
        order = GatewayOrder(
            id=f"order_mock_{len(self.orders) + 1}",
            amount_minor=amount_minor,
            currency=currency,
            receipt=receipt,
        )
        self.orders[order.id] = order
        self._logger.info("Mock payment order created", extra={"intent_id": receipt, "amount": amount_minor})
        return order

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return verify_payment_signature(order_id, payment_id, signature, self._key_secret)

    def refund(self, payment_id: str, amount_minor: int) -> str:
        if self.fail_refunds:
            raise PaymentGatewayError("Mock gateway refused the refund")
        refund_id = f"rfnd_mock_{len(self.refunds) + 1}"
        self.refunds[refund_id] = (payment_id, amount_minor)
        self._logger.info("Mock refund created", extra={"amount": amount_minor})
        return refund_id

    def sign(self, order_id: str, payment_id: str) -> str:
        """What the hosted checkout would hand back on success."""
        return sign_payment(order_id, payment_id, self._key_secret)
