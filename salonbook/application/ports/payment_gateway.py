from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GatewayOrder:
    id: str
    amount_minor: int
    currency: str
    receipt: str


class PaymentGatewayPort(ABC):
    @abstractmethod
    def create_order(self, amount_minor: int, currency: str, receipt: str) -> GatewayOrder:
        """Open a hosted-checkout order. Raises PaymentGatewayError on failure."""
        raise NotImplementedError

    @abstractmethod
    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check the (order, payment, signature) triple reported by checkout."""
        raise NotImplementedError

    @abstractmethod
    def refund(self, payment_id: str, amount_minor: int) -> str:
        """Refund part or all of a captured payment. Returns the refund id."""
        raise NotImplementedError

    @property
    @abstractmethod
    def public_key(self) -> str:
        """Key id the browser checkout is opened with."""
        raise NotImplementedError
