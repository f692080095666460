from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from salonbook.application.exceptions import InvalidPromoCodeError
from salonbook.application.ports.promo_registry import PromoRegistryPort
from salonbook.domain.entities.promo import AppliedPromo, DiscountKind, PromoCode
from salonbook.domain.money import ZERO, to_money


def compute_discount(promo: PromoCode, subtotal: Decimal) -> Decimal:
    subtotal = max(ZERO, to_money(subtotal))
    if promo.kind is DiscountKind.PERCENTAGE:
        raw = subtotal * promo.magnitude / Decimal(100)
    else:
        raw = promo.magnitude
    return to_money(min(subtotal, max(ZERO, raw)))


class PromotionEngine:
    """
    Holds at most one applied promo code for a checkout.

    Applying a new code replaces the current one; an unknown code leaves the
    current state untouched.
    """

    def __init__(self, registry: PromoRegistryPort, enforce_expiry: bool = False) -> None:
        self._registry = registry
        self._enforce_expiry = enforce_expiry
        self._applied: AppliedPromo | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def applied(self) -> AppliedPromo | None:
        return self._applied

    @property
    def is_applied(self) -> bool:
        return self._applied is not None

    @property
    def discount(self) -> Decimal:
        return self._applied.discount if self._applied else ZERO

    def apply(self, code: str, subtotal: Decimal, today: date | None = None) -> Decimal:
        promo = self._registry.get(code)
        if promo is None:
            self._logger.info("Promo code rejected", extra={"reason": "unknown", "promo_code": code})
            raise InvalidPromoCodeError("Invalid promo code")

        if self._enforce_expiry and promo.is_expired(today or date.today()):
            self._logger.info("Promo code rejected", extra={"reason": "expired", "promo_code": promo.code})
            raise InvalidPromoCodeError("Promo code has expired")

        discount = compute_discount(promo, subtotal)
        self._applied = AppliedPromo(code=promo.code, discount=discount)
        return discount

    def remove(self) -> None:
        self._applied = None
