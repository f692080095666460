from __future__ import annotations

from salonbook.application.ports.promo_registry import PromoRegistryPort
from salonbook.domain.entities.promo import PromoCode
from salonbook.infrastructure.promotions.promo_data import PROMO_CODES


class StaticPromoRegistry(PromoRegistryPort):
    def __init__(self, codes: dict[str, PromoCode] | None = None) -> None:
        self._codes = {key.upper(): promo for key, promo in (codes or PROMO_CODES).items()}

    def get(self, code: str) -> PromoCode | None:
        normalized = (code or "").upper()
        return self._codes.get(normalized)

    def list_codes(self) -> list[PromoCode]:
        return list(self._codes.values())
