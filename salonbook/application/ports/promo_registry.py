from __future__ import annotations

from abc import ABC, abstractmethod

from salonbook.domain.entities.promo import PromoCode


class PromoRegistryPort(ABC):
    @abstractmethod
    def get(self, code: str) -> PromoCode | None:
        """Case-insensitive exact lookup of a promo code."""
        raise NotImplementedError

    @abstractmethod
    def list_codes(self) -> list[PromoCode]:
        raise NotImplementedError
