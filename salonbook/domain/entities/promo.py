from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class DiscountKind(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


@dataclass(frozen=True)
class PromoCode:
    code: str
    magnitude: Decimal
    kind: DiscountKind
    description: str | None = None
    valid_until: date | None = None

    def is_expired(self, today: date) -> bool:
        return self.valid_until is not None and today > self.valid_until


@dataclass(frozen=True)
class AppliedPromo:
    code: str
    discount: Decimal
