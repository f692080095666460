from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from salonbook.domain.money import to_money


@dataclass(frozen=True)
class ServiceItem:
    id: str
    name: str
    price: Decimal
    duration_minutes: int
    category: str
    discounted_price: Decimal | None = None

    def __post_init__(self) -> None:
        if self.effective_price < 0:
            raise ValueError(f"Service {self.id} has a negative effective price")

    @property
    def effective_price(self) -> Decimal:
        if self.discounted_price is not None:
            return self.discounted_price
        return self.price

    @staticmethod
    def from_document(doc: dict[str, Any]) -> "ServiceItem":
        discounted = doc.get("discountedPrice")
        return ServiceItem(
            id=str(doc["id"]),
            name=(doc.get("name") or "").strip(),
            price=to_money(doc["price"]),
            discounted_price=to_money(discounted) if discounted is not None else None,
            duration_minutes=int(doc.get("duration") or 0),
            category=(doc.get("category") or "").strip().lower(),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "discountedPrice": str(self.discounted_price) if self.discounted_price is not None else None,
            "duration": self.duration_minutes,
            "category": self.category,
        }


@dataclass(frozen=True)
class StaffMember:
    id: str
    name: str
    specializations: frozenset[str] = frozenset()
    designation: str | None = None

    def can_perform(self, categories: set[str] | frozenset[str]) -> bool:
        return set(categories) <= self.specializations

    @staticmethod
    def from_document(doc: dict[str, Any]) -> "StaffMember":
        return StaffMember(
            id=str(doc["id"]),
            name=(doc.get("name") or "").strip(),
            specializations=frozenset(s.strip().lower() for s in (doc.get("specializations") or []) if s),
            designation=doc.get("designation"),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "designation": self.designation,
            "specializations": sorted(self.specializations),
        }
