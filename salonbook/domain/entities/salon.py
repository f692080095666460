from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from salonbook.domain.entities.service_item import ServiceItem
from salonbook.domain.money import ZERO, to_money


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def category_key(label: str) -> str:
    """'Hair Styling' -> 'hair_styling'"""
    return "_".join(label.strip().lower().split())


@dataclass(frozen=True)
class Salon:
    """Listing view of a `salons` document."""

    id: str
    name: str
    owner_id: str | None
    area: str = ""
    city: str = ""
    rating: float = 0.0
    review_count: int = 0
    starting_price: Decimal = ZERO
    categories: frozenset[str] = frozenset()
    is_featured: bool = False
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED

    @property
    def is_listed(self) -> bool:
        return self.approval_status is ApprovalStatus.APPROVED

    @staticmethod
    def from_document(doc: dict[str, Any]) -> "Salon":
        address = doc.get("address") or {}
        ratings = doc.get("ratings") or {}
        services = [ServiceItem.from_document(s) for s in doc.get("services") or []]

        starting_price = (doc.get("pricing") or {}).get("startingPrice")
        if starting_price is None and services:
            starting_price = min(s.effective_price for s in services)

        categories = doc.get("serviceCategories")
        if categories is None:
            categories = [s.category for s in services if s.category]

        return Salon(
            id=str(doc["id"]),
            name=(doc.get("name") or "").strip(),
            owner_id=doc.get("ownerId"),
            area=address.get("area") or "",
            city=address.get("city") or "",
            rating=float(ratings.get("average") or 0),
            review_count=int(ratings.get("totalReviews") or 0),
            starting_price=to_money(starting_price),
            categories=frozenset(category_key(c) for c in categories if c),
            is_featured=bool(doc.get("isFeatured", False)),
            # salons created before approval existed are live
            approval_status=ApprovalStatus(doc.get("approvalStatus", ApprovalStatus.APPROVED.value)),
        )
