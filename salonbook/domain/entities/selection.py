from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Iterator

from salonbook.domain.entities.service_item import ServiceItem
from salonbook.domain.money import ZERO


@dataclass(frozen=True)
class SelectedServices:
    """Insertion-ordered, id-unique set of chosen services."""

    items: tuple[ServiceItem, ...] = ()

    @staticmethod
    def of(items: Iterable[ServiceItem]) -> "SelectedServices":
        selection = SelectedServices()
        for item in items:
            if not selection.contains(item.id):
                selection = SelectedServices(items=selection.items + (item,))
        return selection

    def contains(self, service_id: str) -> bool:
        return any(item.id == service_id for item in self.items)

    def toggle(self, item: ServiceItem) -> "SelectedServices":
        if self.contains(item.id):
            return SelectedServices(items=tuple(i for i in self.items if i.id != item.id))
        return SelectedServices(items=self.items + (item,))

    @property
    def categories(self) -> frozenset[str]:
        return frozenset(item.category for item in self.items)

    def is_empty(self) -> bool:
        return not self.items

    def __iter__(self) -> Iterator[ServiceItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class PriceSummary:
    total_price: Decimal = ZERO
    original_price: Decimal = ZERO
    savings: Decimal = ZERO
    total_duration: int = 0
