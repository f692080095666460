from __future__ import annotations

from typing import Iterable

from salonbook.domain.entities.selection import PriceSummary
from salonbook.domain.entities.service_item import ServiceItem
from salonbook.domain.money import ZERO, to_money


def summarize(services: Iterable[ServiceItem]) -> PriceSummary:
    """Totals for a selection. An empty selection yields all zeros."""
    total_price = ZERO
    original_price = ZERO
    total_duration = 0
    for item in services:
        total_price += item.effective_price
        original_price += item.price
        total_duration += item.duration_minutes

    return PriceSummary(
        total_price=to_money(total_price),
        original_price=to_money(original_price),
        savings=to_money(max(ZERO, original_price - total_price)),
        total_duration=total_duration,
    )
