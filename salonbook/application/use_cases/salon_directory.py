from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Callable

from salonbook.application.exceptions import NotFoundError
from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.domain.entities.salon import Salon, category_key

SALONS = "salons"

NEAR_ME = "near me"

# inclusive bounds; None means open-ended
PRICE_RANGES: dict[str, tuple[Decimal, Decimal | None]] = {
    "0-500": (Decimal("0"), Decimal("500")),
    "500-1000": (Decimal("500"), Decimal("1000")),
    "1000-2000": (Decimal("1000"), Decimal("2000")),
    "2000+": (Decimal("2000"), None),
}

MIN_RATINGS: dict[str, float] = {
    "4+": 4.0,
    "4.5+": 4.5,
}

SORTS: dict[str, tuple[Callable[[Salon], object], bool]] = {
    "rating": (lambda s: s.rating, True),
    "price-low": (lambda s: s.starting_price, False),
    "price-high": (lambda s: s.starting_price, True),
    "popular": (lambda s: s.review_count, True),
}


class SalonDirectoryUseCase:
    """Customer-facing salon discovery over approved listings."""

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def get(self, salon_id: str) -> Salon:
        doc = self._store.get(SALONS, salon_id)
        if doc is None:
            raise NotFoundError(f"Salon {salon_id} not found")
        salon = Salon.from_document(doc)
        if not salon.is_listed:
            raise NotFoundError(f"Salon {salon_id} not found")
        return salon

    def search(
        self,
        term: str | None = None,
        location: str | None = None,
        services: Iterable[str] = (),
        price_range: str = "all",
        rating: str = "all",
        sort_by: str = "rating",
        featured: bool | None = None,
    ) -> list[Salon]:
        """
        Filter approved salons and order them.

        Raises ValueError for an unknown price range, rating band or sort key.
        """
        if price_range != "all" and price_range not in PRICE_RANGES:
            raise ValueError(f"Unknown price range {price_range!r}")
        if rating != "all" and rating not in MIN_RATINGS:
            raise ValueError(f"Unknown rating filter {rating!r}")
        if sort_by not in SORTS:
            raise ValueError(f"Unknown sort order {sort_by!r}")

        term = (term or "").strip().lower()
        location = (location or "").strip().lower()
        wanted = {category_key(s) for s in services if s and s.strip()}

        salons = [Salon.from_document(doc) for doc in self._store.get_all(SALONS)]
        results = []
        for salon in salons:
            if not salon.is_listed:
                continue
            if featured is not None and salon.is_featured is not featured:
                continue
            if term and term not in salon.name.lower() and not any(term in c for c in salon.categories):
                continue
            if location and location != NEAR_ME:
                if location not in salon.city.lower() and location not in salon.area.lower():
                    continue
            if wanted and not wanted & salon.categories:
                continue
            if price_range != "all":
                low, high = PRICE_RANGES[price_range]
                if salon.starting_price < low or (high is not None and salon.starting_price > high):
                    continue
            if rating != "all" and salon.rating < MIN_RATINGS[rating]:
                continue
            results.append(salon)

        key, descending = SORTS[sort_by]
        results.sort(key=key, reverse=descending)
        self._logger.debug("Salon search matched %d salons", len(results))
        return results
