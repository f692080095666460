from __future__ import annotations

from typing import Any

from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.application.ports.salon_catalog import SalonCatalogPort
from salonbook.domain.entities.service_item import ServiceItem, StaffMember


class SalonCatalogStore(SalonCatalogPort):
    """Services and staff embedded in `salons` documents."""

    def __init__(self, store: DocumentStorePort) -> None:
        self._store = store

    def _salon(self, salon_id: str) -> dict[str, Any]:
        return self._store.get("salons", salon_id) or {}

    def get_service(self, salon_id: str, service_id: str) -> ServiceItem | None:
        for doc in self._salon(salon_id).get("services", []):
            if str(doc.get("id")) == service_id:
                return ServiceItem.from_document(doc)
        return None

    def get_staff(self, salon_id: str, staff_id: str) -> StaffMember | None:
        for doc in self._salon(salon_id).get("staff", []):
            if str(doc.get("id")) == staff_id:
                return StaffMember.from_document(doc)
        return None

    def list_staff(self, salon_id: str) -> list[StaffMember]:
        return [StaffMember.from_document(doc) for doc in self._salon(salon_id).get("staff", [])]
