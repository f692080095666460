from __future__ import annotations

from abc import ABC, abstractmethod

from salonbook.domain.entities.service_item import ServiceItem, StaffMember


class SalonCatalogPort(ABC):
    @abstractmethod
    def get_service(self, salon_id: str, service_id: str) -> ServiceItem | None:
        """Get a salon's service line item by id."""
        raise NotImplementedError

    @abstractmethod
    def get_staff(self, salon_id: str, staff_id: str) -> StaffMember | None:
        """Get a salon's staff member by id."""
        raise NotImplementedError

    @abstractmethod
    def list_staff(self, salon_id: str) -> list[StaffMember]:
        raise NotImplementedError
