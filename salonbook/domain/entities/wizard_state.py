from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import IntEnum

from salonbook.domain.entities.selection import SelectedServices
from salonbook.domain.entities.service_item import StaffMember


class WizardStage(IntEnum):
    SERVICES = 1
    STAFF = 2
    DATE_TIME = 3
    CONFIRMATION = 4


@dataclass(frozen=True)
class WizardState:
    stage: WizardStage = WizardStage.SERVICES
    services: SelectedServices = SelectedServices()
    staff: StaffMember | None = None
    selected_date: date | None = None
    selected_time: str | None = None  # HH:MM
    special_request: str = ""
