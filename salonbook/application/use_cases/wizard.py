from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

from salonbook.application.exceptions import StaffIncompatibleError, WizardStageIncompleteError
from salonbook.domain.entities.selection import SelectedServices
from salonbook.domain.entities.service_item import ServiceItem, StaffMember
from salonbook.domain.entities.settlement import BookingRequest
from salonbook.domain.entities.wizard_state import WizardStage, WizardState


class BookingWizard:
    """
    Linear booking flow: Services -> Staff -> Date/Time -> Confirmation.

    All operations are pure: they take a WizardState and return a new one.
    Going back never discards later selections.
    """

    def __init__(self, salon_id: str) -> None:
        self._salon_id = salon_id
        self._logger = logging.getLogger(__name__)

    def start(self, preselected: ServiceItem | None = None) -> WizardState:
        if preselected is None:
            return WizardState()
        return WizardState(stage=WizardStage.STAFF, services=SelectedServices.of([preselected]))

    def toggle_service(self, state: WizardState, item: ServiceItem) -> WizardState:
        services = state.services.toggle(item)
        staff = state.staff
        if staff is not None and not staff.can_perform(services.categories):
            # new selection needs a category the chosen staff member lacks
            self._logger.info(
                "Staff selection cleared",
                extra={"reason": "incompatible_services", "staff_id": staff.id},
            )
            staff = None
        state = replace(state, services=services, staff=staff)
        stalled = self._first_incomplete_stage(state)
        if stalled is not None and stalled < state.stage:
            # an earlier stage no longer holds; resume from there
            state = replace(state, stage=stalled)
        return state

    def select_staff(self, state: WizardState, staff: StaffMember) -> WizardState:
        if not staff.can_perform(state.services.categories):
            missing = sorted(state.services.categories - staff.specializations)
            raise StaffIncompatibleError(
                f"{staff.name} cannot perform: {', '.join(missing)}"
            )
        return replace(state, staff=staff)

    def clear_staff(self, state: WizardState) -> WizardState:
        return replace(state, staff=None)

    def select_date(self, state: WizardState, selected_date: date) -> WizardState:
        return replace(state, selected_date=selected_date, selected_time=None)

    def select_time(self, state: WizardState, time_slot: str) -> WizardState:
        if state.selected_date is None:
            raise WizardStageIncompleteError("Choose a date before choosing a time")
        return replace(state, selected_time=time_slot)

    def set_special_request(self, state: WizardState, text: str) -> WizardState:
        return replace(state, special_request=(text or "").strip())

    def can_advance(self, state: WizardState) -> bool:
        return self.blocking_reason(state) is None

    def blocking_reason(self, state: WizardState) -> str | None:
        if state.stage is WizardStage.SERVICES:
            if state.services.is_empty():
                return "Select at least one service"
            return None
        if state.stage is WizardStage.STAFF:
            if state.staff is None:
                return "Select a staff member"
            if not state.staff.can_perform(state.services.categories):
                return "Selected staff member cannot perform every chosen service"
            return None
        if state.stage is WizardStage.DATE_TIME:
            if state.selected_date is None or state.selected_time is None:
                return "Select a date and a time slot"
            return None
        return "Confirmation is the last step; submit to check out"

    def advance(self, state: WizardState) -> WizardState:
        reason = self.blocking_reason(state)
        if reason is not None:
            raise WizardStageIncompleteError(reason)
        return replace(state, stage=WizardStage(state.stage + 1))

    def back(self, state: WizardState) -> WizardState:
        if state.stage is WizardStage.SERVICES:
            return state
        return replace(state, stage=WizardStage(state.stage - 1))

    def to_checkout(self, state: WizardState) -> BookingRequest:
        """Materialize a confirmed wizard into the request checkout consumes."""
        if state.stage is not WizardStage.CONFIRMATION:
            raise WizardStageIncompleteError("Booking is not ready for checkout")
        stalled = self._first_incomplete_stage(state)
        if stalled is not None:
            raise WizardStageIncompleteError(self.blocking_reason(replace(state, stage=stalled)))
        return BookingRequest(
            salon_id=self._salon_id,
            services=state.services.items,
            staff_id=state.staff.id if state.staff else None,
            appointment_date=state.selected_date,
            time_slot=state.selected_time,
            special_request=state.special_request,
        )

    def _first_incomplete_stage(self, state: WizardState) -> WizardStage | None:
        for stage in (WizardStage.SERVICES, WizardStage.STAFF, WizardStage.DATE_TIME):
            if self.blocking_reason(replace(state, stage=stage)) is not None:
                return stage
        return None
