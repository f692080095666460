from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from salonbook.api.v1.deps import http_error
from salonbook.api.v1.schemas import (
    BookingRequestSchema,
    PriceSummarySchema,
    WizardActionSchema,
    WizardResponseSchema,
    WizardStateSchema,
)
from salonbook.application.exceptions import SalonBookError
from salonbook.application.ports.salon_catalog import SalonCatalogPort
from salonbook.application.use_cases.pricing import summarize
from salonbook.application.use_cases.wizard import BookingWizard
from salonbook.domain.entities.selection import SelectedServices
from salonbook.domain.entities.service_item import ServiceItem, StaffMember
from salonbook.domain.entities.wizard_state import WizardStage, WizardState
from salonbook.wiring.dependencies import get_salon_catalog

router = APIRouter(prefix="/wizard")

ACTIONS = (
    "start",
    "toggle_service",
    "select_staff",
    "clear_staff",
    "select_date",
    "select_time",
    "special_request",
    "advance",
    "back",
)


def _service(catalog: SalonCatalogPort, salon_id: str, service_id: str | None) -> ServiceItem:
    item = catalog.get_service(salon_id, service_id) if service_id else None
    if item is None:
        raise HTTPException(status_code=400, detail=f"Unknown service {service_id}")
    return item


def _staff(catalog: SalonCatalogPort, salon_id: str, staff_id: str | None) -> StaffMember:
    staff = catalog.get_staff(salon_id, staff_id) if staff_id else None
    if staff is None:
        raise HTTPException(status_code=400, detail=f"Unknown staff member {staff_id}")
    return staff


def _load_state(catalog: SalonCatalogPort, salon_id: str, payload: WizardStateSchema) -> WizardState:
    services = SelectedServices.of(_service(catalog, salon_id, sid) for sid in payload.service_ids)
    staff = _staff(catalog, salon_id, payload.staff_id) if payload.staff_id else None
    return WizardState(
        stage=WizardStage(payload.stage),
        services=services,
        staff=staff,
        selected_date=payload.date,
        selected_time=payload.time,
        special_request=payload.special_request,
    )


def _dump_state(state: WizardState) -> WizardStateSchema:
    return WizardStateSchema(
        stage=int(state.stage),
        service_ids=[item.id for item in state.services],
        staff_id=state.staff.id if state.staff else None,
        date=state.selected_date,
        time=state.selected_time,
        special_request=state.special_request,
    )


@router.post("/checkout", response_model=BookingRequestSchema)
def to_checkout(
    req: WizardActionSchema,
    catalog: SalonCatalogPort = Depends(get_salon_catalog),
):
    wizard = BookingWizard(req.salon_id)
    state = _load_state(catalog, req.salon_id, req.state)
    try:
        request = wizard.to_checkout(state)
    except SalonBookError as e:
        raise http_error(e)
    return BookingRequestSchema(
        salon_id=request.salon_id,
        service_ids=[item.id for item in request.services],
        staff_id=request.staff_id,
        date=request.appointment_date,
        time=request.time_slot,
        special_request=request.special_request,
    )


@router.post("/{action}", response_model=WizardResponseSchema)
def wizard_action(
    action: str,
    req: WizardActionSchema,
    catalog: SalonCatalogPort = Depends(get_salon_catalog),
):
    if action not in ACTIONS:
        raise HTTPException(status_code=404, detail=f"Unknown wizard action {action}")

    wizard = BookingWizard(req.salon_id)
    state = _load_state(catalog, req.salon_id, req.state)
    try:
        if action == "start":
            preselected = _service(catalog, req.salon_id, req.service_id) if req.service_id else None
            state = wizard.start(preselected)
        elif action == "toggle_service":
            state = wizard.toggle_service(state, _service(catalog, req.salon_id, req.service_id))
        elif action == "select_staff":
            state = wizard.select_staff(state, _staff(catalog, req.salon_id, req.staff_id))
        elif action == "clear_staff":
            state = wizard.clear_staff(state)
        elif action == "select_date":
            if req.date is None:
                raise HTTPException(status_code=400, detail="date is required")
            state = wizard.select_date(state, req.date)
        elif action == "select_time":
            if not req.time:
                raise HTTPException(status_code=400, detail="time is required")
            state = wizard.select_time(state, req.time)
        elif action == "special_request":
            state = wizard.set_special_request(state, req.text or "")
        elif action == "advance":
            state = wizard.advance(state)
        else:
            state = wizard.back(state)
    except SalonBookError as e:
        raise http_error(e)

    categories = state.services.categories
    return WizardResponseSchema(
        state=_dump_state(state),
        can_advance=wizard.can_advance(state),
        blocking_reason=wizard.blocking_reason(state),
        summary=PriceSummarySchema.from_summary(summarize(state.services)),
        compatible_staff_ids=[s.id for s in catalog.list_staff(req.salon_id) if s.can_perform(categories)],
    )
