from fastapi import APIRouter, Depends, Query, Response

from salonbook.api.v1.deps import get_session, http_error, resolve_booking_request
from salonbook.api.v1.schemas import BookingRequestSchema, BookingSchema, StatusChangeSchema, WalkInSchema
from salonbook.application.exceptions import SalonBookError
from salonbook.application.ports.salon_catalog import SalonCatalogPort
from salonbook.application.use_cases.lifecycle import BookingLifecycleUseCase
from salonbook.domain.entities.booking import BookingStatus
from salonbook.domain.entities.session import Session
from salonbook.wiring.dependencies import get_lifecycle_use_case, get_salon_catalog

router = APIRouter(prefix="/bookings")


@router.get("", response_model=list[BookingSchema])
def list_bookings(
    status: BookingStatus | None = Query(None),
    session: Session = Depends(get_session),
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        bookings = uc.list_for_session(session, status=status)
    except SalonBookError as e:
        raise http_error(e)
    return [BookingSchema.from_booking(b) for b in bookings]


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking(
    booking_id: str,
    session: Session = Depends(get_session),
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        return BookingSchema.from_booking(uc.get(session, booking_id))
    except SalonBookError as e:
        raise http_error(e)


@router.post("/requests", response_model=BookingSchema)
def create_request(
    req: BookingRequestSchema,
    session: Session = Depends(get_session),
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
    catalog: SalonCatalogPort = Depends(get_salon_catalog),
):
    request = resolve_booking_request(req, catalog)
    try:
        return BookingSchema.from_booking(uc.create_request(session, request))
    except (SalonBookError, RuntimeError) as e:
        raise http_error(e)


@router.post("/walk-in", response_model=BookingSchema)
def walk_in(
    req: WalkInSchema,
    session: Session = Depends(get_session),
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
    catalog: SalonCatalogPort = Depends(get_salon_catalog),
):
    request = resolve_booking_request(req.booking, catalog)
    try:
        booking = uc.accept_walk_in(session, request, customer_id=req.customer_id)
    except (SalonBookError, RuntimeError) as e:
        raise http_error(e)
    return BookingSchema.from_booking(booking)


@router.post("/{booking_id}/status", response_model=BookingSchema)
def change_status(
    booking_id: str,
    req: StatusChangeSchema,
    session: Session = Depends(get_session),
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        booking = uc.transition(session, booking_id, req.status, expected_version=req.expected_version)
    except SalonBookError as e:
        raise http_error(e)
    return BookingSchema.from_booking(booking)


@router.post("/{booking_id}/refund", response_model=BookingSchema)
def retry_refund(
    booking_id: str,
    session: Session = Depends(get_session),
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        return BookingSchema.from_booking(uc.retry_refund(session, booking_id))
    except SalonBookError as e:
        raise http_error(e)


@router.delete("/{booking_id}", status_code=204)
def delete_booking(
    booking_id: str,
    session: Session = Depends(get_session),
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
) -> Response:
    try:
        uc.delete(session, booking_id)
    except SalonBookError as e:
        raise http_error(e)
    return Response(status_code=204)
