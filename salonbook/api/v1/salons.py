import datetime as dt

from fastapi import APIRouter, Depends, Query

from salonbook.api.v1.deps import http_error
from salonbook.api.v1.schemas import SalonSchema, TimeSlotSchema
from salonbook.application.exceptions import SalonBookError
from salonbook.application.use_cases.availability import AvailabilityUseCase
from salonbook.application.use_cases.salon_directory import SalonDirectoryUseCase
from salonbook.wiring.dependencies import get_availability_use_case, get_salon_directory_use_case

router = APIRouter(prefix="/salons")


@router.get("", response_model=list[SalonSchema])
def search_salons(
    q: str | None = Query(None),
    location: str | None = Query(None),
    services: list[str] = Query(default=[]),
    price_range: str = Query("all"),
    rating: str = Query("all"),
    sort_by: str = Query("rating"),
    featured: bool | None = Query(None),
    uc: SalonDirectoryUseCase = Depends(get_salon_directory_use_case),
):
    try:
        salons = uc.search(
            term=q,
            location=location,
            services=services,
            price_range=price_range,
            rating=rating,
            sort_by=sort_by,
            featured=featured,
        )
    except (SalonBookError, ValueError) as e:
        raise http_error(e)
    return [SalonSchema.from_salon(s) for s in salons]


@router.get("/{salon_id}", response_model=SalonSchema)
def get_salon(
    salon_id: str,
    uc: SalonDirectoryUseCase = Depends(get_salon_directory_use_case),
):
    try:
        return SalonSchema.from_salon(uc.get(salon_id))
    except SalonBookError as e:
        raise http_error(e)


@router.get("/{salon_id}/availability", response_model=list[TimeSlotSchema])
def availability(
    salon_id: str,
    date: dt.date = Query(...),
    staff_id: str | None = Query(None),
    duration: int = Query(30, ge=1),
    uc: AvailabilityUseCase = Depends(get_availability_use_case),
):
    return [
        TimeSlotSchema(time=slot.time, available=slot.available)
        for slot in uc.slots(salon_id, staff_id, date, duration)
    ]
