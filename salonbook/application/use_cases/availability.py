from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from salonbook.application.ports.document_store import DocumentStorePort
from salonbook.domain.entities.booking import Booking, BookingStatus

BOOKINGS = "bookings"


@dataclass(frozen=True)
class TimeSlot:
    time: str  # HH:MM
    available: bool


def _at(day: date, hhmm: str) -> datetime:
    hour, minute = (int(part) for part in hhmm.split(":"))
    return datetime.combine(day, datetime.min.time().replace(hour=hour, minute=minute))


class AvailabilityUseCase:
    """Slot availability derived from persisted bookings for one staff member."""

    def __init__(
        self,
        store: DocumentStorePort,
        open_hour: int = 9,
        close_hour: int = 21,
        interval_minutes: int = 30,
    ) -> None:
        self._store = store
        self._open_hour = open_hour
        self._close_hour = close_hour
        self._interval = interval_minutes

    def slots(self, salon_id: str, staff_id: str | None, day: date, duration_minutes: int) -> list[TimeSlot]:
        busy = self._busy_ranges(salon_id, staff_id, day)
        closing = datetime.combine(day, datetime.min.time().replace(hour=self._close_hour))
        current = datetime.combine(day, datetime.min.time().replace(hour=self._open_hour))
        duration = timedelta(minutes=max(duration_minutes, self._interval))

        slots: list[TimeSlot] = []
        while current < closing:
            end = current + duration
            free = end <= closing and all(end <= start or current >= stop for start, stop in busy)
            slots.append(TimeSlot(time=current.strftime("%H:%M"), available=free))
            current += timedelta(minutes=self._interval)
        return slots

    def is_available(
        self,
        salon_id: str,
        staff_id: str | None,
        day: date,
        time_slot: str,
        duration_minutes: int,
    ) -> bool:
        return any(s.time == time_slot and s.available for s in self.slots(salon_id, staff_id, day, duration_minutes))

    def _busy_ranges(self, salon_id: str, staff_id: str | None, day: date) -> list[tuple[datetime, datetime]]:
        ranges = []
        for doc in self._store.get_all(BOOKINGS):
            booking = Booking.from_document(doc)
            if booking.salon_id != salon_id or booking.appointment_date != day:
                continue
            if booking.status is BookingStatus.CANCELLED:
                continue
            if staff_id is not None and booking.staff_id != staff_id:
                continue
            start = _at(day, booking.time_slot)
            ranges.append((start, start + timedelta(minutes=booking.duration_minutes)))
        return ranges
