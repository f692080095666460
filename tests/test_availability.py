from datetime import date

from salonbook.application.use_cases.availability import AvailabilityUseCase
from salonbook.application.use_cases.lifecycle import BookingLifecycleUseCase
from salonbook.domain.entities.booking import BookingStatus


def _slot(slots, time):
    return next(s for s in slots if s.time == time)


def test_day_has_half_hour_slots_between_open_and_close(store):
    slots = AvailabilityUseCase(store).slots("salon_1", "staff_priya", date(2024, 6, 14), 30)

    assert slots[0].time == "09:00"
    assert slots[-1].time == "20:30"
    assert len(slots) == 24
    assert all(s.available for s in slots)


def test_booking_blocks_overlapping_slots_for_same_staff(store, gateway, wallet, customer, make_request, haircut):
    BookingLifecycleUseCase(store, gateway, wallet).create_request(customer, make_request(haircut, time_slot="10:00"))
    availability = AvailabilityUseCase(store)

    slots = availability.slots("salon_1", "staff_priya", date(2024, 6, 14), 30)
    assert not _slot(slots, "10:00").available
    assert not _slot(slots, "10:30").available
    assert _slot(slots, "11:00").available
    assert _slot(slots, "09:30").available

    assert availability.is_available("salon_1", "staff_rahul", date(2024, 6, 14), "10:00", 30)
    assert availability.is_available("salon_1", "staff_priya", date(2024, 6, 15), "10:00", 30)


def test_longer_service_needs_free_run(store, gateway, wallet, customer, make_request, haircut):
    BookingLifecycleUseCase(store, gateway, wallet).create_request(customer, make_request(haircut, time_slot="10:00"))

    assert not AvailabilityUseCase(store).is_available("salon_1", "staff_priya", date(2024, 6, 14), "09:30", 60)


def test_slot_running_past_closing_is_unavailable(store):
    availability = AvailabilityUseCase(store)

    assert not availability.is_available("salon_1", None, date(2024, 6, 14), "20:30", 60)
    assert availability.is_available("salon_1", None, date(2024, 6, 14), "20:00", 60)


def test_cancelling_frees_the_slot(store, gateway, wallet, customer, make_request, haircut):
    lifecycle = BookingLifecycleUseCase(store, gateway, wallet)
    booking = lifecycle.create_request(customer, make_request(haircut, time_slot="14:00"))
    availability = AvailabilityUseCase(store)
    assert not availability.is_available("salon_1", "staff_priya", date(2024, 6, 14), "14:00", 45)

    lifecycle.transition(customer, booking.id, BookingStatus.CANCELLED)

    assert availability.is_available("salon_1", "staff_priya", date(2024, 6, 14), "14:00", 45)
