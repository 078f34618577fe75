from services.errors import SlotConflict


def has_conflict(store, facility_id, booking_date, slot) -> bool:
    """True iff a pending/confirmed booking holds exactly this slot on that day.

    Cancelled, completed and no-show bookings never block a slot.
    """
    return store.find_active(facility_id, booking_date, slot.start_time, slot.end_time) is not None


def ensure_available(store, facility_id, booking_date, slot) -> None:
    if has_conflict(store, facility_id, booking_date, slot):
        raise SlotConflict("Slot already booked")


def active_slots(store, facility_id, booking_date):
    return [
        {
            "startTime": b.start_time,
            "endTime": b.end_time,
            "status": b.status,
        }
        for b in store.active_for_date(facility_id, booking_date)
    ]
