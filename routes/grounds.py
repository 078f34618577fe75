from flask import Blueprint, request, jsonify

from routes.booking import booking_service
from services.errors import ValidationError
from services.pricing import to_number
from services.timeslots import rounded_hours

ground_bp = Blueprint("ground", __name__, url_prefix="/grounds")


# ---------- PUBLIC: occupied slots of a ground on a day ----------
@ground_bp.get("/<ground_id>/availability/<date_str>")
def ground_availability(ground_id: str, date_str: str):
    facility, day, slots = booking_service().availability(ground_id, date_str)
    return jsonify(
        success=True,
        groundId=facility.id,
        bookingDate=day.isoformat(),
        bookings=slots,
    ), 200


# ---------- PUBLIC: price a slot without booking it ----------
@ground_bp.post("/<ground_id>/quote")
def quote(ground_id: str):
    data = request.get_json(silent=True) or {}
    time_slot = data.get("timeSlot")
    if not time_slot:
        raise ValidationError("timeSlot required")

    facility, slot, pricing = booking_service().quote(ground_id, time_slot)
    return jsonify(
        success=True,
        ground=facility.summary(),
        timeSlot={
            "startTime": slot.start_time,
            "endTime": slot.end_time,
            "duration": to_number(rounded_hours(pricing.duration)),
        },
        pricing=pricing.as_dict(),
    ), 200
