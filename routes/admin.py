from flask import Blueprint, jsonify, g, request

from routes.booking import booking_service, serialize_bookings
from security.rbac import require_roles
from services.bookings import Actor
from utils.audit import log_event
from utils.roles import ADMIN

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


# ---------- ADMIN: list all bookings ----------
@admin_bp.get("/bookings")
@require_roles(ADMIN)
def list_all_bookings():
    status = (request.args.get("status") or "").strip().lower() or None
    rows = booking_service().list_all(Actor.from_user(g.user), status=status)
    log_event("ADMIN_BOOKINGS_VIEW", user_id=g.user.id)
    return jsonify(success=True, bookings=serialize_bookings(rows)), 200


# ---------- ADMIN: hard delete a booking ----------
@admin_bp.delete("/bookings/<booking_ref>")
@require_roles(ADMIN)
def delete_booking(booking_ref: str):
    booking = booking_service().delete(booking_ref, Actor.from_user(g.user))

    log_event("BOOKING_DELETE", user_id=g.user.id, entity="booking", entity_id=booking.booking_code,
              metadata={"ground_id": booking.ground_id, "status": booking.status})
    return jsonify(success=True, message="Booking deleted"), 200
