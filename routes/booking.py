from flask import Blueprint, request, jsonify, current_app, g

from security.rbac import require_roles
from services.bookings import Actor
from services.errors import SlotConflict
from services.pricing import to_number
from utils.auth_context import login_required
from utils.audit import log_event
from utils.roles import GROUND_OWNER

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")


def booking_service():
    return current_app.extensions["booking_service"]


def serialize_booking(b, grounds=None):
    """``grounds`` caches ground_id -> facility across one response."""
    if grounds is None:
        grounds = {}
    if b.ground_id not in grounds:
        grounds[b.ground_id] = booking_service().facilities.get(b.ground_id)
    facility = grounds[b.ground_id]
    ground = facility.summary() if facility is not None else b.ground_id
    return {
        "id": b.id,
        "bookingId": b.booking_code,
        "userId": b.user_id,
        "groundId": ground,
        "bookingDate": b.booking_date.isoformat(),
        "timeSlot": {
            "startTime": b.start_time,
            "endTime": b.end_time,
            "duration": to_number(b.duration),
        },
        "playerDetails": {
            "teamName": b.team_name,
            "playerCount": b.player_count,
            "contactPerson": b.contact_person,
            "requirements": b.requirements,
        },
        "pricing": {
            "baseAmount": to_number(b.base_amount),
            "discount": to_number(b.discount),
            "convenienceFee": to_number(b.convenience_fee),
            "totalAmount": to_number(b.total_amount),
            "currency": b.currency,
        },
        "status": b.status,
        "cancellationReason": b.cancellation_reason,
        "createdAt": b.created_at.isoformat() if b.created_at else None,
    }


def serialize_bookings(rows):
    grounds = {}
    return [serialize_booking(b, grounds) for b in rows]


# ---------- PLAYERS: book a slot ----------
@booking_bp.post("")
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}
    ground_id = data.get("groundId")

    try:
        booking = booking_service().create(
            user_id=g.user.id,
            facility_id=ground_id,
            booking_date=data.get("bookingDate"),
            raw_time_slot=data.get("timeSlot"),
            player_details=data.get("playerDetails"),
            requirements=data.get("requirements"),
        )
    except SlotConflict:
        log_event("BOOKING_FAIL_ALREADY_BOOKED", user_id=g.user.id, entity="ground", entity_id=ground_id,
                  metadata={"bookingDate": data.get("bookingDate"), "timeSlot": data.get("timeSlot")})
        raise

    log_event("BOOKING_CREATE", user_id=g.user.id, entity="booking", entity_id=booking.booking_code,
              metadata={"ground_id": booking.ground_id, "total": booking.total_amount})
    return jsonify(success=True, booking=serialize_booking(booking)), 201


# ---------- PLAYERS: view my bookings ----------
@booking_bp.get("/me")
@login_required
def my_bookings():
    page = request.args.get("page", 1)
    limit = request.args.get("limit", 10)
    rows, total = booking_service().list_for_user(
        g.user.id,
        status=request.args.get("status"),
        page=page,
        limit=limit,
    )
    limit = max(1, min(int(limit), current_app.config.get("BOOKINGS_PAGE_LIMIT_MAX", 100)))
    return jsonify(
        success=True,
        bookings=serialize_bookings(rows),
        pagination={
            "page": int(page),
            "limit": limit,
            "total": total,
            "pages": -(-total // limit),
        },
    ), 200


# ---------- OWNERS: bookings for my grounds ----------
@booking_bp.get("/owner")
@require_roles(GROUND_OWNER)
def owner_bookings():
    rows = booking_service().list_for_facility_owner(g.user.id)
    log_event("OWNER_BOOKINGS_VIEW", user_id=g.user.id)
    return jsonify(success=True, bookings=serialize_bookings(rows)), 200


@booking_bp.get("/<booking_ref>")
@login_required
def get_booking(booking_ref: str):
    booking = booking_service().get_for_actor(booking_ref, Actor.from_user(g.user))
    return jsonify(success=True, booking=serialize_booking(booking)), 200


@booking_bp.patch("/<booking_ref>/status")
@login_required
def update_status(booking_ref: str):
    data = request.get_json(silent=True) or {}
    status = str(data.get("status") or "").strip().lower()
    reason = str(data.get("reason") or "").strip() or None

    booking = booking_service().transition(booking_ref, Actor.from_user(g.user), status, reason=reason)

    log_event("BOOKING_STATUS_CHANGE", user_id=g.user.id, entity="booking", entity_id=booking.booking_code,
              metadata={"status": status, "reason": reason})
    return jsonify(success=True, booking=serialize_booking(booking)), 200


# ---------- OWNERS: approve a pending booking ----------
@booking_bp.patch("/<booking_ref>/approve")
@require_roles(GROUND_OWNER)
def approve_booking(booking_ref: str):
    booking = booking_service().approve(booking_ref, Actor.from_user(g.user))

    log_event("BOOKING_APPROVE", user_id=g.user.id, entity="booking", entity_id=booking.booking_code)
    return jsonify(success=True, message="Booking approved.", booking=serialize_booking(booking)), 200
