"""Booking lifecycle: creation, status transitions, queries and deletion."""

import logging
import re
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import FrozenSet, Optional

from models.booking import ACTIVE_STATUSES, BOOKING_STATUSES, Booking
from services.catalog import (
    CatalogFacilityRepository,
    ChainedFacilityRepository,
    SqlFacilityRepository,
    resolve,
)
from services.conflicts import active_slots, ensure_available
from services.errors import (
    BookingCodeTaken,
    Forbidden,
    InvalidTransition,
    NotFound,
    SlotConflict,
    ValidationError,
)
from services.pricing import DEFAULT_FEE_RATE, DEFAULT_PER_HOUR, compute_pricing
from services.stores import InMemoryBookingStore, SqlBookingStore
from services.timeslots import parse_time_slot, rounded_hours
from utils.roles import ADMIN_ROLES

logger = logging.getLogger(__name__)

FACILITY_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
BOOKING_ID_RE = re.compile(r"^[0-9]{1,18}$")
# a date, optionally followed by an ISO time part
BOOKING_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(T[0-9:.+-]*Z?)?$")

_BASE36 = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class Actor:
    id: int
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return bool(self.roles & ADMIN_ROLES)

    @classmethod
    def from_user(cls, user):
        return cls(id=user.id, roles=frozenset(user.role_names))


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_booking_code(now_ms: Optional[int] = None) -> str:
    """"BC" + base-36 millisecond timestamp + 5 random base-36 chars, upper-cased."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"BC{to_base36(now_ms)}{suffix}".upper()


def parse_booking_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError("bookingDate must be an ISO date (YYYY-MM-DD)")
    # accept full ISO timestamps too, only the calendar day matters
    match = BOOKING_DATE_RE.fullmatch(value.strip())
    if not match:
        raise ValidationError("bookingDate must be an ISO date (YYYY-MM-DD)")
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        raise ValidationError("bookingDate must be an ISO date (YYYY-MM-DD)")


def parse_player_details(details) -> dict:
    if not isinstance(details, dict):
        raise ValidationError("playerDetails must be an object")

    team_name = details.get("teamName")
    if not isinstance(team_name, str) or not team_name.strip():
        raise ValidationError("playerDetails.teamName is required")

    count = details.get("playerCount")
    if isinstance(count, str) and count.strip().isdigit():
        count = int(count.strip())
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValidationError("playerDetails.playerCount must be a positive integer")

    contact = details.get("contactPerson")
    if isinstance(contact, str):
        contact = {"name": contact.strip()} if contact.strip() else None
    if not isinstance(contact, dict) or not contact:
        raise ValidationError("playerDetails.contactPerson is required")

    return {"team_name": team_name.strip(), "player_count": count, "contact_person": contact}


class BookingService:
    def __init__(
        self,
        facilities,
        store,
        fee_rate=DEFAULT_FEE_RATE,
        default_per_hour=DEFAULT_PER_HOUR,
        code_attempts=3,
        max_page_size=100,
        code_factory=generate_booking_code,
        today=date.today,
    ):
        self.facilities = facilities
        self.store = store
        self.fee_rate = Decimal(str(fee_rate))
        self.default_per_hour = default_per_hour
        self.code_attempts = code_attempts
        self.max_page_size = max_page_size
        self.code_factory = code_factory
        self.today = today

    # ---------- pricing ----------
    def quote(self, facility_id, raw_time_slot):
        facility = resolve(self.facilities, facility_id)
        slot = parse_time_slot(raw_time_slot)
        return facility, slot, compute_pricing(facility, slot, self.fee_rate, self.default_per_hour)

    # ---------- create ----------
    def create(self, user_id, facility_id, booking_date, raw_time_slot, player_details, requirements=None):
        required = {
            "groundId": facility_id,
            "bookingDate": booking_date,
            "timeSlot": raw_time_slot,
            "playerDetails": player_details,
        }
        missing = [name for name, value in required.items() if not value]
        if user_id is None:
            missing.append("userId")
        if missing:
            raise ValidationError("Missing required fields: " + ", ".join(missing))

        if not isinstance(facility_id, str) or not FACILITY_ID_RE.match(facility_id):
            raise ValidationError("Invalid groundId")

        day = parse_booking_date(booking_date)
        if day < self.today():
            raise ValidationError("Cannot book a date in the past")
        details = parse_player_details(player_details)
        if requirements is not None and not isinstance(requirements, str):
            raise ValidationError("requirements must be a string")

        facility = resolve(self.facilities, facility_id)
        slot = parse_time_slot(raw_time_slot)
        pricing = compute_pricing(facility, slot, self.fee_rate, self.default_per_hour)

        ensure_available(self.store, facility.id, day, slot)

        booking = Booking(
            user_id=user_id,
            ground_id=facility.id,
            booking_date=day,
            start_time=slot.start_time,
            end_time=slot.end_time,
            duration=rounded_hours(slot.duration),
            team_name=details["team_name"],
            player_count=details["player_count"],
            contact_person=details["contact_person"],
            requirements=(requirements or "").strip() or None,
            base_amount=pricing.base_amount,
            discount=pricing.discount,
            convenience_fee=pricing.convenience_fee,
            total_amount=pricing.total_amount,
            currency=pricing.currency,
            status="pending",
            created_at=datetime.utcnow(),
        )

        for _ in range(self.code_attempts):
            booking.booking_code = self.code_factory()
            try:
                self.store.add(booking)
            except BookingCodeTaken as exc:
                logger.warning("Booking code %s already taken, regenerating", exc)
                continue
            logger.info(
                "Booking %s created for ground %s on %s %s-%s",
                booking.booking_code, facility.id, day, slot.start_time, slot.end_time,
            )
            return booking

        raise RuntimeError("Could not allocate a unique booking code")

    # ---------- transitions ----------
    def transition(self, booking_id, actor: Actor, new_status, reason=None):
        if new_status not in BOOKING_STATUSES:
            raise ValidationError(f"Unknown status: {new_status}")

        booking = self._get(booking_id)

        if actor.is_admin:
            if booking.status not in ACTIVE_STATUSES and new_status in ACTIVE_STATUSES:
                # re-activating must not double book the slot
                other = self.store.find_active(booking.ground_id, booking.booking_date, booking.start_time, booking.end_time)
                if other is not None and other is not booking:
                    raise SlotConflict("Slot already booked")
        else:
            if new_status != "confirmed":
                raise Forbidden(f"Not allowed to set status to {new_status}")
            facility = self.facilities.get(booking.ground_id)
            if facility is None or facility.owner_user_id is None or facility.owner_user_id != actor.id:
                raise Forbidden("You do not own this ground.")
            if booking.status != "pending":
                raise InvalidTransition("Only pending bookings can be approved.")

        previous = booking.status
        booking.status = new_status
        if new_status == "cancelled" and reason:
            booking.cancellation_reason = str(reason)[:255]
        self.store.save(booking)

        logger.info("Booking %s: %s -> %s by user %s", booking.booking_code, previous, new_status, actor.id)
        return booking

    def approve(self, booking_id, actor: Actor):
        return self.transition(booking_id, actor, "confirmed")

    # ---------- queries ----------
    def _get(self, booking_id):
        booking = None
        if isinstance(booking_id, int):
            if 0 < booking_id < 10 ** 18:
                booking = self.store.get(booking_id)
        elif isinstance(booking_id, str) and BOOKING_ID_RE.fullmatch(booking_id):
            booking = self.store.get(int(booking_id))
        elif isinstance(booking_id, str) and booking_id:
            booking = self.store.get_by_code(booking_id.upper())
        if booking is None:
            raise NotFound("Booking not found")
        return booking

    def get_for_actor(self, booking_id, actor: Actor):
        booking = self._get(booking_id)
        if booking.user_id == actor.id or actor.is_admin:
            return booking
        facility = self.facilities.get(booking.ground_id)
        if facility is not None and facility.owner_user_id is not None and facility.owner_user_id == actor.id:
            return booking
        # do not reveal other users' bookings
        raise NotFound("Booking not found")

    def list_for_user(self, user_id, status=None, page=1, limit=10):
        if status and status not in BOOKING_STATUSES:
            raise ValidationError(f"Unknown status: {status}")
        try:
            page = int(page)
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be integers")
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        limit = min(limit, self.max_page_size)
        return self.store.list_for_user(user_id, status=status, offset=(page - 1) * limit, limit=limit)

    def list_for_facility_owner(self, owner_id):
        ground_ids = {f.id for f in self.facilities.list_owned_by(owner_id)}
        return self.store.list_for_grounds(ground_ids)

    def list_all(self, actor: Actor, status=None):
        if not actor.is_admin:
            raise Forbidden("Forbidden")
        if status and status not in BOOKING_STATUSES:
            raise ValidationError(f"Unknown status: {status}")
        return self.store.list_all(status=status)

    def availability(self, facility_id, booking_date):
        facility = resolve(self.facilities, facility_id)
        day = parse_booking_date(booking_date)
        return facility, day, active_slots(self.store, facility.id, day)

    # ---------- delete ----------
    def delete(self, booking_id, actor: Actor):
        if not actor.is_admin:
            raise Forbidden("Only administrators can delete bookings")
        booking = self._get(booking_id)
        self.store.delete(booking)
        logger.info("Booking %s deleted by user %s", booking.booking_code, actor.id)
        return booking


def build_booking_service(config) -> BookingService:
    """Wire repositories and store from a Flask config mapping."""
    catalog = CatalogFacilityRepository.from_file(
        config.get("FALLBACK_CATALOG_PATH"),
        default_currency=config.get("DEFAULT_CURRENCY", "INR"),
    )
    facilities = ChainedFacilityRepository(SqlFacilityRepository(), catalog)

    if config.get("BOOKING_STORE", "sql") == "memory":
        store = InMemoryBookingStore()
    else:
        store = SqlBookingStore()

    return BookingService(
        facilities,
        store,
        fee_rate=config.get("CONVENIENCE_FEE_RATE", DEFAULT_FEE_RATE),
        default_per_hour=config.get("DEFAULT_PER_HOUR", DEFAULT_PER_HOUR),
        code_attempts=config.get("BOOKING_CODE_ATTEMPTS", 3),
        max_page_size=config.get("BOOKINGS_PAGE_LIMIT_MAX", 100),
    )
