"""Booking persistence.

Both stores enforce the same rule the ``uq_booking_active_slot`` index enforces
in the database: at most one pending/confirmed booking per ground, date and
start/end pair. ``add`` and ``save`` raise ``SlotConflict`` when it is violated
and ``BookingCodeTaken`` when a booking code is reused.
"""

import itertools
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import ACTIVE_STATUSES, Booking
from services.errors import BookingCodeTaken, SlotConflict


def _newest_first(rows):
    return sorted(rows, key=lambda b: (b.created_at or datetime.min, b.id or 0), reverse=True)


class BookingStore:
    def add(self, booking):
        raise NotImplementedError

    def save(self, booking):
        raise NotImplementedError

    def delete(self, booking):
        raise NotImplementedError

    def get(self, booking_id):
        raise NotImplementedError

    def get_by_code(self, booking_code):
        raise NotImplementedError

    def find_active(self, ground_id, booking_date, start_time, end_time):
        raise NotImplementedError

    def active_for_date(self, ground_id, booking_date):
        raise NotImplementedError

    def list_for_user(self, user_id, status=None, offset=0, limit=None):
        """Returns (rows, total) newest first."""
        raise NotImplementedError

    def list_for_grounds(self, ground_ids):
        raise NotImplementedError

    def list_all(self, status=None, limit=200):
        raise NotImplementedError


class SqlBookingStore(BookingStore):
    def add(self, booking):
        db.session.add(booking)
        self._commit(booking)
        return booking

    def save(self, booking):
        self._commit(booking)
        return booking

    def _commit(self, booking):
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            # uq_booking_active_slot or the booking_code unique constraint
            code = booking.booking_code
            if Booking.query.filter(Booking.booking_code == code, Booking.id != booking.id).first():
                raise BookingCodeTaken(code)
            raise SlotConflict("Slot already booked")

    def delete(self, booking):
        db.session.delete(booking)
        db.session.commit()

    def get(self, booking_id):
        return db.session.get(Booking, booking_id)

    def get_by_code(self, booking_code):
        return Booking.query.filter_by(booking_code=booking_code).first()

    def find_active(self, ground_id, booking_date, start_time, end_time):
        return (
            Booking.query
            .filter(
                Booking.ground_id == ground_id,
                Booking.booking_date == booking_date,
                Booking.start_time == start_time,
                Booking.end_time == end_time,
                Booking.status.in_(ACTIVE_STATUSES),
            )
            .first()
        )

    def active_for_date(self, ground_id, booking_date):
        return (
            Booking.query
            .filter(
                Booking.ground_id == ground_id,
                Booking.booking_date == booking_date,
                Booking.status.in_(ACTIVE_STATUSES),
            )
            .order_by(Booking.start_time.asc())
            .all()
        )

    def list_for_user(self, user_id, status=None, offset=0, limit=None):
        q = Booking.query.filter_by(user_id=user_id)
        if status:
            q = q.filter_by(status=status)
        total = q.count()
        q = q.order_by(Booking.created_at.desc(), Booking.id.desc()).offset(offset)
        if limit:
            q = q.limit(limit)
        return q.all(), total

    def list_for_grounds(self, ground_ids):
        if not ground_ids:
            return []
        return (
            Booking.query
            .filter(Booking.ground_id.in_(list(ground_ids)))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

    def list_all(self, status=None, limit=200):
        q = Booking.query
        if status:
            q = q.filter_by(status=status)
        return q.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(limit).all()


class InMemoryBookingStore(BookingStore):
    """Process-local store for tests and demo mode."""

    def __init__(self):
        self._rows = {}
        self._ids = itertools.count(1)

    def _check_unique(self, booking):
        for other in self._rows.values():
            if other is booking:
                continue
            if other.booking_code == booking.booking_code:
                raise BookingCodeTaken(booking.booking_code)
            if (
                booking.status in ACTIVE_STATUSES
                and other.status in ACTIVE_STATUSES
                and other.ground_id == booking.ground_id
                and other.booking_date == booking.booking_date
                and other.start_time == booking.start_time
                and other.end_time == booking.end_time
            ):
                raise SlotConflict("Slot already booked")

    def add(self, booking):
        self._check_unique(booking)
        booking.id = next(self._ids)
        if booking.created_at is None:
            booking.created_at = datetime.utcnow()
        self._rows[booking.id] = booking
        return booking

    def save(self, booking):
        self._check_unique(booking)
        booking.updated_at = datetime.utcnow()
        return booking

    def delete(self, booking):
        self._rows.pop(booking.id, None)

    def get(self, booking_id):
        return self._rows.get(booking_id)

    def get_by_code(self, booking_code):
        for booking in self._rows.values():
            if booking.booking_code == booking_code:
                return booking
        return None

    def find_active(self, ground_id, booking_date, start_time, end_time):
        for booking in self._rows.values():
            if (
                booking.ground_id == ground_id
                and booking.booking_date == booking_date
                and booking.start_time == start_time
                and booking.end_time == end_time
                and booking.status in ACTIVE_STATUSES
            ):
                return booking
        return None

    def active_for_date(self, ground_id, booking_date):
        rows = [
            b for b in self._rows.values()
            if b.ground_id == ground_id and b.booking_date == booking_date and b.status in ACTIVE_STATUSES
        ]
        return sorted(rows, key=lambda b: b.start_time)

    def list_for_user(self, user_id, status=None, offset=0, limit=None):
        rows = [b for b in self._rows.values() if b.user_id == user_id]
        if status:
            rows = [b for b in rows if b.status == status]
        rows = _newest_first(rows)
        end = offset + limit if limit else None
        return rows[offset:end], len(rows)

    def list_for_grounds(self, ground_ids):
        ground_ids = set(ground_ids)
        return _newest_first(b for b in self._rows.values() if b.ground_id in ground_ids)

    def list_all(self, status=None, limit=200):
        rows = list(self._rows.values())
        if status:
            rows = [b for b in rows if b.status == status]
        return _newest_first(rows)[:limit]
