from datetime import datetime
from sqlalchemy import text
from models.db import db

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed", "no_show")
ACTIVE_STATUSES = ("pending", "confirmed")

_active_only = "status IN ('pending', 'confirmed')"


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)
    booking_code = db.Column(db.String(32), unique=True, nullable=False, index=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    # durable ground id or a fallback catalog id, so no foreign key
    ground_id = db.Column(db.String(64), nullable=False, index=True)

    booking_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    duration = db.Column(db.Numeric(6, 2), nullable=False)

    team_name = db.Column(db.String(120), nullable=False)
    player_count = db.Column(db.Integer, nullable=False)
    contact_person = db.Column(db.JSON, nullable=True)
    requirements = db.Column(db.Text, nullable=True)

    base_amount = db.Column(db.Numeric(12, 2), nullable=False)
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    convenience_fee = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False, default="INR")

    status = db.Column(db.String(20), nullable=False, default="pending")
    # status values: pending, confirmed, cancelled, completed, no_show
    cancellation_reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)

    __table_args__ = (
        # Hard business-rule: one active booking per ground/date/slot (prevents double booking)
        db.Index(
            "uq_booking_active_slot",
            "ground_id", "booking_date", "start_time", "end_time",
            unique=True,
            sqlite_where=text(_active_only),
            postgresql_where=text(_active_only),
        ),
    )
