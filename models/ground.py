import secrets
from datetime import datetime
from models.db import db


def new_ground_id() -> str:
    # 24 hex chars, same shape as a document-store object id
    return secrets.token_hex(12)


class Ground(db.Model):
    __tablename__ = "grounds"

    id = db.Column(db.String(24), primary_key=True, default=new_ground_id)
    name = db.Column(db.String(120), nullable=False)
    location = db.Column(db.String(160), nullable=True)

    # pricing document: flat rate and/or [{"start": "HH:MM", "end": "HH:MM", "perHour": n}]
    price_per_hour = db.Column(db.Integer, nullable=True)
    price_ranges = db.Column(db.JSON, nullable=True)
    discount = db.Column(db.Integer, nullable=False, default=0)
    currency = db.Column(db.String(10), nullable=False, default="INR")

    owner_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
