import os
from datetime import date, timedelta

import pytest

from app import create_app
from config import Config, BASE_DIR
from models import db
from models.ground import Ground
from models.user import User, Role
from security.session import create_session
from services.bookings import BookingService
from services.catalog import CatalogFacilityRepository, Facility, PriceRange
from services.stores import InMemoryBookingStore
from utils.seed import seed_roles


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SEED_ROLES_ON_STARTUP = False
    BOOKING_STORE = "sql"
    FALLBACK_CATALOG_PATH = os.path.join(BASE_DIR, "data", "fallback_grounds.json")
    LOG_LEVEL = "WARNING"


TODAY = date(2026, 1, 1)

FLAT = Facility(id="flat-1", name="Flat Ground", per_hour=500, owner_user_id=10, source="catalog")
RANGED = Facility(
    id="ranged-1",
    name="Ranged Ground",
    ranges=(PriceRange("20:00", "08:00", 300), PriceRange("08:00", "20:00", 600)),
    owner_user_id=20,
    source="catalog",
)

PLAYERS = {"teamName": "Strikers", "playerCount": 10, "contactPerson": {"name": "Asha", "phone": "9999999999"}}


def future_day(days=7):
    return (date.today() + timedelta(days=days)).isoformat()


@pytest.fixture
def service():
    """Lifecycle manager over the in-memory store and a two-ground catalog."""
    return BookingService(
        CatalogFacilityRepository([FLAT, RANGED]),
        InMemoryBookingStore(),
        today=lambda: TODAY,
    )


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        seed_roles()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(email, *roles):
        user = User(email=email)
        user.roles = [Role.query.filter_by(name=r).one() for r in (roles or ("PLAYER",))]
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_session(user.id)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_ground(app):
    def _make(owner=None, **kwargs):
        kwargs.setdefault("name", "Central Turf")
        ground = Ground(owner_user_id=owner.id if owner else None, **kwargs)
        db.session.add(ground)
        db.session.commit()
        return ground
    return _make
