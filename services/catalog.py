"""Facility lookup across the grounds table and the static fallback catalog.

Both sources are normalized into the same ``Facility`` shape so pricing and
booking code never care where a ground came from.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from services.errors import NotFound, ValidationError
from services.timeslots import normalize_time

logger = logging.getLogger(__name__)

STORE_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


@dataclass(frozen=True)
class PriceRange:
    start: str
    end: str
    per_hour: float


@dataclass(frozen=True)
class Facility:
    id: str
    name: str
    location: Optional[str] = None
    per_hour: Optional[float] = None
    ranges: Tuple[PriceRange, ...] = ()
    discount: float = 0
    currency: str = "INR"
    owner_user_id: Optional[int] = None
    source: str = "store"

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "price": {
                "perHour": self.per_hour,
                "ranges": [
                    {"start": r.start, "end": r.end, "perHour": r.per_hour}
                    for r in self.ranges
                ],
                "discount": self.discount,
            },
            "currency": self.currency,
        }


def is_store_id(facility_id) -> bool:
    return isinstance(facility_id, str) and STORE_ID_RE.match(facility_id) is not None


def parse_ranges(raw) -> Tuple[PriceRange, ...]:
    if not raw:
        return ()
    if not isinstance(raw, list):
        raise ValidationError("price ranges must be a list")
    ranges = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("each price range must be an object")
        per_hour = item.get("perHour")
        if isinstance(per_hour, bool) or not isinstance(per_hour, (int, float)) or per_hour < 0:
            raise ValidationError("price range perHour must be a non-negative number")
        start = normalize_time(item.get("start"), "price range start")
        end = normalize_time(item.get("end"), "price range end")
        # ranges may wrap past midnight, e.g. 20:00-08:00
        ranges.append(PriceRange(start=start, end=end, per_hour=per_hour))
    return tuple(ranges)


def facility_from_ground(ground) -> Facility:
    return Facility(
        id=ground.id,
        name=ground.name,
        location=ground.location,
        per_hour=ground.price_per_hour,
        ranges=parse_ranges(ground.price_ranges),
        discount=ground.discount or 0,
        currency=ground.currency or "INR",
        owner_user_id=ground.owner_user_id,
        source="store",
    )


def facility_from_document(doc: dict, default_currency: str = "INR") -> Facility:
    """Normalize a catalog entry ({"_id", "name", "price": {...}, "owner": {...}})."""
    price = doc.get("price") or {}
    location = doc.get("location")
    if isinstance(location, dict):
        location = location.get("address") or location.get("city")
    owner = doc.get("owner") or {}
    return Facility(
        id=str(doc.get("_id") or doc.get("id")),
        name=doc.get("name") or "Unknown Ground",
        location=location,
        per_hour=price.get("perHour"),
        ranges=parse_ranges(price.get("ranges")),
        discount=price.get("discount") or 0,
        currency=doc.get("currency") or default_currency,
        owner_user_id=owner.get("userId"),
        source="catalog",
    )


class FacilityRepository:
    """Read-only facility source."""

    def get(self, facility_id: str) -> Optional[Facility]:
        raise NotImplementedError

    def list_owned_by(self, owner_id) -> List[Facility]:
        raise NotImplementedError


class SqlFacilityRepository(FacilityRepository):
    """Active rows of the ``grounds`` table; only answers store-shaped ids."""

    def get(self, facility_id):
        from models.ground import Ground

        if not is_store_id(facility_id):
            return None
        ground = Ground.query.filter_by(id=facility_id.lower(), is_active=True).first()
        return facility_from_ground(ground) if ground else None

    def list_owned_by(self, owner_id):
        from models.ground import Ground

        rows = Ground.query.filter_by(owner_user_id=owner_id, is_active=True).all()
        return [facility_from_ground(g) for g in rows]


class CatalogFacilityRepository(FacilityRepository):
    def __init__(self, facilities: Iterable[Facility] = ()):
        self._facilities = {f.id: f for f in facilities}

    @classmethod
    def from_file(cls, path: Optional[str], default_currency: str = "INR"):
        if not path:
            return cls()
        try:
            with open(path, encoding="utf-8") as fh:
                docs = json.load(fh)
        except FileNotFoundError:
            logger.warning("Fallback catalog %s not found, starting empty", path)
            return cls()
        return cls(facility_from_document(d, default_currency) for d in docs)

    def get(self, facility_id):
        return self._facilities.get(facility_id)

    def list_owned_by(self, owner_id):
        return [f for f in self._facilities.values() if f.owner_user_id is not None and f.owner_user_id == owner_id]

    def __len__(self):
        return len(self._facilities)


class ChainedFacilityRepository(FacilityRepository):
    """Tries each repository in order; first hit wins."""

    def __init__(self, *repositories: FacilityRepository):
        self.repositories = repositories

    def get(self, facility_id):
        for repo in self.repositories:
            facility = repo.get(facility_id)
            if facility is not None:
                return facility
        return None

    def list_owned_by(self, owner_id):
        seen = {}
        for repo in self.repositories:
            for facility in repo.list_owned_by(owner_id):
                seen.setdefault(facility.id, facility)
        return list(seen.values())


def resolve(repository: FacilityRepository, facility_id: str) -> Facility:
    facility = repository.get(facility_id)
    if facility is None:
        raise NotFound("Ground not found")
    return facility
