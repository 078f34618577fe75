"""Parsing of requested time slots ("HH:MM-HH:MM" or a startTime/endTime mapping)."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from services.errors import ValidationError

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

HOURS_PLACES = Decimal("0.01")

# Durations are measured on a fixed day so only wall-clock time matters.
_REFERENCE_DAY = datetime(2000, 1, 1)


@dataclass(frozen=True)
class TimeSlot:
    start_time: str
    end_time: str
    duration: Optional[Decimal] = None


def normalize_time(value, field: str = "time") -> str:
    """Accept "H:MM" or "HH:MM" and return zero-padded "HH:MM"."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a HH:MM string")
    value = value.strip()
    if len(value) == 4 and value[1] == ":":
        value = "0" + value
    if not _TIME_RE.match(value):
        raise ValidationError(f"{field} must be a HH:MM string")
    return value


def wall_clock_hours(start_time: str, end_time: str) -> Decimal:
    start = datetime.combine(_REFERENCE_DAY, datetime.strptime(start_time, "%H:%M").time())
    end = datetime.combine(_REFERENCE_DAY, datetime.strptime(end_time, "%H:%M").time())
    if end < start:
        # overnight slot, e.g. 22:00-01:00
        end += timedelta(days=1)
    minutes = int((end - start).total_seconds() // 60)
    # exact; rounded only when stored or displayed
    return Decimal(minutes) / Decimal(60)


def rounded_hours(value) -> Decimal:
    return Decimal(value).quantize(HOURS_PLACES, rounding=ROUND_HALF_UP)


def parse_time_slot(raw) -> TimeSlot:
    if isinstance(raw, str):
        parts = raw.split("-")
        if len(parts) != 2:
            raise ValidationError("timeSlot must look like HH:MM-HH:MM")
        start_time = normalize_time(parts[0], "timeSlot start")
        end_time = normalize_time(parts[1], "timeSlot end")
        explicit = None
    elif isinstance(raw, dict):
        start_time = normalize_time(raw.get("startTime"), "timeSlot.startTime")
        end_time = normalize_time(raw.get("endTime"), "timeSlot.endTime")
        explicit = raw.get("duration")
    else:
        raise ValidationError("timeSlot must be a HH:MM-HH:MM string or an object")

    if start_time == end_time:
        raise ValidationError("timeSlot start and end must differ")

    duration = wall_clock_hours(start_time, end_time)
    if explicit not in (None, ""):
        try:
            explicit = Decimal(str(explicit))
        except ArithmeticError:
            raise ValidationError("timeSlot.duration must be a number")
        if not explicit.is_finite() or explicit <= 0:
            raise ValidationError("timeSlot.duration must be positive")
        # the stated duration may only echo the slot's own length
        if rounded_hours(explicit) != rounded_hours(duration):
            raise ValidationError("timeSlot.duration does not match startTime/endTime")

    return TimeSlot(start_time=start_time, end_time=end_time, duration=duration)
