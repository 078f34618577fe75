from decimal import Decimal

import pytest

from services.errors import ValidationError
from services.timeslots import normalize_time, parse_time_slot, rounded_hours, wall_clock_hours


def test_parse_string_slot():
    slot = parse_time_slot("10:00-12:00")

    assert slot.start_time == "10:00"
    assert slot.end_time == "12:00"
    assert slot.duration == 2


def test_overnight_slot_has_positive_duration():
    assert parse_time_slot("22:00-01:00").duration == 3
    assert wall_clock_hours("20:00", "08:00") == 12


def test_single_digit_hours_are_padded():
    slot = parse_time_slot("9:00-10:30")

    assert slot.start_time == "09:00"
    assert slot.duration == Decimal("1.5")


def test_mapping_slot_with_matching_duration():
    slot = parse_time_slot({"startTime": "08:00", "endTime": "09:30", "duration": 1.5})

    assert slot.duration == Decimal("1.5")


@pytest.mark.parametrize("duration", [2, 0.01, "8"])
def test_mapping_slot_duration_must_match_times(duration):
    with pytest.raises(ValidationError):
        parse_time_slot({"startTime": "08:00", "endTime": "09:00", "duration": duration})


def test_rounded_duration_is_accepted():
    slot = parse_time_slot({"startTime": "10:00", "endTime": "10:20", "duration": "0.33"})

    assert slot.duration == Decimal(20) / Decimal(60)


def test_wall_clock_hours_is_exact():
    assert wall_clock_hours("10:00", "10:20") == Decimal(1) / Decimal(3)
    assert wall_clock_hours("10:00", "10:20") != Decimal("0.33")
    assert rounded_hours(wall_clock_hours("10:00", "10:20")) == Decimal("0.33")


def test_mapping_slot_derives_duration():
    slot = parse_time_slot({"startTime": "08:00", "endTime": "10:00"})

    assert slot.duration == 2


@pytest.mark.parametrize("raw", [
    "10:00",
    "10:00-12:00-13:00",
    "25:00-26:00",
    "ten-eleven",
    "10:00-10:00",
    {"startTime": "08:00"},
    {"startTime": "08:00", "endTime": "09:00", "duration": -1},
    {"startTime": "08:00", "endTime": "09:00", "duration": "abc"},
    42,
])
def test_invalid_slots(raw):
    with pytest.raises(ValidationError):
        parse_time_slot(raw)


def test_normalize_time_rejects_non_strings():
    with pytest.raises(ValidationError):
        normalize_time(800)
