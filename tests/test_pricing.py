from decimal import Decimal

from services.catalog import Facility, PriceRange
from services.pricing import compute_pricing, select_rate, to_number
from services.timeslots import TimeSlot, parse_time_slot

RANGES = (PriceRange("20:00", "08:00", 300), PriceRange("08:00", "20:00", 600))


def test_flat_default_rate_one_hour():
    ground = Facility(id="g", name="G")
    pricing = compute_pricing(ground, parse_time_slot("14:00-15:00"))

    assert pricing.as_dict() == {
        "baseAmount": 500,
        "discount": 0,
        "convenienceFee": 10,
        "totalAmount": 510,
        "currency": "INR",
    }


def test_flat_rate_scales_with_duration():
    ground = Facility(id="g", name="G", per_hour=800)
    pricing = compute_pricing(ground, parse_time_slot("18:00-20:00"))

    assert pricing.base_amount == 1600
    assert pricing.convenience_fee == 32
    assert pricing.total_amount == 1632


def test_duration_defaults_to_one_hour_without_explicit_duration():
    ground = Facility(id="g", name="G", per_hour=700)
    pricing = compute_pricing(ground, TimeSlot("10:00", "13:00"))

    assert pricing.duration == 1
    assert pricing.base_amount == 700


def test_range_exact_start_match():
    ground = Facility(id="g", name="G", ranges=RANGES)
    assert select_rate(ground, "08:00") == 600
    assert select_rate(ground, "20:00") == 300


def test_range_without_exact_match_uses_first_range():
    ground = Facility(id="g", name="G", ranges=RANGES, per_hour=999)

    pricing = compute_pricing(ground, parse_time_slot("09:00-10:00"))

    assert pricing.base_amount == 300
    assert pricing.total_amount == 306


def test_discount_and_fee():
    ground = Facility(id="g", name="G", per_hour=1000, discount=100)
    pricing = compute_pricing(ground, parse_time_slot("06:00-07:00"))

    assert pricing.discount == 100
    assert pricing.convenience_fee == 18
    assert pricing.total_amount == 918
    assert pricing.total_amount == pricing.base_amount - pricing.discount + pricing.convenience_fee


def test_discount_larger_than_base_is_clamped():
    ground = Facility(id="g", name="G", per_hour=200, discount=500)
    pricing = compute_pricing(ground, parse_time_slot("06:00-07:00"))

    assert pricing.discount == 200
    assert pricing.convenience_fee == 0
    assert pricing.total_amount == 0


def test_fee_rounds_half_up():
    ground = Facility(id="g", name="G", per_hour=625)
    pricing = compute_pricing(ground, parse_time_slot("06:00-07:00"))

    # 2% of 625 is 12.5
    assert pricing.convenience_fee == 13
    assert pricing.total_amount == 638


def test_fractional_duration():
    ground = Facility(id="g", name="G", per_hour=600)
    pricing = compute_pricing(ground, parse_time_slot("17:00-18:30"))

    assert pricing.base_amount == 900
    assert pricing.as_dict()["totalAmount"] == 918


def test_custom_fee_rate_and_currency():
    ground = Facility(id="g", name="G", per_hour=1000, currency="NPR")
    pricing = compute_pricing(ground, parse_time_slot("06:00-07:00"), fee_rate=Decimal("0.05"))

    assert pricing.convenience_fee == 50
    assert pricing.currency == "NPR"


def test_pricing_is_deterministic():
    ground = Facility(id="g", name="G", ranges=RANGES, discount=25)
    slot = parse_time_slot("20:00-23:00")

    assert compute_pricing(ground, slot) == compute_pricing(ground, slot)


def test_to_number():
    assert to_number(Decimal("510.00")) == 510
    assert isinstance(to_number(Decimal("510.00")), int)
    assert to_number(Decimal("1.5")) == 1.5
    assert to_number(None) is None


def test_partial_hours_are_priced_from_exact_minutes():
    ground = Facility(id="g", name="G", per_hour=500)
    pricing = compute_pricing(ground, parse_time_slot("10:00-10:20"))

    # 500 * 20/60, not 500 * 0.33
    assert pricing.base_amount == Decimal("166.67")
    assert pricing.convenience_fee == 3
    assert pricing.total_amount == Decimal("169.67")
    assert pricing.as_dict()["baseAmount"] == 166.67
