"""Booking price computation.

``compute_pricing`` is a pure function of the facility's pricing configuration
and the requested slot, so a retried request always yields the same breakdown.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

DEFAULT_PER_HOUR = 500
DEFAULT_FEE_RATE = Decimal("0.02")

_WHOLE = Decimal("1")
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PricingBreakdown:
    base_amount: Decimal
    discount: Decimal
    convenience_fee: Decimal
    total_amount: Decimal
    currency: str
    duration: Decimal

    def as_dict(self) -> dict:
        return {
            "baseAmount": to_number(self.base_amount),
            "discount": to_number(self.discount),
            "convenienceFee": to_number(self.convenience_fee),
            "totalAmount": to_number(self.total_amount),
            "currency": self.currency,
        }


def to_number(value):
    """Decimal -> int when whole, float otherwise (JSON friendly)."""
    if value is None:
        return None
    value = Decimal(value)
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def select_rate(facility, start_time, default_per_hour=DEFAULT_PER_HOUR) -> Decimal:
    # Exact start match only; anything else falls back to the first range.
    if facility.ranges and start_time:
        for price_range in facility.ranges:
            if price_range.start == start_time:
                return Decimal(str(price_range.per_hour))
        return Decimal(str(facility.ranges[0].per_hour))
    if facility.per_hour:
        return Decimal(str(facility.per_hour))
    return Decimal(str(default_per_hour))


def compute_pricing(facility, slot, fee_rate=DEFAULT_FEE_RATE, default_per_hour=DEFAULT_PER_HOUR) -> PricingBreakdown:
    duration = Decimal(1)
    if slot is not None and slot.duration:
        duration = Decimal(slot.duration)

    rate = select_rate(facility, slot.start_time if slot else None, default_per_hour)
    base = (rate * duration).quantize(_CENTS, rounding=ROUND_HALF_UP)

    # clamp so a large facility discount never yields a negative total
    discount = Decimal(str(facility.discount or 0))
    discount = min(max(discount, Decimal(0)), base)

    discounted = base - discount
    fee = (Decimal(str(fee_rate)) * discounted).quantize(_WHOLE, rounding=ROUND_HALF_UP)

    return PricingBreakdown(
        base_amount=base,
        discount=discount,
        convenience_fee=fee,
        total_amount=discounted + fee,
        currency=facility.currency,
        duration=duration,
    )
