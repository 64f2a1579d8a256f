from typing import Optional
from fleethire.schemas.catalog import VehicleType

# (minimum days, tier field), evaluated from the top
RATE_TIERS = (
    (364, "tier_364_plus_days"),
    (179, "tier_179_363_days"),
    (30, "tier_30_178_days"),
    (15, "tier_15_29_days"),
    (1, "tier_1_14_days"),
)


def tier_field_for(days: int) -> str:
    for min_days, field in RATE_TIERS:
        if days >= min_days:
            return field
    return RATE_TIERS[-1][1]


def resolve_daily_rate(vehicle: Optional[VehicleType], days: int) -> Optional[float]:
    """Daily rate of ``vehicle`` for a hire of ``days`` days.

    Falls back to the flat ``daily_rate`` when the vehicle has no tier table
    or the matching tier is absent or zero. Returns None without a vehicle.
    """
    if vehicle is None:
        return None

    flat_rate = vehicle.daily_rate or 0.0
    if vehicle.pricing_tiers is None:
        return flat_rate

    tier_rate = getattr(vehicle.pricing_tiers, tier_field_for(days))
    return tier_rate or flat_rate
