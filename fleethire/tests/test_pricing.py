import pytest

from fleethire.schemas.catalog import PricingTiers, VehicleType
from fleethire.services.pricing import resolve_daily_rate, tier_field_for


@pytest.fixture
def tiered_vehicle():
    return VehicleType(
        name="Hilux Dual Cab",
        daily_rate=120.0,
        pricing_tiers=PricingTiers(
            tier_1_14_days=100.0,
            tier_15_29_days=90.0,
            tier_30_178_days=80.0,
            tier_179_363_days=70.0,
            tier_364_plus_days=60.0,
        ),
    )


class TestRateTiers:
    """Tier boundaries are inclusive lower bounds"""

    @pytest.mark.parametrize("days,expected", [
        (1, 100.0),
        (14, 100.0),
        (15, 90.0),
        (29, 90.0),
        (30, 80.0),
        (178, 80.0),
        (179, 70.0),
        (363, 70.0),
        (364, 60.0),
        (1000, 60.0),
    ])
    def test_tier_boundaries(self, tiered_vehicle, days, expected):
        assert resolve_daily_rate(tiered_vehicle, days) == expected

    @pytest.mark.parametrize("days,field", [
        (14, "tier_1_14_days"),
        (15, "tier_15_29_days"),
        (30, "tier_30_178_days"),
        (179, "tier_179_363_days"),
        (364, "tier_364_plus_days"),
    ])
    def test_tier_field_for(self, days, field):
        assert tier_field_for(days) == field


class TestRateFallback:

    def test_no_vehicle(self):
        assert resolve_daily_rate(None, 5) is None

    def test_no_tier_table_uses_flat_rate(self):
        vehicle = VehicleType(name="Corolla Hatch", daily_rate=65.0)
        assert resolve_daily_rate(vehicle, 1) == 65.0
        assert resolve_daily_rate(vehicle, 400) == 65.0

    def test_zero_tier_uses_flat_rate(self, tiered_vehicle):
        tiers = tiered_vehicle.pricing_tiers.model_copy(update={"tier_15_29_days": 0.0})
        vehicle = tiered_vehicle.model_copy(update={"pricing_tiers": tiers})
        assert resolve_daily_rate(vehicle, 20) == 120.0
        assert resolve_daily_rate(vehicle, 10) == 100.0

    def test_missing_tier_uses_flat_rate(self):
        vehicle = VehicleType(
            name="Prado",
            daily_rate=150.0,
            pricing_tiers=PricingTiers(tier_1_14_days=140.0),
        )
        assert resolve_daily_rate(vehicle, 3) == 140.0
        assert resolve_daily_rate(vehicle, 45) == 150.0

    def test_no_rates_at_all(self):
        vehicle = VehicleType(name="Unpriced", pricing_tiers=PricingTiers())
        assert resolve_daily_rate(vehicle, 3) == 0.0
