from pydantic import BaseModel, BeforeValidator
from typing import Annotated, List, Optional
from fleethire.core.enums import PricingRuleType


def _id_as_str(value):
    return None if value is None else str(value)


def _none_as_zero(value):
    return 0.0 if value is None else value


RecordId = Annotated[str, BeforeValidator(_id_as_str)]
Amount = Annotated[float, BeforeValidator(_none_as_zero)]


class PricingTiers(BaseModel):
    tier_1_14_days: Optional[float] = None
    tier_15_29_days: Optional[float] = None
    tier_30_178_days: Optional[float] = None
    tier_179_363_days: Optional[float] = None
    tier_364_plus_days: Optional[float] = None


class VehicleType(BaseModel):
    id: Optional[RecordId] = None
    name: str
    daily_rate: Optional[float] = None
    pricing_tiers: Optional[PricingTiers] = None
    active: bool = True


class Location(BaseModel):
    id: Optional[RecordId] = None
    name: str
    transport_fee: Amount = 0.0
    active: bool = True


class PricingRule(BaseModel):
    id: RecordId
    name: str
    type: PricingRuleType
    daily_rate_adjustment: Amount = 0.0
    one_time_fee: Amount = 0.0
    active: bool = True

    @property
    def is_one_time(self) -> bool:
        return self.one_time_fee > 0


class Catalog(BaseModel):
    """Read-only snapshot of the active vehicle types, locations and pricing rules."""

    vehicle_types: List[VehicleType] = []
    locations: List[Location] = []
    pricing_rules: List[PricingRule] = []

    @classmethod
    def from_records(cls, vehicle_types: list, locations: list, pricing_rules: list) -> "Catalog":
        # non-dict records are left for validation to reject
        def active(records):
            return [r for r in records if not isinstance(r, dict) or r.get("active", True)]

        return cls(
            vehicle_types=active(vehicle_types),
            locations=active(locations),
            pricing_rules=active(pricing_rules),
        )

    def vehicle(self, name: Optional[str]) -> Optional[VehicleType]:
        return next((v for v in self.vehicle_types if v.name == name), None)

    def location(self, name: Optional[str]) -> Optional[Location]:
        return next((l for l in self.locations if l.name == name), None)

    def rule(self, rule_id: Optional[str], rule_type: Optional[PricingRuleType] = None) -> Optional[PricingRule]:
        for rule in self.pricing_rules:
            if rule.id == rule_id and (rule_type is None or rule.type == rule_type):
                return rule
        return None

    def rules_of(self, rule_type: PricingRuleType) -> List[PricingRule]:
        return [r for r in self.pricing_rules if r.type == rule_type]

    @property
    def insurance_options(self) -> List[PricingRule]:
        return self.rules_of(PricingRuleType.INSURANCE)

    @property
    def km_options(self) -> List[PricingRule]:
        return self.rules_of(PricingRuleType.KM_ALLOWANCE)

    @property
    def requirement_options(self) -> List[PricingRule]:
        return self.rules_of(PricingRuleType.ADDITIONAL_SERVICE)

    def default_insurance(self) -> Optional[PricingRule]:
        return next((r for r in self.insurance_options if "default" in r.name.lower()), None)


class CatalogOptions(BaseModel):
    vehicle_types: List[VehicleType]
    locations: List[Location]
    insurance_options: List[PricingRule]
    km_options: List[PricingRule]
    requirement_options: List[PricingRule]
    how_heard_options: List[str]
