from enum import Enum


class PricingRuleType(str, Enum):
    INSURANCE = "insurance"
    KM_ALLOWANCE = "km_allowance"
    ADDITIONAL_SERVICE = "additional_service"
    LOCATION_SURCHARGE = "location_surcharge"

    def __str__(self):
        return self.value


class LineItemKind(str, Enum):
    VEHICLE = "vehicle"
    INSURANCE = "insurance"
    REQUIREMENT = "requirement"
    TRANSPORT_FEE = "transport_fee"

    def __str__(self):
        return self.value


class LocationRole(str, Enum):
    PICKUP = "pickup"
    DROPOFF = "dropoff"

    def __str__(self):
        return self.value


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    EXPIRED = "expired"

    def __str__(self):
        return self.value


HOW_HEARD_OPTIONS = (
    "Repeat Customer",
    "You received an email from us",
    "Vehicle Sign Writing / Advertising",
    "Internet Search",
    "Word of Mouth",
    "Other",
)
