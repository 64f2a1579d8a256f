"""Typed events accepted by the quote draft reducer.

Every event carries a literal ``type`` so a list of mixed events can be
parsed from JSON without extra hints.
"""
from datetime import date
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from fleethire.core.enums import LocationRole

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class SetVehicle(BaseModel):
    type: Literal["set_vehicle"] = "set_vehicle"
    category: Optional[str] = None


class SetDuration(BaseModel):
    type: Literal["set_duration"] = "set_duration"
    days: int = Field(ge=1)


class SetSchedule(BaseModel):
    """Partial update: only the fields present in the payload are applied."""
    type: Literal["set_schedule"] = "set_schedule"
    pickup_date: Optional[date] = None
    pickup_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    dropoff_date: Optional[date] = None
    dropoff_time: Optional[str] = Field(None, pattern=TIME_PATTERN)


class SetLocation(BaseModel):
    type: Literal["set_location"] = "set_location"
    role: LocationRole
    location: Optional[str] = None


class SetInsurance(BaseModel):
    type: Literal["set_insurance"] = "set_insurance"
    rule_id: Optional[str] = None


class ToggleRequirement(BaseModel):
    type: Literal["toggle_requirement"] = "toggle_requirement"
    rule_id: str
    checked: bool = True


class SetKmOption(BaseModel):
    type: Literal["set_km_option"] = "set_km_option"
    name: Optional[str] = None


class SetCustomer(BaseModel):
    type: Literal["set_customer"] = "set_customer"
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None


class SetDetails(BaseModel):
    type: Literal["set_details"] = "set_details"
    notes: Optional[str] = None
    how_heard: Optional[str] = None


QuoteEvent = Annotated[
    Union[
        SetVehicle,
        SetDuration,
        SetSchedule,
        SetLocation,
        SetInsurance,
        ToggleRequirement,
        SetKmOption,
        SetCustomer,
        SetDetails,
    ],
    Field(discriminator="type"),
]


class EventRequest(BaseModel):
    event: QuoteEvent


class QuoteCalcRequest(BaseModel):
    events: List[QuoteEvent] = []
