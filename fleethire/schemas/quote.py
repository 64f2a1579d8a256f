from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import date, datetime

from fleethire.core.enums import LineItemKind, QuoteStatus
from fleethire.schemas.catalog import Catalog
from fleethire.schemas.events import TIME_PATTERN

DEFAULT_PICKUP_TIME = "09:00"
DEFAULT_DROPOFF_TIME = "17:00"


class LineItemCategory(BaseModel):
    """Ownership tag of a line item: which selection produced it."""
    model_config = ConfigDict(frozen=True)

    kind: LineItemKind
    ref: Optional[str] = None


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    quantity: int = Field(ge=1)
    unit_price: float
    total: float
    category: LineItemCategory


class QuoteDraft(BaseModel):
    customer_name: str = ""
    customer_email: str = ""
    pickup_date: Optional[date] = None
    pickup_time: str = Field(DEFAULT_PICKUP_TIME, pattern=TIME_PATTERN)
    dropoff_date: Optional[date] = None
    dropoff_time: str = Field(DEFAULT_DROPOFF_TIME, pattern=TIME_PATTERN)
    hire_duration_days: int = Field(1, ge=1)
    vehicle_category: Optional[str] = None
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    selected_insurance_rule_id: Optional[str] = None
    selected_km_option_name: Optional[str] = None
    selected_requirement_rule_ids: List[str] = []
    line_items: List[LineItem] = []
    notes: str = ""
    how_heard: str = ""


class Totals(BaseModel):
    subtotal: float
    tax: float
    total: float


class DraftSession(BaseModel):
    session_id: str
    draft: QuoteDraft
    catalog: Catalog
    created_at: datetime


class DraftOut(BaseModel):
    session_id: str
    draft: QuoteDraft
    totals: Totals


class QuoteCalcResponse(BaseModel):
    draft: QuoteDraft
    totals: Totals


class QuoteRecord(BaseModel):
    quote_number: str
    customer_name: str
    customer_email: str
    vehicle_category: Optional[str] = None
    hire_duration_days: int
    pickup_date: Optional[date] = None
    pickup_time: str
    dropoff_date: Optional[date] = None
    dropoff_time: str
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    selected_insurance_rule_id: Optional[str] = None
    selected_requirement_rule_ids: List[str] = []
    estimated_kms: Optional[str] = None
    how_heard: str = ""
    line_items: List[LineItem]
    subtotal: float
    tax: float
    total: float
    notes: str = ""
    valid_until: date
    status: QuoteStatus = QuoteStatus.SENT
    quote_sent_date: datetime


class QuoteEmail(BaseModel):
    to: str
    subject: str
    body: str
    from_name: str


class QuotePreviewOut(BaseModel):
    record: QuoteRecord
    email: QuoteEmail


class SubmitOut(BaseModel):
    quote_id: Optional[str] = None
    quote_number: str
    customer_email: str
    total: float
    valid_until: date
    status: QuoteStatus
