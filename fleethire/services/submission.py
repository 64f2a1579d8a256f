import random
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from fleethire.core.config import settings
from fleethire.core.enums import QuoteStatus
from fleethire.core.errors import QuoteValidationError
from fleethire.schemas.quote import QuoteDraft, QuoteRecord
from fleethire.services.duration import parse_time
from fleethire.services.totals import calculate_totals

REQUIRED_FIELDS = (
    ("customer_name", "Customer name"),
    ("customer_email", "Customer email"),
    ("vehicle_category", "Vehicle category"),
    ("pickup_date", "Pickup date"),
    ("dropoff_date", "Dropoff date"),
)

RECORD_DRAFT_FIELDS = {
    "customer_name",
    "customer_email",
    "vehicle_category",
    "hire_duration_days",
    "pickup_date",
    "pickup_time",
    "dropoff_date",
    "dropoff_time",
    "pickup_location",
    "dropoff_location",
    "selected_insurance_rule_id",
    "selected_requirement_rule_ids",
    "how_heard",
    "notes",
}


def submission_errors(draft: QuoteDraft) -> List[str]:
    errors = [f"{label} is required" for field, label in REQUIRED_FIELDS if not getattr(draft, field)]

    if draft.pickup_date and draft.dropoff_date:
        pickup = datetime.combine(draft.pickup_date, parse_time(draft.pickup_time))
        dropoff = datetime.combine(draft.dropoff_date, parse_time(draft.dropoff_time))
        if dropoff < pickup:
            errors.append("Dropoff must not be earlier than pickup")

    return errors


def validate_for_submission(draft: QuoteDraft) -> None:
    errors = submission_errors(draft)
    if errors:
        raise QuoteValidationError(errors)


def generate_quote_number(now: Optional[datetime] = None, rng: random.Random = None) -> str:
    """``QUO-<last 6 digits of the epoch-ms timestamp>-<3-digit random>``"""
    now = now or datetime.now(timezone.utc)
    rng = rng or random
    timestamp = str(int(now.timestamp() * 1000))[-6:]
    return f"QUO-{timestamp}-{rng.randint(0, 999):03d}"


def valid_until(created: date, validity_days: int = settings.QUOTE_VALIDITY_DAYS) -> date:
    return created + timedelta(days=validity_days)


def build_quote_record(
    draft: QuoteDraft,
    now: Optional[datetime] = None,
    quote_number: Optional[str] = None,
) -> QuoteRecord:
    now = now or datetime.now(timezone.utc)
    totals = calculate_totals(draft.line_items)

    return QuoteRecord(
        quote_number=quote_number or generate_quote_number(now),
        **draft.model_dump(include=RECORD_DRAFT_FIELDS),
        estimated_kms=draft.selected_km_option_name,
        line_items=draft.line_items,
        subtotal=totals.subtotal,
        tax=totals.tax,
        total=totals.total,
        valid_until=valid_until(now.date()),
        status=QuoteStatus.SENT,
        quote_sent_date=now,
    )
