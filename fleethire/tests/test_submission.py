import pytest
from datetime import date, datetime, timezone

from fleethire.core.enums import LocationRole, QuoteStatus
from fleethire.core.errors import QuoteValidationError
from fleethire.schemas.events import (
    SetCustomer,
    SetDetails,
    SetKmOption,
    SetLocation,
    SetSchedule,
    SetVehicle,
    ToggleRequirement,
)
from fleethire.schemas.quote import QuoteDraft
from fleethire.services.email import build_quote_email
from fleethire.services.ledger import apply_events, new_draft
from fleethire.services.submission import (
    build_quote_record,
    generate_quote_number,
    submission_errors,
    valid_until,
    validate_for_submission,
)

NOW = datetime(2026, 3, 1, 8, 30, 0, tzinfo=timezone.utc)


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def randint(self, a, b):
        return self.value


@pytest.fixture
def complete_draft(catalog):
    return apply_events(new_draft(catalog), [
        SetCustomer(customer_name="Jo Smith", customer_email="jo@example.com"),
        SetSchedule(
            pickup_date=date(2026, 3, 2), pickup_time="09:00",
            dropoff_date=date(2026, 3, 5), dropoff_time="09:00",
        ),
        SetVehicle(category="Hilux Dual Cab"),
        SetLocation(role=LocationRole.PICKUP, location="Karratha"),
        ToggleRequirement(rule_id="svc-clean", checked=True),
        SetKmOption(name="250 km/day"),
        SetDetails(notes="Site induction <required>", how_heard="Google Search"),
    ], catalog)


class TestSubmissionValidation:

    def test_complete_draft_passes(self, complete_draft):
        assert submission_errors(complete_draft) == []
        validate_for_submission(complete_draft)

    def test_empty_draft_lists_every_missing_field(self):
        errors = submission_errors(QuoteDraft())
        assert errors == [
            "Customer name is required",
            "Customer email is required",
            "Vehicle category is required",
            "Pickup date is required",
            "Dropoff date is required",
        ]

    def test_dropoff_before_pickup(self, complete_draft):
        draft = complete_draft.model_copy(update={"dropoff_date": date(2026, 3, 1)})
        with pytest.raises(QuoteValidationError) as exc:
            validate_for_submission(draft)
        assert exc.value.errors == ["Dropoff must not be earlier than pickup"]

    def test_same_day_earlier_time(self, complete_draft):
        draft = complete_draft.model_copy(update={
            "dropoff_date": date(2026, 3, 2),
            "dropoff_time": "08:00",
        })
        assert submission_errors(draft) == ["Dropoff must not be earlier than pickup"]

    def test_same_instant_is_allowed(self, complete_draft):
        draft = complete_draft.model_copy(update={"dropoff_date": date(2026, 3, 2)})
        assert submission_errors(draft) == []


class TestQuoteNumber:

    def test_format(self):
        number = generate_quote_number(NOW, FixedRandom(7))
        expected_stamp = str(int(NOW.timestamp()) * 1000)[-6:]
        assert number == f"QUO-{expected_stamp}-007"

    def test_random_suffix_is_padded(self):
        assert generate_quote_number(NOW, FixedRandom(42)).endswith("-042")
        assert generate_quote_number(NOW, FixedRandom(999)).endswith("-999")

    def test_default_clock(self):
        number = generate_quote_number()
        prefix, stamp, suffix = number.split("-")
        assert prefix == "QUO"
        assert len(stamp) == 6 and stamp.isdigit()
        assert len(suffix) == 3 and suffix.isdigit()


class TestQuoteRecord:

    def test_valid_until(self):
        assert valid_until(date(2026, 3, 1)) == date(2026, 3, 15)
        assert valid_until(date(2026, 3, 1), validity_days=30) == date(2026, 3, 31)

    def test_record_fields(self, complete_draft):
        record = build_quote_record(complete_draft, now=NOW, quote_number="QUO-123456-001")

        assert record.quote_number == "QUO-123456-001"
        assert record.customer_name == "Jo Smith"
        assert record.vehicle_category == "Hilux Dual Cab"
        assert record.hire_duration_days == 3
        assert record.estimated_kms == "250 km/day"
        assert record.selected_insurance_rule_id == "ins-default"
        assert record.selected_requirement_rule_ids == ["svc-clean"]
        assert record.how_heard == "Google Search"
        assert record.status == QuoteStatus.SENT
        assert record.quote_sent_date == NOW
        assert record.valid_until == date(2026, 3, 15)
        assert record.line_items == complete_draft.line_items

    def test_record_totals(self, complete_draft):
        record = build_quote_record(complete_draft, now=NOW)
        # vehicle 300 + default insurance 0 + transport 250 + clean 150
        assert record.subtotal == pytest.approx(700.0)
        assert record.tax == pytest.approx(70.0)
        assert record.total == pytest.approx(770.0)

    def test_generated_number(self, complete_draft):
        record = build_quote_record(complete_draft, now=NOW)
        assert record.quote_number.startswith("QUO-")


class TestQuoteEmail:

    def test_subject_and_recipient(self, complete_draft):
        record = build_quote_record(complete_draft, now=NOW, quote_number="QUO-123456-001")
        email = build_quote_email(record)
        assert email.to == "jo@example.com"
        assert email.subject == "WWFH Fleet Hire Quote #QUO-123456-001"
        assert email.from_name == "WWFH Fleet Services"

    def test_body_lists_items_and_total(self, complete_draft):
        record = build_quote_record(complete_draft, now=NOW)
        body = build_quote_email(record).body
        assert "Hilux Dual Cab (x3)" in body
        assert "$300.00" in body
        assert "Karratha Transport Fee (x1)" in body
        assert "Total (inc. GST)" in body
        assert "$770.00" in body
        assert "15 March 2026" in body

    def test_user_text_is_escaped(self, complete_draft):
        record = build_quote_record(complete_draft, now=NOW)
        body = build_quote_email(record).body
        assert "Site induction &lt;required&gt;" in body
        assert "<required>" not in body

    def test_accept_link_only_with_saved_id(self, complete_draft):
        record = build_quote_record(complete_draft, now=NOW)
        assert "ACCEPT QUOTE" not in build_quote_email(record).body

        body = build_quote_email(record, quote_id="42").body
        assert "ACCEPT QUOTE" in body
        assert "?id=42" in body
