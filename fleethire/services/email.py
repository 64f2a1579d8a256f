from html import escape
from typing import Optional
from urllib.parse import quote

from fleethire.core.config import settings
from fleethire.schemas.quote import QuoteEmail, QuoteRecord


def _format_date(value) -> str:
    return value.strftime("%d %B %Y")


def _summary_rows(record: QuoteRecord) -> str:
    rows = [
        ("Vehicle Type", record.vehicle_category or ""),
        ("Duration", f"{record.hire_duration_days} days"),
    ]
    if record.pickup_date:
        rows.append(("Pickup Date", f"{_format_date(record.pickup_date)} at {record.pickup_time}"))
    if record.dropoff_date:
        rows.append(("Dropoff Date", f"{_format_date(record.dropoff_date)} at {record.dropoff_time}"))
    if record.pickup_location:
        rows.append(("Pickup Location", record.pickup_location))
    if record.dropoff_location:
        rows.append(("Dropoff Location", record.dropoff_location))

    return "\n".join(
        f'<tr><td style="padding: 8px 0;"><strong>{label}:</strong></td>'
        f'<td style="text-align: right;">{escape(value)}</td></tr>'
        for label, value in rows
    )


def _line_item_rows(record: QuoteRecord) -> str:
    return "\n".join(
        f'<div style="display: flex; justify-content: space-between; padding: 5px 0;">'
        f"<span>{escape(item.description)} (x{item.quantity})</span>"
        f"<span>${item.total:.2f}</span></div>"
        for item in record.line_items
    )


def build_quote_email(record: QuoteRecord, quote_id: Optional[str] = None) -> QuoteEmail:
    """Customer-facing HTML quote, with an accept link once the quote has been saved."""
    accept_button = ""
    if quote_id:
        accept_url = f"{settings.ACCEPT_QUOTE_URL}?id={quote(str(quote_id))}"
        accept_button = (
            f'<div style="text-align: center; margin: 30px 0;">'
            f'<a href="{escape(accept_url)}" style="padding: 15px 30px; font-weight: bold;">ACCEPT QUOTE</a>'
            f"</div>"
        )

    notes = f"<br><br><strong>Additional Notes:</strong> {escape(record.notes)}" if record.notes else ""

    body = f"""\
<div style="max-width: 600px; margin: 0 auto; font-family: Arial, sans-serif;">
<h1>{escape(settings.QUOTE_BRAND)} Quote</h1>
<p>Quote #{record.quote_number}</p>
<p>Dear {escape(record.customer_name)},</p>
<p>Thank you for your interest in our vehicle hire services. Please find your quote details below:</p>
<h3>Quote Summary</h3>
<table style="width: 100%; border-collapse: collapse;"><tbody>
{_summary_rows(record)}
</tbody></table>
<h4>Line Items</h4>
{_line_item_rows(record)}
<hr>
<div style="display: flex; justify-content: space-between; font-weight: bold;">
<span>Total (inc. GST)</span><span>${record.total:.2f}</span>
</div>
{accept_button}
<p>This quote is valid until {_format_date(record.valid_until)}.{notes}</p>
<p>All vehicles are subject to availability. A reservation will be confirmed upon acceptance of this quote.</p>
</div>
"""

    return QuoteEmail(
        to=record.customer_email,
        subject=f"{settings.QUOTE_BRAND} Quote #{record.quote_number}",
        body=body,
        from_name=settings.EMAIL_FROM_NAME,
    )
