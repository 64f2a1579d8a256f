from typing import Iterable
from fleethire.schemas.quote import LineItem, Totals

TAX_RATE = 0.10  # GST


def calculate_totals(line_items: Iterable[LineItem], tax_rate: float = TAX_RATE) -> Totals:
    subtotal = sum(item.total for item in line_items)
    tax = subtotal * tax_rate
    return Totals(subtotal=subtotal, tax=tax, total=subtotal + tax)
