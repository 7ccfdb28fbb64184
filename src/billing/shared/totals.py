"""Line-item totals shared by invoices and sales orders.

These are the only functions that derive monetary totals. Aggregates call
them after every change to their item collections.
"""

from dataclasses import dataclass

# Payments may overshoot the outstanding balance by at most this amount.
PAYMENT_TOLERANCE = 0.01


def money(value: float | None) -> float:
    """Round an amount to whole cents."""
    return round(float(value or 0.0), 2)


def line_total(quantity: float, unit_price: float, discount: float = 0.0, tax: float = 0.0) -> float:
    """Total of a single line: ``quantity * unit_price - discount + tax``."""
    return money((quantity or 0.0) * (unit_price or 0.0) - (discount or 0.0) + (tax or 0.0))


@dataclass(frozen=True)
class LineSummary:
    """Aggregated amounts over a collection of lines."""

    sub_total: float = 0.0
    discount_total: float = 0.0
    tax_total: float = 0.0


def summarize_lines(lines) -> LineSummary:
    """Sum gross amount, discount and tax over objects exposing
    ``quantity``, ``unit_price``, ``discount`` and ``tax``."""
    sub_total = 0.0
    discount_total = 0.0
    tax_total = 0.0
    for line in lines:
        sub_total += (line.quantity or 0.0) * (line.unit_price or 0.0)
        discount_total += line.discount or 0.0
        tax_total += line.tax or 0.0
    return LineSummary(
        sub_total=money(sub_total),
        discount_total=money(discount_total),
        tax_total=money(tax_total),
    )
