"""Tests for per-organization document numbering."""

from datetime import date

from billing.numbering.sequence import DocumentKind, NumberSequence, next_number
from protean import current_domain


class TestNextNumber:
    def test_invoice_numbers_are_yearly(self):
        today = date(2024, 3, 15)
        assert next_number("org-001", DocumentKind.INVOICE, today=today) == "INV-2024-0001"
        assert next_number("org-001", DocumentKind.INVOICE, today=today) == "INV-2024-0002"
        assert next_number("org-001", DocumentKind.INVOICE, today=date(2025, 1, 1)) == "INV-2025-0001"

    def test_order_and_return_numbers_are_daily(self):
        today = date(2024, 3, 15)
        assert next_number("org-001", DocumentKind.SALES_ORDER, today=today) == "SO-20240315-0001"
        assert next_number("org-001", DocumentKind.SALES_ORDER, today=date(2024, 3, 16)) == "SO-20240316-0001"
        assert next_number("org-001", DocumentKind.SALES_RETURN, today=today) == "RMA-20240315-0001"

    def test_organizations_do_not_share_counters(self):
        today = date(2024, 3, 15)
        next_number("org-001", DocumentKind.INVOICE, today=today)
        assert next_number("org-002", DocumentKind.INVOICE, today=today) == "INV-2024-0001"

    def test_counter_is_persisted(self):
        next_number("org-001", DocumentKind.INVOICE, today=date(2024, 3, 15))
        sequence = current_domain.repository_for(NumberSequence).get("org-001:INV:2024")
        assert sequence.last_value == 1
