"""Fake renderer that records calls and returns a predictable path."""

from billing.customers.port import CustomerProfile
from billing.documents.port import InvoiceRenderer
from billing.shared.errors import CollaboratorError


class FakeInvoiceRenderer(InvoiceRenderer):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool = True) -> None:
        self.should_succeed = should_succeed

    def render_invoice(self, invoice, customer: CustomerProfile | None) -> str:
        self.calls.append(
            {
                "invoice_id": str(invoice.id),
                "status": invoice.status,
                "invoice_number": invoice.invoice_number,
                "customer_name": customer.display_name if customer else None,
            }
        )
        if not self.should_succeed:
            raise CollaboratorError("documents", "renderer failed")
        return f"fake/{invoice.organization_id}/{invoice.id}.pdf"
