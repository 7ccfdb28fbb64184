"""CRM estimate conversion: command and handler.

An accepted estimate becomes a draft CRM invoice that points back at the
estimate. Stock is checked before anything is saved, and the decrement is
queued in the same unit of work as the invoice.
"""

import structlog
from protean import handle
from protean.fields import Date, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice, SourceSystem
from billing.invoice.lines import resolve_item_lines
from billing.shared.payload import parse_json
from billing.stock.adjustment import TransactionType
from billing.stock.availability import ensure_stock_available
from billing.stock.dispatch import queue_stock_adjustment

logger = structlog.get_logger(__name__)


@billing.command(part_of="Invoice")
class ConvertEstimateToInvoice:
    organization_id = Identifier(required=True)
    estimate_id = String(required=True, max_length=255)
    customer_id = Identifier(required=True)
    contact_id = Identifier()
    subject = String(max_length=255)
    invoice_date = Date()
    due_date = Date()
    currency = String(max_length=3, default="USD")
    adjustment = Float(default=0.0)
    terms = Text()
    notes = Text()
    billing_address = Text()  # JSON: address dict
    shipping_address = Text()  # JSON: address dict
    items = Text(required=True)  # JSON: estimate lines


def estimate_lines(lines: list[dict] | None) -> list[dict]:
    """Estimate lines carry their label in ``description``; use it as the name."""
    return [{**line, "name": line.get("name") or line.get("description")} for line in lines or []]


@billing.command_handler(part_of=Invoice)
class ConvertEstimateHandler:
    @handle(ConvertEstimateToInvoice)
    def convert_estimate(self, command: ConvertEstimateToInvoice):
        items_data = resolve_item_lines(estimate_lines(parse_json(command.items, default=[])))
        ensure_stock_available(items_data)

        invoice = Invoice.create(
            organization_id=command.organization_id,
            customer_id=command.customer_id,
            subject=command.subject or f"Invoice for Estimate {command.estimate_id}",
            items_data=items_data,
            source_system=SourceSystem.CRM.value,
            billing_address=parse_json(command.billing_address),
            shipping_address=parse_json(command.shipping_address),
            source_reference_id=command.estimate_id,
            contact_id=command.contact_id,
            invoice_date=command.invoice_date,
            due_date=command.due_date,
            currency=command.currency,
            adjustment=command.adjustment,
            terms=command.terms,
            notes=command.notes,
        )
        current_domain.repository_for(Invoice).add(invoice)
        queue_stock_adjustment(
            organization_id=str(invoice.organization_id),
            transaction_type=TransactionType.SALES,
            reference_type="invoice",
            reference_id=str(invoice.id),
            notes=f"Converted from Estimate {command.estimate_id}",
            lines=[(item.item_id, item.quantity) for item in invoice.sorted_items()],
        )
        logger.info(
            "Estimate converted to invoice",
            estimate_id=command.estimate_id,
            invoice_id=str(invoice.id),
            organization_id=str(invoice.organization_id),
            total_amount=invoice.total_amount,
        )
        return str(invoice.id)
