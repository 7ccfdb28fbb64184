"""Invoice creation: command and handler."""

import structlog
from protean import handle
from protean.fields import Date, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice, SourceSystem
from billing.invoice.lines import resolve_item_lines
from billing.shared.payload import parse_json

logger = structlog.get_logger(__name__)


@billing.command(part_of="Invoice")
class CreateInvoice:
    organization_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    contact_id = Identifier()
    owner_id = Identifier()
    subject = String(required=True, max_length=255)
    source_system = String(max_length=20, default=SourceSystem.MANUAL.value)
    source_reference_id = String(max_length=255)
    sales_order_id = Identifier()
    reference_no = String(max_length=100)
    sales_order = String(max_length=100)
    purchase_order = String(max_length=100)
    invoice_date = Date()
    due_date = Date()
    currency = String(max_length=3, default="USD")
    adjustment = Float(default=0.0)
    excise_duty = Float(default=0.0)
    sales_commission = Float(default=0.0)
    tds_amount = Float(default=0.0)
    tcs_amount = Float(default=0.0)
    terms = Text()
    notes = Text()
    billing_address = Text()  # JSON: address dict
    shipping_address = Text()  # JSON: address dict
    items = Text(required=True)  # JSON: list of line dicts


@billing.command_handler(part_of=Invoice)
class CreateInvoiceHandler:
    @handle(CreateInvoice)
    def create_invoice(self, command: CreateInvoice):
        items_data = resolve_item_lines(parse_json(command.items, default=[]))

        invoice = Invoice.create(
            organization_id=command.organization_id,
            customer_id=command.customer_id,
            subject=command.subject,
            items_data=items_data,
            source_system=command.source_system,
            billing_address=parse_json(command.billing_address),
            shipping_address=parse_json(command.shipping_address),
            contact_id=command.contact_id,
            owner_id=command.owner_id,
            source_reference_id=command.source_reference_id,
            sales_order_id=command.sales_order_id,
            reference_no=command.reference_no,
            sales_order=command.sales_order,
            purchase_order=command.purchase_order,
            invoice_date=command.invoice_date,
            due_date=command.due_date,
            currency=command.currency,
            adjustment=command.adjustment,
            excise_duty=command.excise_duty,
            sales_commission=command.sales_commission,
            tds_amount=command.tds_amount,
            tcs_amount=command.tcs_amount,
            terms=command.terms,
            notes=command.notes,
        )
        current_domain.repository_for(Invoice).add(invoice)
        logger.info(
            "Invoice created",
            invoice_id=str(invoice.id),
            organization_id=str(invoice.organization_id),
            source_system=invoice.source_system,
            total_amount=invoice.total_amount,
        )
        return str(invoice.id)
