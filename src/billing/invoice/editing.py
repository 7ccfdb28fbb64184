"""Draft invoice editing: command and handler."""

from protean import handle
from protean.fields import Date, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.invoice.lines import resolve_item_lines
from billing.shared.lookup import load_active
from billing.shared.payload import parse_json


@billing.command(part_of="Invoice")
class UpdateInvoice:
    """Replace a draft's header fields and, when ``items`` is given, its lines."""

    invoice_id = Identifier(required=True)
    subject = String(max_length=255)
    contact_id = Identifier()
    owner_id = Identifier()
    reference_no = String(max_length=100)
    sales_order = String(max_length=100)
    purchase_order = String(max_length=100)
    invoice_date = Date()
    due_date = Date()
    currency = String(max_length=3)
    adjustment = Float()
    excise_duty = Float()
    sales_commission = Float()
    tds_amount = Float()
    tcs_amount = Float()
    terms = Text()
    notes = Text()
    billing_address = Text()  # JSON: address dict
    shipping_address = Text()  # JSON: address dict
    items = Text()  # JSON: list of line dicts
    expected_version = Integer()


@billing.command_handler(part_of=Invoice)
class UpdateInvoiceHandler:
    @handle(UpdateInvoice)
    def update_invoice(self, command: UpdateInvoice):
        invoice = load_active(Invoice, command.invoice_id)
        invoice.assert_version(command.expected_version)

        items_data = parse_json(command.items)
        if items_data is not None:
            items_data = resolve_item_lines(items_data)

        invoice.update_details(
            items_data=items_data,
            billing_address=parse_json(command.billing_address),
            shipping_address=parse_json(command.shipping_address),
            subject=command.subject,
            contact_id=command.contact_id,
            owner_id=command.owner_id,
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
