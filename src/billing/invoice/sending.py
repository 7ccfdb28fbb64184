"""Invoice sending: command and handler.

Sending numbers the invoice, moves it to SENT and renders the document that
goes to the customer. The number is drawn inside the same unit of work, so
a failed send does not burn a number.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from billing.documents import get_renderer
from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.numbering.sequence import DocumentKind, next_number
from billing.projections.parties import document_customer
from billing.shared.lookup import load_active

logger = structlog.get_logger(__name__)


@billing.command(part_of="Invoice")
class SendInvoice:
    invoice_id = Identifier(required=True)


@billing.command_handler(part_of=Invoice)
class SendInvoiceHandler:
    @handle(SendInvoice)
    def send_invoice(self, command: SendInvoice):
        invoice = load_active(Invoice, command.invoice_id)
        invoice_number = next_number(str(invoice.organization_id), DocumentKind.INVOICE)

        # Raises unless the invoice is still a draft
        invoice.send(invoice_number)
        pdf_path = get_renderer().render_invoice(invoice, document_customer(invoice.customer_id))
        invoice.pdf_path = pdf_path

        current_domain.repository_for(Invoice).add(invoice)
        logger.info(
            "Invoice sent",
            invoice_id=str(invoice.id),
            invoice_number=invoice_number,
            pdf_path=pdf_path,
        )
        return invoice_number
