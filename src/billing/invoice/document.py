"""On-demand invoice documents: command and handler.

Every call renders a fresh document so it reflects the latest payments and
status. Drafts are rendered with a DRAFT watermark and their path is not
stored; for any other status the new path replaces the stored one.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from billing.documents import get_renderer
from billing.domain import billing
from billing.invoice.invoice import Invoice, InvoiceStatus
from billing.projections.parties import document_customer
from billing.shared.lookup import load_active


@billing.command(part_of="Invoice")
class RenderInvoiceDocument:
    invoice_id = Identifier(required=True)


@billing.command_handler(part_of=Invoice)
class RenderInvoiceDocumentHandler:
    @handle(RenderInvoiceDocument)
    def render_document(self, command: RenderInvoiceDocument):
        invoice = load_active(Invoice, command.invoice_id)
        pdf_path = get_renderer().render_invoice(invoice, document_customer(invoice.customer_id))

        if invoice.status != InvoiceStatus.DRAFT.value:
            invoice.attach_document(pdf_path)
            current_domain.repository_for(Invoice).add(invoice)
        return pdf_path
