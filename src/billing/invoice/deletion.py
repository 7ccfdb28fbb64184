"""Invoice deletion: command and handler. Invoices are tombstoned, never purged."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.shared.lookup import load_active


@billing.command(part_of="Invoice")
class DeleteInvoice:
    invoice_id = Identifier(required=True)


@billing.command_handler(part_of=Invoice)
class DeleteInvoiceHandler:
    @handle(DeleteInvoice)
    def delete_invoice(self, command: DeleteInvoice):
        invoice = load_active(Invoice, command.invoice_id)
        invoice.soft_delete()
        current_domain.repository_for(Invoice).add(invoice)
