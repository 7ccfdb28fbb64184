"""Manual invoice status changes (overdue, void, ...): command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice, InvoiceStatus
from billing.shared.lookup import load_active


@billing.command(part_of="Invoice")
class UpdateInvoiceStatus:
    invoice_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    notes = Text()
    performed_by = String(max_length=100, default="System")


@billing.command_handler(part_of=Invoice)
class UpdateInvoiceStatusHandler:
    @handle(UpdateInvoiceStatus)
    def update_status(self, command: UpdateInvoiceStatus):
        try:
            target = InvoiceStatus(command.status)
        except ValueError:
            raise ValidationError({"status": [f"unknown status: {command.status}"]}) from None

        invoice = load_active(Invoice, command.invoice_id)
        invoice.change_status(target, notes=command.notes, performed_by=command.performed_by)
        current_domain.repository_for(Invoice).add(invoice)
