"""Payment voiding: command and handler.

Voiding is the only way to reverse a payment. The payment row is kept with
status VOID and its signed amount is taken back out of the invoice.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.payment.payment import Payment
from billing.shared.lookup import load_active

logger = structlog.get_logger(__name__)


def payment_invoice_id(payment_id: str) -> str:
    """The invoice a payment was applied to."""
    return str(current_domain.repository_for(Payment).get(payment_id).invoice_id)


@billing.command(part_of="Payment")
class VoidPayment:
    payment_id = Identifier(required=True)
    reason = Text()
    expected_version = Integer()  # Invoice version the caller last read


@billing.command_handler(part_of=Payment)
class VoidPaymentHandler:
    @handle(VoidPayment)
    def void_payment(self, command: VoidPayment):
        payment_repo = current_domain.repository_for(Payment)
        invoice_repo = current_domain.repository_for(Invoice)

        payment = payment_repo.get(command.payment_id)
        invoice = load_active(Invoice, payment.invoice_id)
        invoice.assert_version(command.expected_version)

        payment.void(command.reason)
        invoice.reverse_payment(str(payment.id), payment.amount, reason=command.reason)

        payment_repo.add(payment)
        invoice_repo.add(invoice)
        logger.info(
            "Payment voided",
            payment_id=str(payment.id),
            invoice_id=str(invoice.id),
            amount=payment.amount,
            invoice_status=invoice.status,
        )
