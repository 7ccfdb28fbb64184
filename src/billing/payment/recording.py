"""Payment recording: command and handler.

A payment is accepted only on a SENT invoice, must be positive and may not
exceed the balance by more than the rounding tolerance. The payment and the
updated invoice are saved in one unit of work.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Date, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.payment.payment import Payment, PaymentMethod
from billing.shared.lookup import load_active
from billing.shared.totals import PAYMENT_TOLERANCE

logger = structlog.get_logger(__name__)


@billing.command(part_of="Payment")
class RecordPayment:
    invoice_id = Identifier(required=True)
    amount = Float(required=True)
    payment_date = Date()
    method = String(max_length=20, default=PaymentMethod.CASH.value)
    reference = String(max_length=255)
    notes = Text()
    expected_version = Integer()  # Invoice version the caller last read


@billing.command_handler(part_of=Payment)
class RecordPaymentHandler:
    @handle(RecordPayment)
    def record_payment(self, command: RecordPayment):
        invoice = load_active(Invoice, command.invoice_id)
        invoice.assert_version(command.expected_version)

        if not invoice.can_receive_payment():
            raise ValidationError(
                {"status": [f"invoice in {invoice.status} status cannot receive payments - only SENT invoices can be paid"]}
            )
        if command.amount <= 0:
            raise ValidationError({"amount": ["payment amount must be greater than zero"]})
        if command.amount > invoice.balance_amount + PAYMENT_TOLERANCE:
            raise ValidationError(
                {
                    "amount": [
                        f"payment amount ({command.amount:.2f}) exceeds balance due ({invoice.balance_amount:.2f})"
                    ]
                }
            )

        payment = Payment.receive(
            organization_id=str(invoice.organization_id),
            invoice_id=str(invoice.id),
            amount=command.amount,
            method=command.method,
            payment_date=command.payment_date,
            reference=command.reference,
            notes=command.notes,
        )
        invoice.apply_payment(str(payment.id), command.amount, method=payment.method)

        current_domain.repository_for(Payment).add(payment)
        current_domain.repository_for(Invoice).add(invoice)
        logger.info(
            "Payment recorded",
            payment_id=str(payment.id),
            invoice_id=str(invoice.id),
            amount=command.amount,
            invoice_status=invoice.status,
            balance_amount=invoice.balance_amount,
        )
        return str(payment.id)
