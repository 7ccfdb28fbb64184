"""Sales return refund: command and handler.

A refund is a negative payment against the order's invoice. The payment,
the invoice, the return and the stock increment are saved in one unit of
work; run it through ``process_serialized`` keyed by ``refund_invoice_id``.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Date, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.payment.payment import Payment, PaymentMethod
from billing.sales_order.sales_order import SalesOrder
from billing.sales_return.sales_return import SalesReturn
from billing.shared.lookup import load_active
from billing.stock.adjustment import TransactionType
from billing.stock.dispatch import queue_stock_adjustment

logger = structlog.get_logger(__name__)


def refund_invoice_id(sales_return_id: str) -> str:
    """The invoice a return's refund is paid against."""
    sales_return = load_active(SalesReturn, sales_return_id)
    order = load_active(SalesOrder, sales_return.sales_order_id)
    if not order.invoice_id:
        raise ValidationError({"sales_order_id": ["sales order has no associated invoice"]})
    return str(order.invoice_id)


@billing.command(part_of="SalesReturn")
class ProcessRefund:
    sales_return_id = Identifier(required=True)
    method = String(max_length=20, default=PaymentMethod.CASH.value)
    payment_date = Date()
    reference = String(max_length=255)
    notes = Text()
    expected_version = Integer()  # Invoice version the caller last read


@billing.command_handler(part_of=SalesReturn)
class ProcessRefundHandler:
    @handle(ProcessRefund)
    def process_refund(self, command: ProcessRefund):
        sales_return = load_active(SalesReturn, command.sales_return_id)
        sales_return.assert_refundable()

        invoice = load_active(Invoice, refund_invoice_id(command.sales_return_id))
        invoice.assert_version(command.expected_version)

        refund = Payment.refund(
            organization_id=str(invoice.organization_id),
            invoice_id=str(invoice.id),
            sales_return_id=str(sales_return.id),
            amount=sales_return.return_amount,
            method=command.method,
            payment_date=command.payment_date,
            reference=command.reference,
            notes=command.notes or f"Refund for sales return {sales_return.return_number}",
        )
        invoice.apply_refund(str(refund.id), sales_return.return_amount)
        sales_return.mark_refunded(str(refund.id))

        current_domain.repository_for(Payment).add(refund)
        current_domain.repository_for(Invoice).add(invoice)
        current_domain.repository_for(SalesReturn).add(sales_return)
        queue_stock_adjustment(
            organization_id=str(sales_return.organization_id),
            transaction_type=TransactionType.RETURN,
            reference_type="sales_return",
            reference_id=str(sales_return.id),
            notes="Sales Return Refunded",
            lines=[(item.item_id, item.returned_quantity) for item in sales_return.sorted_items() if item.item_id],
        )
        logger.info(
            "Sales return refunded",
            sales_return_id=str(sales_return.id),
            invoice_id=str(invoice.id),
            refund_payment_id=str(refund.id),
            amount=sales_return.return_amount,
        )
        return str(refund.id)
