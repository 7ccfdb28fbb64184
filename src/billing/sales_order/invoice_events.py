"""SalesOrder reacts to payment progress on its invoice.

The order follows its invoice: a partial payment moves an invoiced order to
partially_paid, a full payment moves it to paid. Transitions go through the
order's own state machine; a repeat of the current status is a no-op,
and one the state machine does not allow is logged and skipped.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from billing.domain import billing
from billing.invoice.events import InvoicePaid, InvoicePartiallyPaid
from billing.sales_order.sales_order import SalesOrder, SalesOrderStatus

logger = structlog.get_logger(__name__)


@billing.event_handler(part_of=SalesOrder, stream_category="billing::invoice")
class InvoicePaymentEventHandler:
    """Moves the linked sales order along as its invoice is paid."""

    def _linked_order(self, event) -> SalesOrder | None:
        if not event.sales_order_id:
            return None
        return current_domain.repository_for(SalesOrder).get(event.sales_order_id)

    def _advance(self, event, target: SalesOrderStatus) -> None:
        order = self._linked_order(event)
        if order is None:
            return
        if order.status == target.value:
            logger.debug("Sales order already at status", sales_order_id=str(order.id), status=order.status)
            return
        if not order.can_transition_to(target):
            logger.warning(
                "Sales order status not advanced",
                sales_order_id=str(order.id),
                invoice_id=str(event.invoice_id),
                current_status=order.status,
                target_status=target.value,
            )
            return

        if target == SalesOrderStatus.PAID:
            order.mark_paid()
        else:
            order.mark_partially_paid()
        current_domain.repository_for(SalesOrder).add(order)
        logger.info(
            "Sales order status follows invoice",
            sales_order_id=str(order.id),
            invoice_id=str(event.invoice_id),
            status=order.status,
        )

    @handle(InvoicePaid)
    def on_invoice_paid(self, event: InvoicePaid) -> None:
        self._advance(event, SalesOrderStatus.PAID)

    @handle(InvoicePartiallyPaid)
    def on_invoice_partially_paid(self, event: InvoicePartiallyPaid) -> None:
        self._advance(event, SalesOrderStatus.PARTIALLY_PAID)
