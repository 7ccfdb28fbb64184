"""Invoice creation from a confirmed sales order.

The invoice copies the order's lines and TDS/TCS, points back at the order
and is due thirty days after it is raised. Both documents are saved in one
unit of work.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.invoice import Invoice, SourceSystem
from billing.sales_order.sales_order import SalesOrder
from billing.shared.lookup import load_active

logger = structlog.get_logger(__name__)

PAYMENT_TERM_DAYS = 30


def order_lines(order: SalesOrder) -> list[dict]:
    return [
        {
            "item_id": str(item.item_id),
            "item_type": item.item_type,
            "name": item.name,
            "description": item.description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "discount": item.discount,
            "tax": item.tax,
            "metadata": item.metadata,
        }
        for item in order.sorted_items()
    ]


@billing.command(part_of="SalesOrder")
class CreateInvoiceFromOrder:
    sales_order_id = Identifier(required=True)


@billing.command_handler(part_of=SalesOrder)
class CreateInvoiceFromOrderHandler:
    @handle(CreateInvoiceFromOrder)
    def create_invoice_from_order(self, command: CreateInvoiceFromOrder):
        order = load_active(SalesOrder, command.sales_order_id)
        if not order.can_create_invoice():
            raise ValidationError(
                {"status": [f"cannot create invoice for sales order in {order.status} status or invoice already exists"]}
            )

        today = datetime.now(UTC).date()
        invoice = Invoice.create(
            organization_id=str(order.organization_id),
            customer_id=str(order.customer_id),
            subject=f"Invoice for Sales Order {order.order_number}",
            items_data=order_lines(order),
            source_system=SourceSystem.INVENTORY.value,
            contact_id=order.contact_id,
            sales_order_id=str(order.id),
            sales_order=order.order_number,
            invoice_date=today,
            due_date=today + timedelta(days=PAYMENT_TERM_DAYS),
            currency=order.currency,
            tds_amount=order.tds_amount,
            tcs_amount=order.tcs_amount,
            terms=order.terms,
        )
        order.mark_invoiced(str(invoice.id))

        current_domain.repository_for(Invoice).add(invoice)
        current_domain.repository_for(SalesOrder).add(order)
        logger.info(
            "Invoice created from sales order",
            sales_order_id=str(order.id),
            invoice_id=str(invoice.id),
            total_amount=invoice.total_amount,
        )
        return str(invoice.id)
