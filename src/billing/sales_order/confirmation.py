"""Sales order confirmation: numbers a draft order."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.numbering.sequence import DocumentKind, next_number
from billing.sales_order.sales_order import SalesOrder
from billing.shared.lookup import load_active

logger = structlog.get_logger(__name__)


@billing.command(part_of="SalesOrder")
class ConfirmSalesOrder:
    sales_order_id = Identifier(required=True)


@billing.command_handler(part_of=SalesOrder)
class ConfirmSalesOrderHandler:
    @handle(ConfirmSalesOrder)
    def confirm_sales_order(self, command: ConfirmSalesOrder):
        order = load_active(SalesOrder, command.sales_order_id)
        order_number = next_number(str(order.organization_id), DocumentKind.SALES_ORDER)
        order.confirm(order_number)

        current_domain.repository_for(SalesOrder).add(order)
        logger.info("Sales order confirmed", sales_order_id=str(order.id), order_number=order_number)
        return order_number
