"""Sales order shipping, completion and cancellation."""

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.sales_order.sales_order import SalesOrder
from billing.shared.lookup import load_active

logger = structlog.get_logger(__name__)


@billing.command(part_of="SalesOrder")
class ShipSalesOrder:
    sales_order_id = Identifier(required=True)


@billing.command(part_of="SalesOrder")
class CompleteSalesOrder:
    sales_order_id = Identifier(required=True)


@billing.command(part_of="SalesOrder")
class CancelSalesOrder:
    sales_order_id = Identifier(required=True)
    reason = Text()


@billing.command_handler(part_of=SalesOrder)
class SalesOrderFulfillmentHandler:
    @handle(ShipSalesOrder)
    def ship_sales_order(self, command: ShipSalesOrder):
        order = load_active(SalesOrder, command.sales_order_id)
        order.ship()
        current_domain.repository_for(SalesOrder).add(order)
        logger.info("Sales order shipped", sales_order_id=str(order.id))

    @handle(CompleteSalesOrder)
    def complete_sales_order(self, command: CompleteSalesOrder):
        order = load_active(SalesOrder, command.sales_order_id)
        order.complete()
        current_domain.repository_for(SalesOrder).add(order)
        logger.info("Sales order completed", sales_order_id=str(order.id))

    @handle(CancelSalesOrder)
    def cancel_sales_order(self, command: CancelSalesOrder):
        order = load_active(SalesOrder, command.sales_order_id)
        order.cancel(command.reason)
        current_domain.repository_for(SalesOrder).add(order)
        logger.info("Sales order cancelled", sales_order_id=str(order.id), reason=command.reason)
