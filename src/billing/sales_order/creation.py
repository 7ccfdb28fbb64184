"""Sales order creation and editing: commands and handlers.

Stock is checked before anything is saved; any shortage rejects the whole
order. The stock decrement for a new order is queued in the same unit of
work and dispatched after commit.
"""

import structlog
from protean import handle
from protean.fields import Date, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.invoice.lines import resolve_item_lines
from billing.sales_order.sales_order import SalesOrder
from billing.shared.lookup import load_active
from billing.shared.payload import parse_json
from billing.stock.adjustment import TransactionType
from billing.stock.availability import ensure_stock_available
from billing.stock.dispatch import queue_stock_adjustment

logger = structlog.get_logger(__name__)


@billing.command(part_of="SalesOrder")
class CreateSalesOrder:
    organization_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    contact_id = Identifier()
    order_date = Date()
    currency = String(max_length=3, default="USD")
    tds_amount = Float(default=0.0)
    tcs_amount = Float(default=0.0)
    terms = Text()
    notes = Text()
    items = Text(required=True)  # JSON: list of line dicts


@billing.command(part_of="SalesOrder")
class UpdateSalesOrder:
    sales_order_id = Identifier(required=True)
    contact_id = Identifier()
    order_date = Date()
    currency = String(max_length=3)
    tds_amount = Float()
    tcs_amount = Float()
    terms = Text()
    notes = Text()
    items = Text()  # JSON: replaces every line when present


@billing.command_handler(part_of=SalesOrder)
class SalesOrderCommandHandler:
    @handle(CreateSalesOrder)
    def create_sales_order(self, command: CreateSalesOrder):
        items_data = resolve_item_lines(parse_json(command.items, default=[]), default_type="goods")
        ensure_stock_available(items_data)

        order = SalesOrder.create(
            organization_id=command.organization_id,
            customer_id=command.customer_id,
            items_data=items_data,
            contact_id=command.contact_id,
            order_date=command.order_date,
            currency=command.currency,
            tds_amount=command.tds_amount,
            tcs_amount=command.tcs_amount,
            terms=command.terms,
            notes=command.notes,
        )
        current_domain.repository_for(SalesOrder).add(order)
        queue_stock_adjustment(
            organization_id=str(order.organization_id),
            transaction_type=TransactionType.SALES,
            reference_type="sales_order",
            reference_id=str(order.id),
            notes="Sales Order Created",
            lines=[(item.item_id, item.quantity) for item in order.sorted_items()],
        )
        logger.info(
            "Sales order created",
            sales_order_id=str(order.id),
            organization_id=str(order.organization_id),
            total_amount=order.total_amount,
        )
        return str(order.id)

    @handle(UpdateSalesOrder)
    def update_sales_order(self, command: UpdateSalesOrder):
        order = load_active(SalesOrder, command.sales_order_id)

        items_data = None
        if command.items:
            items_data = resolve_item_lines(parse_json(command.items, default=[]), default_type="goods")
            ensure_stock_available(items_data)

        order.update_details(
            items_data=items_data,
            contact_id=command.contact_id,
            order_date=command.order_date,
            currency=command.currency,
            tds_amount=command.tds_amount,
            tcs_amount=command.tcs_amount,
            terms=command.terms,
            notes=command.notes,
        )
        current_domain.repository_for(SalesOrder).add(order)
        logger.info("Sales order updated", sales_order_id=str(order.id), total_amount=order.total_amount)
