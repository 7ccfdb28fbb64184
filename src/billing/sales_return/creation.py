"""Sales return creation and receipt: commands and handlers."""

import structlog
from protean import handle
from protean.fields import Date, Identifier, Text
from protean.utils.globals import current_domain

from billing.domain import billing
from billing.numbering.sequence import DocumentKind, next_number
from billing.sales_order.sales_order import SalesOrder
from billing.sales_return.sales_return import SalesReturn, check_return_lines
from billing.shared.lookup import load_active
from billing.shared.payload import parse_json

logger = structlog.get_logger(__name__)


@billing.command(part_of="SalesReturn")
class CreateSalesReturn:
    sales_order_id = Identifier(required=True)
    return_reason = Text(required=True)
    return_date = Date()
    notes = Text()
    items = Text(required=True)  # JSON: list of {sales_order_item_id, returned_quantity, reason}


@billing.command(part_of="SalesReturn")
class ReceiveSalesReturn:
    sales_return_id = Identifier(required=True)
    receiving_notes = Text()


@billing.command_handler(part_of=SalesReturn)
class SalesReturnCommandHandler:
    @handle(CreateSalesReturn)
    def create_sales_return(self, command: CreateSalesReturn):
        order = load_active(SalesOrder, command.sales_order_id)
        lines = check_return_lines(order, parse_json(command.items, default=[]))
        return_number = next_number(str(order.organization_id), DocumentKind.SALES_RETURN)

        sales_return = SalesReturn.open(
            order,
            return_number=return_number,
            lines=lines,
            reason=command.return_reason,
            notes=command.notes,
            return_date=command.return_date,
        )
        current_domain.repository_for(SalesReturn).add(sales_return)
        logger.info(
            "Sales return created",
            sales_return_id=str(sales_return.id),
            sales_order_id=str(order.id),
            return_number=return_number,
            return_amount=sales_return.return_amount,
        )
        return str(sales_return.id)

    @handle(ReceiveSalesReturn)
    def receive_sales_return(self, command: ReceiveSalesReturn):
        sales_return = load_active(SalesReturn, command.sales_return_id)
        sales_return.receive(command.receiving_notes)
        current_domain.repository_for(SalesReturn).add(sales_return)
        logger.info("Sales return received", sales_return_id=str(sales_return.id))
