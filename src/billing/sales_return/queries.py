"""Sales return read queries."""

from billing.sales_return.sales_return import SalesReturn
from billing.shared.lookup import list_active, load_active


def return_to_dict(sales_return: SalesReturn) -> dict:
    return {
        "id": str(sales_return.id),
        "organization_id": str(sales_return.organization_id),
        "sales_order_id": str(sales_return.sales_order_id),
        "return_number": sales_return.return_number,
        "return_date": sales_return.return_date,
        "status": sales_return.status,
        "return_amount": sales_return.return_amount,
        "return_reason": sales_return.return_reason,
        "notes": sales_return.notes,
        "receiving_notes": sales_return.receiving_notes,
        "approved_date": sales_return.approved_date,
        "received_date": sales_return.received_date,
        "refunded_date": sales_return.refunded_date,
        "refund_payment_id": str(sales_return.refund_payment_id) if sales_return.refund_payment_id else None,
        "items": [
            {
                "id": str(item.id),
                "line_number": item.line_number,
                "sales_order_item_id": str(item.sales_order_item_id),
                "item_id": str(item.item_id) if item.item_id else None,
                "returned_quantity": item.returned_quantity,
                "unit_price": item.unit_price,
                "tax": item.tax,
                "total": item.total,
                "reason": item.reason,
            }
            for item in sales_return.sorted_items()
        ],
        "created_at": sales_return.created_at,
    }


def get_sales_return(sales_return_id: str) -> dict:
    return return_to_dict(load_active(SalesReturn, sales_return_id))


def list_sales_returns(organization_id: str) -> list[dict]:
    return [return_to_dict(record) for record in list_active(SalesReturn, organization_id=organization_id)]


def list_returns_by_order(sales_order_id: str) -> list[dict]:
    return [return_to_dict(record) for record in list_active(SalesReturn, sales_order_id=str(sales_order_id))]
