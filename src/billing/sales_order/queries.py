"""Sales order read queries."""

from billing.invoice.queries import line_to_dict
from billing.projections.parties import resolve_customer
from billing.sales_order.sales_order import SalesOrder
from billing.shared.lookup import list_active, load_active


def order_to_dict(order: SalesOrder) -> dict:
    return {
        "id": str(order.id),
        "organization_id": str(order.organization_id),
        "customer_id": str(order.customer_id),
        "contact_id": str(order.contact_id) if order.contact_id else None,
        "order_number": order.order_number,
        "order_date": order.order_date,
        "status": order.status,
        "sub_total": order.sub_total,
        "discount_total": order.discount_total,
        "tax_total": order.tax_total,
        "tds_amount": order.tds_amount,
        "tcs_amount": order.tcs_amount,
        "total_amount": order.total_amount,
        "currency": order.currency,
        "invoice_id": str(order.invoice_id) if order.invoice_id else None,
        "shipped_date": order.shipped_date,
        "terms": order.terms,
        "notes": order.notes,
        "items": [line_to_dict(item) for item in order.sorted_items()],
        "customer": resolve_customer(str(order.organization_id), str(order.customer_id)),
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


def get_sales_order(sales_order_id: str) -> dict:
    return order_to_dict(load_active(SalesOrder, sales_order_id))


def list_sales_orders(organization_id: str) -> list[dict]:
    return [order_to_dict(order) for order in list_active(SalesOrder, organization_id=organization_id)]
