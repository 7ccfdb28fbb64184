"""Domain events for the SalesOrder aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from billing.domain import billing


@billing.event(part_of="SalesOrder")
class SalesOrderCreated:
    """A draft sales order was created."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    created_at = DateTime(required=True)


@billing.event(part_of="SalesOrder")
class SalesOrderUpdated:
    """A draft sales order was edited."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    total_amount = Float(required=True)
    updated_at = DateTime(required=True)


@billing.event(part_of="SalesOrder")
class SalesOrderConfirmed:
    """A sales order was confirmed and numbered."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    order_number = String(required=True)
    confirmed_at = DateTime(required=True)


@billing.event(part_of="SalesOrder")
class SalesOrderInvoiced:
    """An invoice was raised for a confirmed sales order."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    invoice_id = Identifier(required=True)
    invoiced_at = DateTime(required=True)


@billing.event(part_of="SalesOrder")
class SalesOrderPartiallyPaid:
    """The order's invoice received a payment that left a balance."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    invoice_id = Identifier(required=True)
    changed_at = DateTime(required=True)


@billing.event(part_of="SalesOrder")
class SalesOrderPaid:
    """The order's invoice was fully paid."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    invoice_id = Identifier(required=True)
    changed_at = DateTime(required=True)


@billing.event(part_of="SalesOrder")
class SalesOrderShipped:
    """A paid sales order left the warehouse."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    shipped_at = DateTime(required=True)


@billing.event(part_of="SalesOrder")
class SalesOrderCompleted:
    """A shipped sales order was closed."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    completed_at = DateTime(required=True)


@billing.event(part_of="SalesOrder")
class SalesOrderCancelled:
    """A sales order was cancelled before invoicing."""

    __version__ = 1

    sales_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
