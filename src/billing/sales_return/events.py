"""Domain events for the SalesReturn aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from billing.domain import billing


@billing.event(part_of="SalesReturn")
class SalesReturnCreated:
    """A return was raised against a shipped order and auto-approved."""

    __version__ = 1

    sales_return_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    sales_order_id = Identifier(required=True)
    return_number = String(required=True)
    return_amount = Float(required=True)
    created_at = DateTime(required=True)


@billing.event(part_of="SalesReturn")
class SalesReturnReceived:
    """Returned goods arrived back at the warehouse."""

    __version__ = 1

    sales_return_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    sales_order_id = Identifier(required=True)
    received_at = DateTime(required=True)


@billing.event(part_of="SalesReturn")
class SalesReturnRefunded:
    """The customer was refunded for a received return."""

    __version__ = 1

    sales_return_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    sales_order_id = Identifier(required=True)
    refund_payment_id = Identifier(required=True)
    return_amount = Float(required=True)
    refunded_at = DateTime(required=True)
