"""Cross-domain event contracts for field-service work orders.

Billing keeps a summary of each work order so invoices raised from the field
can show what they were for.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String, Text


class WorkOrderCreated(BaseEvent):
    """A work order was opened."""

    __version__ = 1

    work_order_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    summary = Text()
    status = String()
    billing_status = String()
    customer_id = Identifier()
    contact_id = Identifier()
    grand_total = Float(default=0.0)
    occurred_at = DateTime()


class WorkOrderUpdated(BaseEvent):
    """A work order changed; empty fields mean "unchanged"."""

    __version__ = 1

    work_order_id = Identifier(required=True)
    organization_id = Identifier()
    summary = Text()
    status = String()
    billing_status = String()
    grand_total = Float(default=0.0)
    occurred_at = DateTime()


class WorkOrderDeleted(BaseEvent):
    """A work order was deleted."""

    __version__ = 1

    work_order_id = Identifier(required=True)
    organization_id = Identifier()
    occurred_at = DateTime()
