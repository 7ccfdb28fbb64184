"""Work-order replica: what a field-service invoice was raised for."""

from protean.fields import DateTime, Float, Identifier, String, Text

from billing.domain import billing


@billing.projection
class WorkOrderReplica:
    work_order_id = Identifier(identifier=True, required=True)
    organization_id = Identifier()
    summary = Text()
    status = String(max_length=30)
    billing_status = String(max_length=30)
    customer_id = Identifier()
    contact_id = Identifier()
    grand_total = Float(default=0.0)
    updated_at = DateTime()
