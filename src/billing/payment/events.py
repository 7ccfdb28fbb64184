"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from billing.domain import billing


@billing.event(part_of="Payment")
class PaymentRecorded:
    """A payment was received against an invoice."""

    __version__ = 1

    payment_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    invoice_id = Identifier(required=True)
    amount = Float(required=True)
    method = String(required=True)
    reference = String()
    recorded_at = DateTime(required=True)


@billing.event(part_of="Payment")
class RefundRecorded:
    """Money was paid back to the customer for a sales return."""

    __version__ = 1

    payment_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    invoice_id = Identifier(required=True)
    sales_return_id = Identifier(required=True)
    amount = Float(required=True)  # Negative
    method = String(required=True)
    recorded_at = DateTime(required=True)


@billing.event(part_of="Payment")
class PaymentVoided:
    """A completed payment was voided."""

    __version__ = 1

    payment_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    invoice_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String()
    voided_at = DateTime(required=True)
