"""Domain events for the Invoice aggregate.

All events are versioned, immutable facts representing invoice state changes.
Every payload carries the organization and an ``*_at`` timestamp so consumers
can build the standard envelope (type, aggregate, organization, occurred-at).
"""

from protean.fields import DateTime, Float, Identifier, String

from billing.domain import billing


@billing.event(part_of="Invoice")
class InvoiceCreated:
    """A draft invoice was created."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    source_system = String(required=True)
    source_reference_id = String()
    sales_order_id = Identifier()
    total_amount = Float(required=True)
    created_at = DateTime(required=True)


@billing.event(part_of="Invoice")
class InvoiceUpdated:
    """A draft invoice was edited and its totals recomputed."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    total_amount = Float(required=True)
    balance_amount = Float(required=True)
    updated_at = DateTime(required=True)


@billing.event(part_of="Invoice")
class InvoiceSent:
    """An invoice was numbered and sent to the customer."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    invoice_number = String(required=True)
    total_amount = Float(required=True)
    sent_at = DateTime(required=True)


@billing.event(part_of="Invoice")
class InvoiceStatusChanged:
    """An invoice status was changed manually (overdue, void, ...)."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    old_status = String(required=True)
    new_status = String(required=True)
    notes = String()
    performed_by = String(default="System")
    changed_at = DateTime(required=True)


@billing.event(part_of="Invoice")
class InvoicePaid:
    """The outstanding balance of an invoice reached zero."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    sales_order_id = Identifier()
    payment_id = Identifier(required=True)
    amount = Float(required=True)  # This payment
    method = String()
    old_status = String()
    paid_amount = Float(required=True)
    total_amount = Float(required=True)
    paid_at = DateTime(required=True)


@billing.event(part_of="Invoice")
class InvoicePartiallyPaid:
    """A payment was applied but a balance remains."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    sales_order_id = Identifier()
    payment_id = Identifier(required=True)
    amount = Float(required=True)  # This payment
    method = String()
    old_status = String()
    paid_amount = Float(required=True)
    balance_amount = Float(required=True)
    paid_at = DateTime(required=True)


@billing.event(part_of="Invoice")
class InvoicePaymentReversed:
    """A voided payment was taken back out of the invoice totals."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    amount = Float(required=True)
    paid_amount = Float(required=True)
    balance_amount = Float(required=True)
    old_status = String()
    new_status = String()
    reason = String()
    reversed_at = DateTime(required=True)


@billing.event(part_of="Invoice")
class InvoiceRefunded:
    """A refund was applied against a paid invoice."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    amount = Float(required=True)
    paid_amount = Float(required=True)
    balance_amount = Float(required=True)
    refunded_at = DateTime(required=True)


@billing.event(part_of="Invoice")
class InvoiceDeleted:
    """An invoice was soft-deleted."""

    __version__ = 1

    invoice_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    deleted_at = DateTime(required=True)
