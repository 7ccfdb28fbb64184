"""Audit trail writer: turns invoice events into AuditEntry rows.

Every entry is keyed by the invoice, including payment activity, so one
query returns the whole history of a document. Writing is best-effort: a
failure is logged and never reaches the operation that raised the event.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from billing.audit.audit_entry import AuditEntry
from billing.domain import billing
from billing.invoice.events import (
    InvoicePaid,
    InvoicePartiallyPaid,
    InvoicePaymentReversed,
    InvoiceRefunded,
    InvoiceSent,
    InvoiceStatusChanged,
)
from billing.invoice.invoice import Invoice, InvoiceStatus

logger = structlog.get_logger(__name__)

INVOICE_ENTITY = "invoice"


def _record(event, action, old_status=None, new_status=None, notes=None, performed_by="System") -> None:
    try:
        current_domain.repository_for(AuditEntry).add(
            AuditEntry.record(
                entity_type=INVOICE_ENTITY,
                entity_id=str(event.invoice_id),
                action=action,
                organization_id=str(event.organization_id),
                old_status=old_status,
                new_status=new_status,
                notes=notes,
                performed_by=performed_by,
            )
        )
    except Exception:
        logger.exception("Failed to write audit entry", invoice_id=str(event.invoice_id), action=action)


@billing.event_handler(part_of=Invoice)
class InvoiceAuditEventHandler:
    @handle(InvoiceSent)
    def on_invoice_sent(self, event: InvoiceSent) -> None:
        _record(
            event,
            "invoice_sent",
            old_status=InvoiceStatus.DRAFT.value,
            new_status=InvoiceStatus.SENT.value,
            notes=f"Invoice sent with number {event.invoice_number}",
        )

    @handle(InvoiceStatusChanged)
    def on_status_changed(self, event: InvoiceStatusChanged) -> None:
        _record(
            event,
            "status_change",
            old_status=event.old_status,
            new_status=event.new_status,
            notes=event.notes,
            performed_by=event.performed_by or "System",
        )

    @handle(InvoicePaid)
    def on_invoice_paid(self, event: InvoicePaid) -> None:
        _record(
            event,
            "PAYMENT_RECORDED",
            old_status=event.old_status,
            new_status=InvoiceStatus.PAID.value,
            notes=f"Payment of {event.amount:.2f} recorded via {event.method}",
        )

    @handle(InvoicePartiallyPaid)
    def on_invoice_partially_paid(self, event: InvoicePartiallyPaid) -> None:
        _record(
            event,
            "PAYMENT_RECORDED",
            old_status=event.old_status,
            new_status=event.old_status,
            notes=f"Payment of {event.amount:.2f} recorded via {event.method}",
        )

    @handle(InvoicePaymentReversed)
    def on_payment_reversed(self, event: InvoicePaymentReversed) -> None:
        _record(
            event,
            "PAYMENT_VOIDED",
            old_status=event.old_status,
            new_status=event.new_status,
            notes=f"Payment of {event.amount:.2f} voided. Reason: {event.reason or ''}",
        )

    @handle(InvoiceRefunded)
    def on_invoice_refunded(self, event: InvoiceRefunded) -> None:
        _record(
            event,
            "REFUND_RECORDED",
            old_status=InvoiceStatus.PAID.value,
            new_status=InvoiceStatus.PAID.value,
            notes=f"Refund of {event.amount:.2f} issued",
        )
