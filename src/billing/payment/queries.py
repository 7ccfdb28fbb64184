"""Payment read queries."""

from protean.utils.globals import current_domain

from billing.invoice.invoice import Invoice
from billing.payment.payment import Payment
from billing.shared.lookup import list_active


def payment_to_dict(payment: Payment) -> dict:
    return {
        "id": str(payment.id),
        "organization_id": str(payment.organization_id),
        "invoice_id": str(payment.invoice_id),
        "amount": payment.amount,
        "payment_date": payment.payment_date,
        "method": payment.method,
        "reference": payment.reference,
        "status": payment.status,
        "payment_type": payment.payment_type,
        "sales_return_id": str(payment.sales_return_id) if payment.sales_return_id else None,
        "notes": payment.notes,
        "created_at": payment.created_at,
    }


def get_payment(payment_id: str) -> dict:
    return payment_to_dict(current_domain.repository_for(Payment).get(payment_id))


def list_payments() -> list[dict]:
    return [payment_to_dict(payment) for payment in list_active(Payment)]


def list_payments_by_invoice(invoice_id: str) -> list[dict]:
    return [payment_to_dict(payment) for payment in list_active(Payment, invoice_id=str(invoice_id))]


def list_payments_by_module(organization_id: str, source_system: str) -> list[dict]:
    """Payments on the organization's invoices raised by one source system."""
    invoice_ids = {
        str(invoice.id)
        for invoice in current_domain.repository_for(Invoice)
        ._dao.query.filter(organization_id=organization_id, source_system=source_system)
        .all()
        .items
    }
    return [
        payment_to_dict(payment)
        for payment in list_active(Payment, organization_id=organization_id)
        if str(payment.invoice_id) in invoice_ids
    ]
