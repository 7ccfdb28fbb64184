"""Invoice read queries, enriched with customer and contact names."""

import json

from billing.audit.audit_entry import AuditEntry
from billing.invoice.invoice import Invoice
from billing.projections.parties import resolve_contact, resolve_customer
from billing.shared.lookup import list_active, load_active

_HEADER_FIELDS = (
    "organization_id",
    "invoice_number",
    "source_system",
    "source_reference_id",
    "sales_order_id",
    "subject",
    "status",
    "customer_id",
    "contact_id",
    "owner_id",
    "reference_no",
    "sales_order",
    "purchase_order",
    "invoice_date",
    "due_date",
    "sub_total",
    "discount_total",
    "tax_total",
    "adjustment",
    "excise_duty",
    "sales_commission",
    "tds_amount",
    "tcs_amount",
    "total_amount",
    "paid_amount",
    "balance_amount",
    "currency",
    "terms",
    "notes",
    "pdf_path",
    "version",
    "created_at",
    "updated_at",
)


def _address(value) -> dict | None:
    if value is None:
        return None
    return {key: getattr(value, key) for key in ("street", "city", "state", "code", "country")}


def decode_metadata(raw):
    """Hand the producer's metadata back as it was sent; undecodable blobs are dropped."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def line_to_dict(item) -> dict:
    return {
        "id": str(item.id),
        "line_number": item.line_number,
        "item_id": str(item.item_id),
        "item_type": item.item_type,
        "name": item.name,
        "description": item.description,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "discount": item.discount,
        "tax": item.tax,
        "total": item.total,
        "metadata": decode_metadata(item.metadata),
    }


def invoice_to_dict(invoice: Invoice) -> dict:
    data = {"id": str(invoice.id)}
    data.update({field: getattr(invoice, field) for field in _HEADER_FIELDS})
    data["billing_address"] = _address(invoice.billing_address)
    data["shipping_address"] = _address(invoice.shipping_address)
    data["items"] = [line_to_dict(item) for item in invoice.sorted_items()]
    data["customer"] = resolve_customer(invoice.organization_id, invoice.customer_id)
    data["contact"] = resolve_contact(invoice.organization_id, invoice.contact_id, invoice.customer_id)
    return data


def get_invoice(invoice_id: str) -> dict:
    return invoice_to_dict(load_active(Invoice, invoice_id))


def list_invoices(organization_id: str) -> list[dict]:
    return [invoice_to_dict(invoice) for invoice in list_active(Invoice, organization_id=organization_id)]


def list_invoices_by_module(organization_id: str, source_system: str) -> list[dict]:
    return [
        invoice_to_dict(invoice)
        for invoice in list_active(Invoice, organization_id=organization_id, source_system=source_system)
    ]


def get_audit_logs(invoice_id: str) -> list[dict]:
    """Audit trail for an invoice and its payments, oldest first."""
    entries = list_active(AuditEntry, entity_id=str(invoice_id))
    return [
        {
            "id": str(entry.id),
            "entity_type": entry.entity_type,
            "entity_id": str(entry.entity_id),
            "action": entry.action,
            "old_status": entry.old_status,
            "new_status": entry.new_status,
            "notes": entry.notes,
            "performed_by": entry.performed_by,
            "created_at": entry.created_at,
        }
        for entry in entries
    ]
