"""PDF invoice renderer built on reportlab.

Files are written to ``{INVOICE_PDF_DIR}/{organization_id}/{invoice_id}.pdf``
and overwritten on every call. Draft invoices carry a DRAFT watermark.
"""

from pathlib import Path

import structlog
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from billing.customers.port import CustomerProfile
from billing.documents.port import InvoiceRenderer

logger = structlog.get_logger(__name__)

PLACEHOLDER_CUSTOMER = "Customer"


class ReportLabInvoiceRenderer(InvoiceRenderer):
    def __init__(self, output_dir: str) -> None:
        self.output_dir = Path(output_dir)

    def render_invoice(self, invoice, customer: CustomerProfile | None) -> str:
        target_dir = self.output_dir / str(invoice.organization_id)
        target_dir.mkdir(parents=True, exist_ok=True)
        output_path = target_dir / f"{invoice.id}.pdf"

        c = canvas.Canvas(str(output_path), pagesize=A4)
        width, height = A4

        if invoice.status == "draft":
            self._watermark(c, width, height)

        title = f"INVOICE {invoice.invoice_number}" if invoice.invoice_number else "INVOICE"
        c.setFont("Helvetica-Bold", 18)
        c.drawString(2 * cm, height - 2 * cm, title)

        c.setFont("Helvetica", 10)
        c.drawString(2 * cm, height - 2.8 * cm, f"Subject: {invoice.subject}")
        if invoice.invoice_date:
            c.drawString(2 * cm, height - 3.3 * cm, f"Date: {invoice.invoice_date.isoformat()}")
        if invoice.due_date:
            c.drawString(2 * cm, height - 3.8 * cm, f"Due: {invoice.due_date.isoformat()}")

        c.setFont("Helvetica-Bold", 12)
        c.drawString(11 * cm, height - 2.8 * cm, "Bill To:")
        c.setFont("Helvetica", 10)
        name = (customer.display_name or customer.company_name) if customer else None
        c.drawString(11 * cm, height - 3.4 * cm, name or PLACEHOLDER_CUSTOMER)
        if customer and customer.email:
            c.drawString(11 * cm, height - 3.9 * cm, customer.email)
        address = invoice.billing_address
        if address and address.street:
            c.drawString(11 * cm, height - 4.4 * cm, address.street)
            locality = ", ".join(part for part in (address.city, address.state, address.code) if part)
            c.drawString(11 * cm, height - 4.9 * cm, locality)

        y = height - 6.5 * cm
        c.setFont("Helvetica-Bold", 10)
        c.drawString(2 * cm, y, "Item")
        c.drawString(10 * cm, y, "Qty")
        c.drawString(12 * cm, y, "Price")
        c.drawString(14.5 * cm, y, "Tax")
        c.drawString(16.5 * cm, y, "Total")

        c.setFont("Helvetica", 10)
        for item in invoice.sorted_items():
            y -= 0.6 * cm
            c.drawString(2 * cm, y, (item.name or "")[:45])
            c.drawString(10 * cm, y, f"{item.quantity:g}")
            c.drawString(12 * cm, y, f"{item.unit_price:.2f}")
            c.drawString(14.5 * cm, y, f"{item.tax or 0.0:.2f}")
            c.drawString(16.5 * cm, y, f"{item.total or 0.0:.2f}")

        y -= 1.2 * cm
        currency = invoice.currency or "USD"
        for label, value in (
            ("Subtotal", invoice.sub_total),
            ("Discount", invoice.discount_total),
            ("Tax", invoice.tax_total),
            ("Total", invoice.total_amount),
            ("Paid", invoice.paid_amount),
            ("Balance", invoice.balance_amount),
        ):
            c.setFont("Helvetica-Bold" if label in ("Total", "Balance") else "Helvetica", 10)
            c.drawString(12 * cm, y, f"{label}:")
            c.drawRightString(19 * cm, y, f"{value or 0.0:.2f} {currency}")
            y -= 0.5 * cm

        if invoice.terms:
            c.setFont("Helvetica", 9)
            c.drawString(2 * cm, 2.5 * cm, f"Terms: {invoice.terms[:100]}")

        c.save()
        logger.info("Invoice document rendered", invoice_id=str(invoice.id), path=str(output_path))
        return str(output_path)

    def _watermark(self, c, width, height) -> None:
        c.saveState()
        c.setFillColor(colors.lightgrey)
        c.setFont("Helvetica-Bold", 96)
        c.translate(width / 2, height / 2)
        c.rotate(45)
        c.drawCentredString(0, 0, "DRAFT")
        c.restoreState()
