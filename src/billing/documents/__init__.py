"""Invoice renderer factory.

Provides get_renderer() / set_renderer() to swap implementations:
- ReportLabInvoiceRenderer writing under INVOICE_PDF_DIR by default
- FakeInvoiceRenderer for testing
"""

import os

from billing.documents.port import InvoiceRenderer
from billing.documents.reportlab_adapter import ReportLabInvoiceRenderer

DEFAULT_PDF_DIR = "storage/invoices"

_current_renderer: InvoiceRenderer | None = None


def get_renderer() -> InvoiceRenderer:
    """Return the current invoice renderer."""
    global _current_renderer
    if _current_renderer is None:
        _current_renderer = ReportLabInvoiceRenderer(os.environ.get("INVOICE_PDF_DIR", DEFAULT_PDF_DIR))
    return _current_renderer


def set_renderer(renderer: InvoiceRenderer) -> None:
    """Override the active renderer (useful for tests)."""
    global _current_renderer
    _current_renderer = renderer


def reset_renderer() -> None:
    """Reset to the default renderer."""
    global _current_renderer
    _current_renderer = None
