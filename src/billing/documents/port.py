"""Invoice document renderer port (abstract interface)."""

from abc import ABC, abstractmethod

from billing.customers.port import CustomerProfile


class InvoiceRenderer(ABC):
    """Turns an invoice into a document on disk and returns its path."""

    @abstractmethod
    def render_invoice(self, invoice, customer: CustomerProfile | None) -> str:
        """Render ``invoice`` for ``customer``; a missing customer gets a placeholder."""
        ...
