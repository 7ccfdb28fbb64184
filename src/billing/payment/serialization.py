"""Per-invoice serialization of money-moving commands.

Recording, voiding and refunding all read an invoice, change its amounts and
write it back. Commands for the same invoice are run one at a time by
holding a lock for that invoice across the whole command, commit included.
The invoice ``version`` check covers writers in other processes.
"""

import threading
from collections import defaultdict

from protean.utils.globals import current_domain


class InvoiceLocks:
    """Registry of one re-entrant lock per invoice id."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = defaultdict(threading.RLock)
        self._guard = threading.Lock()

    def for_invoice(self, invoice_id: str) -> threading.RLock:
        with self._guard:
            return self._locks[str(invoice_id)]


invoice_locks = InvoiceLocks()


def process_serialized(command, invoice_id: str):
    """Process ``command`` synchronously while holding the invoice's lock."""
    with invoice_locks.for_invoice(invoice_id):
        return current_domain.process(command, asynchronous=False)
