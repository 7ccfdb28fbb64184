"""Inventory service factory.

Provides get_inventory() / set_inventory() to swap implementations:
- HttpInventoryService when INVENTORY_SERVICE_URL is configured
- None otherwise, in which case stock checks and updates are skipped
- FakeInventoryService in tests, installed through set_inventory()
"""

import os

from billing.inventory.http_adapter import HttpInventoryService
from billing.inventory.port import InventoryService

_current_inventory: InventoryService | None = None
_resolved = False


def get_inventory() -> InventoryService | None:
    """Return the configured inventory service, or None when stock is not tracked."""
    global _current_inventory, _resolved
    if not _resolved:
        url = os.environ.get("INVENTORY_SERVICE_URL")
        _current_inventory = HttpInventoryService(url) if url else None
        _resolved = True
    return _current_inventory


def set_inventory(inventory: InventoryService | None) -> None:
    """Override the active inventory service (useful for tests)."""
    global _current_inventory, _resolved
    _current_inventory = inventory
    _resolved = True


def reset_inventory() -> None:
    """Forget the active service; the next call re-reads the environment."""
    global _current_inventory, _resolved
    _current_inventory = None
    _resolved = False
