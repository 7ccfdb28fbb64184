"""Inventory service port (abstract interface).

Billing asks the inventory service two things: whether enough stock exists
for a set of items, and to record a stock movement once an order or a
refund has been committed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StockLine:
    """A quantity of one item."""

    item_id: str
    quantity: int


@dataclass(frozen=True)
class Shortage:
    """An item that cannot be supplied in the requested quantity."""

    item_id: str
    name: str
    requested: int
    available: int


class InventoryService(ABC):
    """Abstract inventory service interface."""

    @abstractmethod
    def check_availability(self, items: list[StockLine]) -> list[Shortage]:
        """Return the lines that cannot be supplied; empty means all available."""
        ...

    @abstractmethod
    def update_stock(
        self,
        items: list[StockLine],
        transaction_type: str,
        reference_type: str,
        reference_id: str,
        notes: str,
    ) -> None:
        """Record a stock movement. Raises CollaboratorError on failure."""
        ...
