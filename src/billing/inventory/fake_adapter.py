"""In-memory inventory service for development and testing.

Items without a configured level are treated as always available. Stock
movements adjust the configured levels: ``sales`` decrements and ``return``
increments.
"""

from billing.inventory.port import InventoryService, Shortage, StockLine
from billing.shared.errors import CollaboratorError


class FakeInventoryService(InventoryService):
    """Configurable fake inventory service."""

    def __init__(self) -> None:
        self.levels: dict[str, int] = {}
        self.names: dict[str, str] = {}
        self.available: bool = True
        self.fail_updates: bool = False
        self.calls: list[dict] = []

    def set_stock(self, item_id: str, quantity: int, name: str | None = None) -> None:
        self.levels[str(item_id)] = quantity
        if name:
            self.names[str(item_id)] = name

    def configure(self, available: bool = True, fail_updates: bool = False) -> None:
        """``available=False`` makes every call fail as if the service were down."""
        self.available = available
        self.fail_updates = fail_updates

    def check_availability(self, items: list[StockLine]) -> list[Shortage]:
        self.calls.append({"method": "check_availability", "items": list(items)})
        if not self.available:
            raise CollaboratorError("inventory", "service unavailable")

        shortages = []
        for line in items:
            level = self.levels.get(str(line.item_id))
            if level is not None and level < line.quantity:
                shortages.append(
                    Shortage(
                        item_id=str(line.item_id),
                        name=self.names.get(str(line.item_id), str(line.item_id)),
                        requested=line.quantity,
                        available=level,
                    )
                )
        return shortages

    def update_stock(
        self,
        items: list[StockLine],
        transaction_type: str,
        reference_type: str,
        reference_id: str,
        notes: str,
    ) -> None:
        self.calls.append(
            {
                "method": "update_stock",
                "items": list(items),
                "transaction_type": transaction_type,
                "reference_type": reference_type,
                "reference_id": reference_id,
                "notes": notes,
            }
        )
        if not self.available or self.fail_updates:
            raise CollaboratorError("inventory", "stock update rejected")

        sign = -1 if transaction_type == "sales" else 1
        for line in items:
            key = str(line.item_id)
            if key in self.levels:
                self.levels[key] += sign * line.quantity
