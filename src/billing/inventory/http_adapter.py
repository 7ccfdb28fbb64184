"""HTTP adapter for the inventory service.

Calls are synchronous with a bounded timeout. Transport errors and non-2xx
answers surface as CollaboratorError.
"""

import requests
import structlog

from billing.inventory.port import InventoryService, Shortage, StockLine
from billing.shared.errors import CollaboratorError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class HttpInventoryService(InventoryService):
    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, path: str, payload: dict) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Inventory service unreachable", url=url, error=str(exc))
            raise CollaboratorError("inventory", str(exc)) from exc

        if response.status_code >= 400:
            raise CollaboratorError("inventory", f"service returned status: {response.status_code}")
        return response.json() if response.content else {}

    def check_availability(self, items: list[StockLine]) -> list[Shortage]:
        body = self._post(
            "/api/v1/stock/check",
            {"items": [{"item_id": line.item_id, "quantity": line.quantity} for line in items]},
        )
        data = body.get("data") or {}
        return [
            Shortage(
                item_id=row.get("item_id", ""),
                name=row.get("name") or row.get("item_id", ""),
                requested=int(row.get("requested") or 0),
                available=int(row.get("available") or 0),
            )
            for row in data.get("unavailable_items") or []
        ]

    def update_stock(
        self,
        items: list[StockLine],
        transaction_type: str,
        reference_type: str,
        reference_id: str,
        notes: str,
    ) -> None:
        self._post(
            "/api/v1/stock/transactions",
            {
                "items": [{"item_id": line.item_id, "quantity": line.quantity} for line in items],
                "transaction_type": transaction_type,
                "reference_type": reference_type,
                "reference_id": reference_id,
                "notes": notes,
            },
        )
