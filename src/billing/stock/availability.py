"""Pre-commit stock availability check for order lines."""

import structlog
from protean.exceptions import ValidationError

from billing.inventory import get_inventory
from billing.inventory.port import StockLine
from billing.shared.errors import CollaboratorError

logger = structlog.get_logger(__name__)


def stock_lines(items_data: list[dict]) -> list[StockLine]:
    return [StockLine(item_id=str(data["item_id"]), quantity=int(round(float(data["quantity"])))) for data in items_data]


def ensure_stock_available(items_data: list[dict]) -> None:
    """Reject the whole operation when any line cannot be supplied.

    Does nothing when no inventory service is configured.
    """
    inventory = get_inventory()
    if inventory is None:
        return

    try:
        shortages = inventory.check_availability(stock_lines(items_data))
    except CollaboratorError as exc:
        logger.error("Stock check failed", error=str(exc))
        raise ValidationError({"stock": [f"failed to check stock availability: {exc}"]}) from exc

    if shortages:
        details = ", ".join(
            f"{shortage.name} (requested: {shortage.requested}, available: {shortage.available})"
            for shortage in shortages
        )
        raise ValidationError({"stock": [f"stock unavailable for items: {details}"]})
