"""Stock outbox dispatch: event handler, drain command and the shared helper.

Dispatch is best-effort. A failure is recorded on the adjustment and logged;
it never unwinds the order or return that queued it.
"""

import structlog
from protean.fields import Integer
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from billing.domain import billing
from billing.inventory import get_inventory
from billing.shared.errors import CollaboratorError
from billing.stock.adjustment import AdjustmentStatus, StockAdjustment
from billing.stock.events import StockAdjustmentRequested

logger = structlog.get_logger(__name__)


def queue_stock_adjustment(organization_id, transaction_type, reference_type, reference_id, notes, lines) -> None:
    """Add an adjustment to the current unit of work when inventory is tracked."""
    if get_inventory() is None:
        return
    current_domain.repository_for(StockAdjustment).add(
        StockAdjustment.request(
            organization_id=organization_id,
            transaction_type=transaction_type,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
            lines=lines,
        )
    )


def dispatch_adjustment(adjustment: StockAdjustment) -> bool:
    """Send one adjustment to the inventory service and record the outcome."""
    inventory = get_inventory()
    if inventory is None:
        logger.warning("Inventory service not configured, adjustment left queued", adjustment_id=str(adjustment.id))
        return False

    try:
        inventory.update_stock(
            items=adjustment.stock_lines(),
            transaction_type=adjustment.transaction_type,
            reference_type=adjustment.reference_type,
            reference_id=str(adjustment.reference_id),
            notes=adjustment.notes or "",
        )
    except CollaboratorError as exc:
        adjustment.mark_failed(str(exc))
        logger.error(
            "Stock adjustment dispatch failed",
            adjustment_id=str(adjustment.id),
            reference_id=str(adjustment.reference_id),
            attempts=adjustment.attempts,
            error=str(exc),
        )
        current_domain.repository_for(StockAdjustment).add(adjustment)
        return False

    adjustment.mark_applied()
    current_domain.repository_for(StockAdjustment).add(adjustment)
    logger.info(
        "Stock adjustment applied",
        adjustment_id=str(adjustment.id),
        transaction_type=adjustment.transaction_type,
        reference_id=str(adjustment.reference_id),
    )
    return True


@billing.event_handler(part_of=StockAdjustment)
class StockAdjustmentDispatcher:
    """Dispatches a queued adjustment once the work that queued it has committed."""

    @handle(StockAdjustmentRequested)
    def on_adjustment_requested(self, event: StockAdjustmentRequested) -> None:
        adjustment = current_domain.repository_for(StockAdjustment).get(event.adjustment_id)
        if adjustment.status != AdjustmentStatus.PENDING.value:
            return  # Already handled by a drain run
        dispatch_adjustment(adjustment)


@billing.command(part_of="StockAdjustment")
class DrainStockOutbox:
    """Retry every pending or failed stock adjustment."""

    limit: Integer(default=100)


@billing.command_handler(part_of=StockAdjustment)
class DrainStockOutboxHandler:
    @handle(DrainStockOutbox)
    def drain(self, command: DrainStockOutbox):
        repo = current_domain.repository_for(StockAdjustment)
        candidates = [
            adjustment
            for status in (AdjustmentStatus.PENDING.value, AdjustmentStatus.FAILED.value)
            for adjustment in repo._dao.query.filter(status=status).all().items
            if adjustment.is_retryable
        ]
        candidates.sort(key=lambda adjustment: adjustment.created_at)
        batch = candidates[: command.limit or 100]

        applied = 0
        for adjustment in batch:
            if dispatch_adjustment(adjustment):
                applied += 1

        logger.info("Stock outbox drained", attempted=len(batch), applied=applied)
        return {"attempted": len(batch), "applied": applied}
