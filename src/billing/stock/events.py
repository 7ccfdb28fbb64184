"""Domain events for the StockAdjustment outbox."""

from protean.fields import DateTime, Identifier, Integer, String

from billing.domain import billing


@billing.event(part_of="StockAdjustment")
class StockAdjustmentRequested:
    """A stock movement was queued alongside a business change."""

    __version__ = 1

    adjustment_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    transaction_type = String(required=True)
    reference_type = String(required=True)
    reference_id = Identifier(required=True)
    requested_at = DateTime(required=True)


@billing.event(part_of="StockAdjustment")
class StockAdjustmentApplied:
    __version__ = 1

    adjustment_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    attempts = Integer(required=True)
    applied_at = DateTime(required=True)


@billing.event(part_of="StockAdjustment")
class StockAdjustmentFailed:
    __version__ = 1

    adjustment_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    attempts = Integer(required=True)
    error = String(required=True)
    failed_at = DateTime(required=True)
