"""Domain tests for the StockAdjustment outbox entry."""

from billing.stock.adjustment import MAX_ATTEMPTS, AdjustmentStatus, StockAdjustment, TransactionType
from billing.stock.events import StockAdjustmentApplied, StockAdjustmentFailed, StockAdjustmentRequested


def _adjustment():
    return StockAdjustment.request(
        organization_id="org-001",
        transaction_type=TransactionType.SALES,
        reference_type="sales_order",
        reference_id="so-001",
        notes="Sales Order Created",
        lines=[("itm-001", 2.0), ("itm-002", 1.0)],
    )


def test_request_is_pending():
    adjustment = _adjustment()
    assert adjustment.status == AdjustmentStatus.PENDING.value
    assert adjustment.attempts == 0
    assert adjustment.is_retryable
    assert isinstance(adjustment._events[0], StockAdjustmentRequested)


def test_stock_lines_round_trip_the_items():
    lines = _adjustment().stock_lines()
    assert [(line.item_id, line.quantity) for line in lines] == [("itm-001", 2), ("itm-002", 1)]


def test_mark_applied():
    adjustment = _adjustment()
    adjustment.mark_applied()
    assert adjustment.status == AdjustmentStatus.APPLIED.value
    assert adjustment.attempts == 1
    assert not adjustment.is_retryable
    assert isinstance(adjustment._events[-1], StockAdjustmentApplied)


def test_failures_stop_being_retryable_after_max_attempts():
    adjustment = _adjustment()
    for _ in range(MAX_ATTEMPTS - 1):
        adjustment.mark_failed("timeout")
    assert adjustment.is_retryable
    adjustment.mark_failed("timeout")
    assert not adjustment.is_retryable
    assert adjustment.last_error == "timeout"
    assert isinstance(adjustment._events[-1], StockAdjustmentFailed)
