"""StockAdjustment aggregate: the durable outbox for inventory updates.

An adjustment is saved in the same unit of work as the order or return
that caused it, then dispatched to the inventory service once that work has
committed. A failed dispatch leaves the entry for drain_stock_outbox.

State Machine:
    PENDING → APPLIED
    PENDING → FAILED → APPLIED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String, Text

from billing.domain import billing
from billing.inventory.port import StockLine
from billing.stock.events import (
    StockAdjustmentApplied,
    StockAdjustmentFailed,
    StockAdjustmentRequested,
)

MAX_ATTEMPTS = 5


class AdjustmentStatus(Enum):
    PENDING = "pending"
    APPLIED = "applied"
    FAILED = "failed"


class TransactionType(Enum):
    SALES = "sales"
    RETURN = "return"


@billing.aggregate
class StockAdjustment:
    organization_id: Identifier(required=True)
    transaction_type: String(choices=TransactionType, required=True)
    reference_type: String(required=True, max_length=30)  # sales_order, sales_return
    reference_id: Identifier(required=True)
    notes: String(max_length=255)
    items: Text(required=True)  # JSON: list of {item_id, quantity}
    status: String(choices=AdjustmentStatus, default=AdjustmentStatus.PENDING.value)
    attempts: Integer(default=0)
    last_error: Text()
    created_at: DateTime()
    applied_at: DateTime()

    @classmethod
    def request(cls, organization_id, transaction_type: TransactionType, reference_type, reference_id, notes, lines):
        """Queue a stock movement for ``lines`` of ``(item_id, quantity)``."""
        now = datetime.now(UTC)
        adjustment = cls(
            organization_id=organization_id,
            transaction_type=transaction_type.value,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes,
            items=json.dumps([{"item_id": str(item_id), "quantity": quantity} for item_id, quantity in lines]),
            status=AdjustmentStatus.PENDING.value,
            attempts=0,
            created_at=now,
        )
        adjustment.raise_(
            StockAdjustmentRequested(
                adjustment_id=str(adjustment.id),
                organization_id=str(organization_id),
                transaction_type=adjustment.transaction_type,
                reference_type=reference_type,
                reference_id=str(reference_id),
                requested_at=now,
            )
        )
        return adjustment

    def stock_lines(self) -> list[StockLine]:
        data = json.loads(self.items) if isinstance(self.items, str) else self.items
        return [StockLine(item_id=row["item_id"], quantity=int(round(row["quantity"]))) for row in data]

    @property
    def is_retryable(self) -> bool:
        return (
            self.status in (AdjustmentStatus.PENDING.value, AdjustmentStatus.FAILED.value)
            and (self.attempts or 0) < MAX_ATTEMPTS
        )

    def mark_applied(self) -> None:
        now = datetime.now(UTC)
        self.attempts = (self.attempts or 0) + 1
        self.status = AdjustmentStatus.APPLIED.value
        self.applied_at = now
        self.last_error = None
        self.raise_(
            StockAdjustmentApplied(
                adjustment_id=str(self.id),
                organization_id=str(self.organization_id),
                attempts=self.attempts,
                applied_at=now,
            )
        )

    def mark_failed(self, error: str) -> None:
        now = datetime.now(UTC)
        self.attempts = (self.attempts or 0) + 1
        self.status = AdjustmentStatus.FAILED.value
        self.last_error = error
        self.raise_(
            StockAdjustmentFailed(
                adjustment_id=str(self.id),
                organization_id=str(self.organization_id),
                attempts=self.attempts,
                error=error,
                failed_at=now,
            )
        )
