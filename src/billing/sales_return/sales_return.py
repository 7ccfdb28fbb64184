"""SalesReturn aggregate (CQRS): goods coming back from a shipped sales order.

Returns are numbered and approved as soon as they are created, then received
and finally refunded with a negative payment against the order's invoice.

State Machine:
    DRAFT → APPROVED → RECEIVED → REFUNDED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, HasMany, Identifier, Integer, String, Text

from billing.domain import billing
from billing.sales_return.events import (
    SalesReturnCreated,
    SalesReturnReceived,
    SalesReturnRefunded,
)
from billing.shared.totals import money


class SalesReturnStatus(Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    RECEIVED = "received"
    REFUNDED = "refunded"


_VALID_TRANSITIONS = {
    SalesReturnStatus.DRAFT: {SalesReturnStatus.APPROVED},
    SalesReturnStatus.APPROVED: {SalesReturnStatus.RECEIVED},
    SalesReturnStatus.RECEIVED: {SalesReturnStatus.REFUNDED},
    SalesReturnStatus.REFUNDED: set(),  # Terminal
}


@billing.entity(part_of="SalesReturn")
class SalesReturnItem:
    line_number = Integer(default=0)
    sales_order_item_id = Identifier(required=True)
    item_id = Identifier()
    returned_quantity = Float(required=True)
    unit_price = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    reason = String(max_length=500)


def check_return_lines(order, lines_data: list[dict]) -> list[dict]:
    """Match return lines to order lines and enforce quantity limits.

    Returns the lines enriched with the order line's item, price and tax.
    Any mismatch rejects the whole return.
    """
    if not lines_data:
        raise ValidationError({"items": ["at least one item is required"]})

    errors = []
    resolved = []
    for index, data in enumerate(lines_data, start=1):
        order_item = order.find_item(data.get("sales_order_item_id"))
        if order_item is None:
            errors.append(f"item {index}: sales order item not found")
            continue

        quantity = float(data.get("returned_quantity") or 0.0)
        if quantity <= 0:
            errors.append(f"item {index}: returned quantity must be greater than 0")
            continue
        if quantity > order_item.quantity:
            errors.append(
                f"item {index}: returned quantity ({quantity:.2f}) exceeds original quantity "
                f"({order_item.quantity:.2f})"
            )
            continue

        unit_price = data.get("unit_price")
        if unit_price is None:
            unit_price = order_item.unit_price
        tax = data.get("tax")
        if tax is None:
            # Order-line tax, pro rata to the quantity coming back
            tax = money((order_item.tax or 0.0) * quantity / order_item.quantity)
        resolved.append(
            {
                "sales_order_item_id": str(order_item.id),
                "item_id": str(order_item.item_id),
                "returned_quantity": quantity,
                "unit_price": float(unit_price),
                "tax": float(tax),
                "reason": data.get("reason"),
            }
        )

    if errors:
        raise ValidationError({"items": errors})
    return resolved


@billing.aggregate
class SalesReturn:
    organization_id = Identifier(required=True)
    sales_order_id = Identifier(required=True)
    return_number = String(max_length=50)
    return_date = Date()
    status = String(choices=SalesReturnStatus, default=SalesReturnStatus.DRAFT.value)
    return_amount = Float(default=0.0)
    return_reason = Text()
    notes = Text()
    receiving_notes = Text()
    approved_date = DateTime()
    received_date = DateTime()
    refunded_date = DateTime()
    refund_payment_id = Identifier()
    items = HasMany(SalesReturnItem)

    created_at = DateTime()
    updated_at = DateTime()
    deleted_at = DateTime()

    @classmethod
    def open(cls, order, return_number: str, lines: list[dict], reason: str, notes: str | None = None, return_date=None):
        """Create and approve a return for ``order``.

        ``lines`` must already have passed ``check_return_lines``.
        """
        if not order.can_return():
            raise ValidationError(
                {
                    "sales_order_id": [
                        "sales order must be paid and shipped to create a return "
                        f"(current status: {order.status}, shipped: {order.shipped_date is not None})"
                    ]
                }
            )

        now = datetime.now(UTC)
        sales_return = cls(
            organization_id=order.organization_id,
            sales_order_id=str(order.id),
            return_date=return_date or now.date(),
            status=SalesReturnStatus.DRAFT.value,
            return_reason=reason,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for position, data in enumerate(lines, start=1):
            quantity = data["returned_quantity"]
            unit_price = data.get("unit_price") or 0.0
            tax = data.get("tax") or 0.0
            sales_return.add_items(
                SalesReturnItem(
                    line_number=position,
                    sales_order_item_id=data["sales_order_item_id"],
                    item_id=data.get("item_id"),
                    returned_quantity=quantity,
                    unit_price=unit_price,
                    tax=tax,
                    total=money(quantity * unit_price + tax),
                    reason=data.get("reason"),
                )
            )
        sales_return.calculate_amount()
        sales_return.validate()

        sales_return.return_number = return_number
        sales_return._transition(SalesReturnStatus.APPROVED, now)
        sales_return.approved_date = now

        sales_return.raise_(
            SalesReturnCreated(
                sales_return_id=str(sales_return.id),
                organization_id=str(sales_return.organization_id),
                sales_order_id=str(order.id),
                return_number=return_number,
                return_amount=sales_return.return_amount,
                created_at=now,
            )
        )
        return sales_return

    def validate(self) -> None:
        errors = {}
        if not (self.return_reason or "").strip():
            errors["return_reason"] = ["return reason is required"]
        if not self.items:
            errors["items"] = ["at least one item is required"]
        else:
            item_errors = [
                f"item {index}: returned quantity must be greater than 0"
                for index, item in enumerate(self.sorted_items(), start=1)
                if (item.returned_quantity or 0.0) <= 0
            ]
            if item_errors:
                errors["items"] = item_errors
        if errors:
            raise ValidationError(errors)

    def calculate_amount(self) -> None:
        self.return_amount = money(sum(item.total or 0.0 for item in self.items))

    def sorted_items(self) -> list:
        return sorted(self.items, key=lambda item: item.line_number or 0)

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def assert_can_transition(self, target: SalesReturnStatus) -> None:
        try:
            current = SalesReturnStatus(self.status)
        except ValueError:
            raise ValidationError({"status": [f"unknown current status: {self.status}"]}) from None
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"cannot transition from {current.value} to {target.value}"]})

    def _transition(self, target: SalesReturnStatus, now: datetime) -> None:
        self.assert_can_transition(target)
        self.status = target.value
        self.updated_at = now

    def can_edit(self) -> bool:
        return self.status in (SalesReturnStatus.DRAFT.value, SalesReturnStatus.APPROVED.value)

    def can_receive(self) -> bool:
        return self.status == SalesReturnStatus.APPROVED.value

    def can_refund(self) -> bool:
        return self.status == SalesReturnStatus.RECEIVED.value and not self.refund_payment_id

    # -------------------------------------------------------------------
    # Behaviour
    # -------------------------------------------------------------------
    def receive(self, receiving_notes: str | None = None) -> None:
        if not self.can_receive():
            raise ValidationError(
                {"status": [f"cannot receive sales return in {self.status} status - only APPROVED returns can be received"]}
            )
        now = datetime.now(UTC)
        self._transition(SalesReturnStatus.RECEIVED, now)
        self.received_date = now
        self.receiving_notes = receiving_notes
        self.raise_(
            SalesReturnReceived(
                sales_return_id=str(self.id),
                organization_id=str(self.organization_id),
                sales_order_id=str(self.sales_order_id),
                received_at=now,
            )
        )

    def assert_refundable(self) -> None:
        if not self.can_refund():
            raise ValidationError(
                {"status": [f"cannot process refund for sales return in {self.status} status or refund already processed"]}
            )

    def mark_refunded(self, refund_payment_id: str) -> None:
        self.assert_refundable()
        now = datetime.now(UTC)
        self._transition(SalesReturnStatus.REFUNDED, now)
        self.refund_payment_id = refund_payment_id
        self.refunded_date = now
        self.raise_(
            SalesReturnRefunded(
                sales_return_id=str(self.id),
                organization_id=str(self.organization_id),
                sales_order_id=str(self.sales_order_id),
                refund_payment_id=str(refund_payment_id),
                return_amount=self.return_amount,
                refunded_at=now,
            )
        )
