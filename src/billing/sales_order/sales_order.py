"""SalesOrder aggregate (CQRS): a customer order that is invoiced, paid and shipped.

Totals follow the invoice rules with tax deducted (TDS) and collected (TCS)
at source folded in: ``total = sub_total - discount + tax - TDS + TCS``.

State Machine:
    DRAFT → CONFIRMED → INVOICED → PARTIALLY_PAID → PAID → SHIPPED → COMPLETED
    INVOICED → PAID
    DRAFT/CONFIRMED → CANCELLED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, HasMany, Identifier, Integer, String, Text

from billing.domain import billing
from billing.invoice.invoice import build_line
from billing.sales_order.events import (
    SalesOrderCancelled,
    SalesOrderCompleted,
    SalesOrderConfirmed,
    SalesOrderCreated,
    SalesOrderInvoiced,
    SalesOrderPaid,
    SalesOrderPartiallyPaid,
    SalesOrderShipped,
    SalesOrderUpdated,
)
from billing.shared.totals import money, summarize_lines


class SalesOrderStatus(Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    INVOICED = "invoiced"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    SalesOrderStatus.DRAFT: {SalesOrderStatus.CONFIRMED, SalesOrderStatus.CANCELLED},
    SalesOrderStatus.CONFIRMED: {SalesOrderStatus.INVOICED, SalesOrderStatus.CANCELLED},
    SalesOrderStatus.INVOICED: {SalesOrderStatus.PARTIALLY_PAID, SalesOrderStatus.PAID},
    SalesOrderStatus.PARTIALLY_PAID: {SalesOrderStatus.PAID},
    SalesOrderStatus.PAID: {SalesOrderStatus.SHIPPED},
    SalesOrderStatus.SHIPPED: {SalesOrderStatus.COMPLETED},
    SalesOrderStatus.COMPLETED: set(),  # Terminal
    SalesOrderStatus.CANCELLED: set(),  # Terminal
}

EDITABLE_FIELDS = ("contact_id", "order_date", "currency", "tds_amount", "tcs_amount", "terms", "notes")


@billing.entity(part_of="SalesOrder")
class SalesOrderItem:
    """A line on a sales order; ``metadata`` is opaque to billing."""

    line_number = Integer(default=0)
    item_id = Identifier(required=True)
    item_type = String(max_length=20, default="goods")
    name = String(required=True, max_length=255)
    description = Text()
    quantity = Float(required=True)
    unit_price = Float(required=True)
    discount = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    metadata = Text()


@billing.aggregate
class SalesOrder:
    organization_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    contact_id = Identifier()
    order_number = String(max_length=50)  # Assigned on confirm
    order_date = Date()
    status = String(choices=SalesOrderStatus, default=SalesOrderStatus.DRAFT.value)

    sub_total = Float(default=0.0)
    discount_total = Float(default=0.0)
    tax_total = Float(default=0.0)
    tds_amount = Float(default=0.0)
    tcs_amount = Float(default=0.0)
    total_amount = Float(default=0.0)
    currency = String(max_length=3, default="USD")

    invoice_id = Identifier()
    shipped_date = DateTime()
    terms = Text()
    notes = Text()
    items = HasMany(SalesOrderItem)

    created_at = DateTime()
    updated_at = DateTime()
    deleted_at = DateTime()

    @classmethod
    def create(cls, organization_id, customer_id, items_data, **header):
        """Create a draft order from resolved line dicts."""
        now = datetime.now(UTC)
        order = cls(
            organization_id=organization_id,
            customer_id=customer_id,
            status=SalesOrderStatus.DRAFT.value,
            order_date=header.pop("order_date", None) or now.date(),
            created_at=now,
            updated_at=now,
            **{key: value for key, value in header.items() if value is not None},
        )
        order._replace_items(items_data)
        order.calculate_totals()
        order.validate()

        order.raise_(
            SalesOrderCreated(
                sales_order_id=str(order.id),
                organization_id=str(organization_id),
                customer_id=str(customer_id),
                total_amount=order.total_amount,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Validation and totals
    # -------------------------------------------------------------------
    def validate(self) -> None:
        """Check the order is complete enough to persist."""
        errors = {}
        if not self.organization_id:
            errors["organization_id"] = ["organization_id is required"]
        if not self.customer_id:
            errors["customer_id"] = ["customer_id is required"]
        if not self.items:
            errors["items"] = ["at least one item is required"]
        else:
            item_errors = []
            for index, item in enumerate(self.sorted_items(), start=1):
                if (item.quantity or 0.0) <= 0:
                    item_errors.append(f"item {index}: quantity must be greater than 0")
                if (item.unit_price or 0.0) < 0:
                    item_errors.append(f"item {index}: unit price cannot be negative")
            if item_errors:
                errors["items"] = item_errors
        if (self.total_amount or 0.0) < 0:
            errors["total_amount"] = ["total amount cannot be negative"]
        if errors:
            raise ValidationError(errors)

    def calculate_totals(self) -> None:
        summary = summarize_lines(self.items)
        self.sub_total = summary.sub_total
        self.discount_total = summary.discount_total
        self.tax_total = summary.tax_total
        self.total_amount = money(
            summary.sub_total
            - summary.discount_total
            + summary.tax_total
            - (self.tds_amount or 0.0)
            + (self.tcs_amount or 0.0)
        )

    def _replace_items(self, items_data) -> None:
        for item in list(self.items):
            self.remove_items(item)
        for position, data in enumerate(items_data or [], start=1):
            self.add_items(build_line(position, data, entity_cls=SalesOrderItem))

    def sorted_items(self) -> list:
        return sorted(self.items, key=lambda item: item.line_number or 0)

    def find_item(self, item_id):
        return next((item for item in self.items if str(item.id) == str(item_id)), None)

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def assert_can_transition(self, target: SalesOrderStatus) -> None:
        try:
            current = SalesOrderStatus(self.status)
        except ValueError:
            raise ValidationError({"status": [f"unknown current status: {self.status}"]}) from None
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"cannot transition from {current.value} to {target.value}"]})

    def can_transition_to(self, target: SalesOrderStatus) -> bool:
        try:
            self.assert_can_transition(target)
        except ValidationError:
            return False
        return True

    def can_edit(self) -> bool:
        return self.status == SalesOrderStatus.DRAFT.value

    def can_confirm(self) -> bool:
        return self.status == SalesOrderStatus.DRAFT.value

    def can_create_invoice(self) -> bool:
        return self.status == SalesOrderStatus.CONFIRMED.value and not self.invoice_id

    def can_ship(self) -> bool:
        return self.status == SalesOrderStatus.PAID.value and self.shipped_date is None

    def can_return(self) -> bool:
        return (
            self.status in (SalesOrderStatus.PAID.value, SalesOrderStatus.SHIPPED.value)
            and self.shipped_date is not None
        )

    def can_cancel(self) -> bool:
        return self.status == SalesOrderStatus.DRAFT.value or (
            self.status == SalesOrderStatus.CONFIRMED.value and not self.invoice_id
        )

    # -------------------------------------------------------------------
    # Behaviour
    # -------------------------------------------------------------------
    def update_details(self, items_data=None, **fields) -> None:
        if not self.can_edit():
            raise ValidationError(
                {"status": [f"cannot edit sales order in {self.status} status - only DRAFT orders can be edited"]}
            )
        for key, value in fields.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(self, key, value)
        if items_data is not None:
            self._replace_items(items_data)
        self.calculate_totals()
        self.validate()

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            SalesOrderUpdated(
                sales_order_id=str(self.id),
                organization_id=str(self.organization_id),
                total_amount=self.total_amount,
                updated_at=now,
            )
        )

    def confirm(self, order_number: str) -> None:
        if not self.can_confirm():
            raise ValidationError(
                {"status": [f"cannot confirm sales order in {self.status} status - only DRAFT orders can be confirmed"]}
            )
        self.assert_can_transition(SalesOrderStatus.CONFIRMED)
        now = datetime.now(UTC)
        self.order_number = order_number
        self.status = SalesOrderStatus.CONFIRMED.value
        self.updated_at = now
        self.raise_(
            SalesOrderConfirmed(
                sales_order_id=str(self.id),
                organization_id=str(self.organization_id),
                order_number=order_number,
                confirmed_at=now,
            )
        )

    def mark_invoiced(self, invoice_id: str) -> None:
        if not self.can_create_invoice():
            raise ValidationError(
                {"status": [f"cannot create invoice for sales order in {self.status} status or invoice already exists"]}
            )
        self.assert_can_transition(SalesOrderStatus.INVOICED)
        now = datetime.now(UTC)
        self.invoice_id = invoice_id
        self.status = SalesOrderStatus.INVOICED.value
        self.updated_at = now
        self.raise_(
            SalesOrderInvoiced(
                sales_order_id=str(self.id),
                organization_id=str(self.organization_id),
                invoice_id=str(invoice_id),
                invoiced_at=now,
            )
        )

    def mark_partially_paid(self) -> None:
        self.assert_can_transition(SalesOrderStatus.PARTIALLY_PAID)
        now = datetime.now(UTC)
        self.status = SalesOrderStatus.PARTIALLY_PAID.value
        self.updated_at = now
        self.raise_(
            SalesOrderPartiallyPaid(
                sales_order_id=str(self.id),
                organization_id=str(self.organization_id),
                invoice_id=str(self.invoice_id),
                changed_at=now,
            )
        )

    def mark_paid(self) -> None:
        self.assert_can_transition(SalesOrderStatus.PAID)
        now = datetime.now(UTC)
        self.status = SalesOrderStatus.PAID.value
        self.updated_at = now
        self.raise_(
            SalesOrderPaid(
                sales_order_id=str(self.id),
                organization_id=str(self.organization_id),
                invoice_id=str(self.invoice_id),
                changed_at=now,
            )
        )

    def ship(self) -> None:
        if not self.can_ship():
            raise ValidationError(
                {"status": [f"cannot mark sales order as shipped in {self.status} status or already shipped"]}
            )
        self.assert_can_transition(SalesOrderStatus.SHIPPED)
        now = datetime.now(UTC)
        self.status = SalesOrderStatus.SHIPPED.value
        self.shipped_date = now
        self.updated_at = now
        self.raise_(
            SalesOrderShipped(
                sales_order_id=str(self.id),
                organization_id=str(self.organization_id),
                shipped_at=now,
            )
        )

    def complete(self) -> None:
        self.assert_can_transition(SalesOrderStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = SalesOrderStatus.COMPLETED.value
        self.updated_at = now
        self.raise_(
            SalesOrderCompleted(
                sales_order_id=str(self.id),
                organization_id=str(self.organization_id),
                completed_at=now,
            )
        )

    def cancel(self, reason: str | None = None) -> None:
        if not self.can_cancel():
            raise ValidationError(
                {"status": [f"cannot cancel sales order in {self.status} status or invoice already created"]}
            )
        self.assert_can_transition(SalesOrderStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = SalesOrderStatus.CANCELLED.value
        if reason:
            self.notes = f"{self.notes or ''}\n\nCancellation Reason: {reason}"
        self.updated_at = now
        self.raise_(
            SalesOrderCancelled(
                sales_order_id=str(self.id),
                organization_id=str(self.organization_id),
                reason=reason,
                cancelled_at=now,
            )
        )
