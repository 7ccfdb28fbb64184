"""Invoice aggregate (CQRS): the settlement record.

An invoice is created as a DRAFT without a number, numbered when it is sent,
and settled by payments. ``paid_amount`` only moves through payment
application, reversal (void) and refunds, and ``balance_amount`` is always
``total_amount - paid_amount``.

State Machine:
    DRAFT → SENT → PAID → VOID
    DRAFT → VOID
    SENT → OVERDUE → PAID
    SENT/OVERDUE → VOID
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Date,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from billing.domain import billing
from billing.invoice.events import (
    InvoiceCreated,
    InvoiceDeleted,
    InvoicePaid,
    InvoicePartiallyPaid,
    InvoicePaymentReversed,
    InvoiceRefunded,
    InvoiceSent,
    InvoiceStatusChanged,
    InvoiceUpdated,
)
from billing.shared.totals import line_total, money, summarize_lines


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class InvoiceStatus(Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    VOID = "void"


class SourceSystem(Enum):
    FSM = "FSM"
    CRM = "CRM"
    INVENTORY = "INVENTORY"
    MANUAL = "MANUAL"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    InvoiceStatus.DRAFT: {InvoiceStatus.SENT, InvoiceStatus.VOID},
    InvoiceStatus.SENT: {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.VOID},
    InvoiceStatus.OVERDUE: {InvoiceStatus.PAID, InvoiceStatus.VOID},
    InvoiceStatus.PAID: {InvoiceStatus.VOID},
    InvoiceStatus.VOID: set(),  # Terminal
}

# Header fields that may be edited while the invoice is a draft
EDITABLE_FIELDS = (
    "subject",
    "contact_id",
    "owner_id",
    "reference_no",
    "sales_order",
    "purchase_order",
    "invoice_date",
    "due_date",
    "currency",
    "adjustment",
    "excise_duty",
    "sales_commission",
    "tds_amount",
    "tcs_amount",
    "terms",
    "notes",
)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@billing.value_object(part_of="Invoice")
class Address:
    """A billing or shipping address snapshot taken when the invoice is written."""

    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    code = String(max_length=20)
    country = String(max_length=100)


def address_from(data: dict | None) -> Address | None:
    """Build an Address from a plain dict, ignoring unknown keys."""
    if not data:
        return None
    return Address(**{key: data.get(key) for key in ("street", "city", "state", "code", "country")})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@billing.entity(part_of="Invoice")
class InvoiceItem:
    """A line on an invoice.

    ``metadata`` belongs to the module that produced the line (a technician
    id from field service, a deal id from CRM, ...). It is stored as raw JSON
    and handed back untouched.
    """

    line_number = Integer(default=0)
    item_id = Identifier(required=True)
    item_type = String(max_length=20, default="service")
    name = String(required=True, max_length=255)
    description = Text()
    quantity = Float(required=True)
    unit_price = Float(required=True)
    discount = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    metadata = Text()


def build_line(position: int, data: dict, entity_cls=InvoiceItem):
    """Turn one resolved line dict into an item entity with its total."""
    metadata = data.get("metadata")
    if metadata is not None and not isinstance(metadata, str):
        metadata = json.dumps(metadata)

    quantity = float(data["quantity"])
    unit_price = float(data.get("unit_price") or 0.0)
    discount = float(data.get("discount") or 0.0)
    tax = float(data.get("tax") or 0.0)
    return entity_cls(
        line_number=position,
        item_id=str(data["item_id"]),
        item_type=data.get("item_type") or "service",
        name=data["name"],
        description=data.get("description"),
        quantity=quantity,
        unit_price=unit_price,
        discount=discount,
        tax=tax,
        total=line_total(quantity, unit_price, discount, tax),
        metadata=metadata,
    )


def validate_lines(items_data: list[dict]) -> None:
    """Reject empty item lists, non-positive quantities and negative prices."""
    if not items_data:
        raise ValidationError({"items": ["at least one item is required"]})

    errors = []
    for index, data in enumerate(items_data, start=1):
        if float(data.get("quantity") or 0.0) <= 0:
            errors.append(f"item {index}: quantity must be greater than 0")
        if float(data.get("unit_price") or 0.0) < 0:
            errors.append(f"item {index}: unit price cannot be negative")
    if errors:
        raise ValidationError({"items": errors})


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@billing.aggregate
class Invoice:
    organization_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    contact_id = Identifier()
    owner_id = Identifier()
    subject = String(required=True, max_length=255)
    invoice_number = String(max_length=50)  # Assigned on send

    # Origin
    source_system = String(choices=SourceSystem, default=SourceSystem.MANUAL.value)
    source_reference_id = String(max_length=255)  # Opaque to billing
    sales_order_id = Identifier()

    reference_no = String(max_length=100)
    sales_order = String(max_length=100)
    purchase_order = String(max_length=100)
    invoice_date = Date()
    due_date = Date()
    status = String(choices=InvoiceStatus, default=InvoiceStatus.DRAFT.value)

    # Amounts
    sub_total = Float(default=0.0)
    discount_total = Float(default=0.0)
    tax_total = Float(default=0.0)
    adjustment = Float(default=0.0)
    excise_duty = Float(default=0.0)
    sales_commission = Float(default=0.0)
    tds_amount = Float(default=0.0)
    tcs_amount = Float(default=0.0)
    total_amount = Float(default=0.0)
    paid_amount = Float(default=0.0)
    balance_amount = Float(default=0.0)
    currency = String(max_length=3, default="USD")

    terms = Text()
    notes = Text()
    billing_address = ValueObject(Address)
    shipping_address = ValueObject(Address)
    pdf_path = String(max_length=500)
    items = HasMany(InvoiceItem)

    # Concurrency token, bumped on every mutation
    version = Integer(default=1)

    created_at = DateTime()
    updated_at = DateTime()
    deleted_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        organization_id: str,
        customer_id: str,
        subject: str,
        items_data: list[dict],
        source_system: str = SourceSystem.MANUAL.value,
        billing_address: dict | None = None,
        shipping_address: dict | None = None,
        **header,
    ):
        """Create a draft invoice from resolved line dicts.

        Each line dict carries ``item_id``, ``name``, ``quantity`` and
        ``unit_price`` plus optional ``item_type``, ``description``,
        ``discount``, ``tax`` and ``metadata``. Remaining keyword arguments
        are header fields (dates, references, adjustment, TDS/TCS, ...).
        """
        validate_lines(items_data)
        now = datetime.now(UTC)

        invoice = cls(
            organization_id=organization_id,
            customer_id=customer_id,
            subject=subject,
            source_system=source_system or SourceSystem.MANUAL.value,
            status=InvoiceStatus.DRAFT.value,
            billing_address=address_from(billing_address),
            shipping_address=address_from(shipping_address),
            invoice_date=header.pop("invoice_date", None) or now.date(),
            created_at=now,
            updated_at=now,
            **{key: value for key, value in header.items() if value is not None},
        )
        for position, data in enumerate(items_data, start=1):
            invoice.add_items(build_line(position, data))
        invoice.calculate_totals()

        invoice.raise_(
            InvoiceCreated(
                invoice_id=str(invoice.id),
                organization_id=str(organization_id),
                customer_id=str(customer_id),
                source_system=invoice.source_system,
                source_reference_id=invoice.source_reference_id,
                sales_order_id=invoice.sales_order_id,
                total_amount=invoice.total_amount,
                created_at=now,
            )
        )
        return invoice

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def _current_status(self) -> InvoiceStatus:
        try:
            return InvoiceStatus(self.status)
        except ValueError:
            raise ValidationError({"status": [f"unknown current status: {self.status}"]}) from None

    def assert_can_transition(self, target: InvoiceStatus) -> None:
        """Raise unless ``target`` is reachable from the current status."""
        current = self._current_status()
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"cannot transition from {current.value} to {target.value}"]})

    def can_transition_to(self, target: InvoiceStatus) -> bool:
        try:
            self.assert_can_transition(target)
        except ValidationError:
            return False
        return True

    def can_edit(self) -> bool:
        return self.status == InvoiceStatus.DRAFT.value

    def can_send(self) -> bool:
        return self.status == InvoiceStatus.DRAFT.value

    def can_receive_payment(self) -> bool:
        return self.status == InvoiceStatus.SENT.value

    def can_refund(self) -> bool:
        return self.status == InvoiceStatus.PAID.value

    def calculate_status(self) -> str:
        """Derive the status implied by the amounts.

        A settled balance with money received means PAID whatever the stored
        status; anything else keeps the stored status.
        """
        if money(self.balance_amount) <= 0 and money(self.paid_amount) > 0:
            return InvoiceStatus.PAID.value
        return self.status

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def calculate_totals(self) -> None:
        """Recompute every derived amount from the line items."""
        summary = summarize_lines(self.items)
        self.sub_total = summary.sub_total
        self.discount_total = summary.discount_total
        self.tax_total = summary.tax_total
        self.total_amount = money(
            summary.sub_total
            - summary.discount_total
            + summary.tax_total
            + (self.adjustment or 0.0)
            + (self.excise_duty or 0.0)
            - (self.tds_amount or 0.0)
            + (self.tcs_amount or 0.0)
        )
        self.balance_amount = money(self.total_amount - (self.paid_amount or 0.0))

    def _touch(self, now: datetime | None = None) -> datetime:
        now = now or datetime.now(UTC)
        self.updated_at = now
        self.version = (self.version or 0) + 1
        return now

    def assert_version(self, expected_version: int | None) -> None:
        """Reject a write based on a stale read of this invoice."""
        if expected_version is not None and expected_version != self.version:
            raise ValidationError(
                {
                    "version": [
                        f"invoice was modified concurrently (expected version {expected_version}, "
                        f"current version {self.version})"
                    ]
                }
            )

    # -------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------
    def update_details(
        self,
        items_data: list[dict] | None = None,
        billing_address: dict | None = None,
        shipping_address: dict | None = None,
        **fields,
    ) -> None:
        """Edit header fields and, optionally, replace every line item."""
        if not self.can_edit():
            raise ValidationError(
                {"status": [f"cannot edit invoice in {self.status} status - only DRAFT invoices can be edited"]}
            )

        for key, value in fields.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(self, key, value)
        if billing_address is not None:
            self.billing_address = address_from(billing_address)
        if shipping_address is not None:
            self.shipping_address = address_from(shipping_address)

        if items_data is not None:
            validate_lines(items_data)
            for item in list(self.items):
                self.remove_items(item)
            for position, data in enumerate(items_data, start=1):
                self.add_items(build_line(position, data))

        self.calculate_totals()
        now = self._touch()
        self.raise_(
            InvoiceUpdated(
                invoice_id=str(self.id),
                organization_id=str(self.organization_id),
                total_amount=self.total_amount,
                balance_amount=self.balance_amount,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------
    def send(self, invoice_number: str) -> None:
        """Number the invoice and move it to SENT."""
        if not self.can_send():
            raise ValidationError(
                {"status": [f"cannot send invoice in {self.status} status - only DRAFT invoices can be sent"]}
            )
        self.assert_can_transition(InvoiceStatus.SENT)

        self.invoice_number = invoice_number
        self.status = InvoiceStatus.SENT.value
        now = self._touch()

        self.raise_(
            InvoiceSent(
                invoice_id=str(self.id),
                organization_id=str(self.organization_id),
                invoice_number=invoice_number,
                total_amount=self.total_amount,
                sent_at=now,
            )
        )

    def attach_document(self, pdf_path: str) -> None:
        self.pdf_path = pdf_path
        self._touch()

    def change_status(self, target: InvoiceStatus, notes: str | None = None, performed_by: str = "System") -> None:
        """Manually move the invoice along its transition table."""
        self.assert_can_transition(target)
        old_status = self.status
        self.status = target.value
        now = self._touch()
        self.raise_(
            InvoiceStatusChanged(
                invoice_id=str(self.id),
                organization_id=str(self.organization_id),
                old_status=old_status,
                new_status=target.value,
                notes=notes,
                performed_by=performed_by or "System",
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------
    def apply_payment(self, payment_id: str, amount: float, method: str | None = None) -> None:
        """Apply a received payment; checks must already have passed."""
        old_status = self.status
        self.paid_amount = money((self.paid_amount or 0.0) + amount)
        self.balance_amount = money(self.total_amount - self.paid_amount)

        derived = self.calculate_status()
        if derived != self.status:
            self.assert_can_transition(InvoiceStatus(derived))
            self.status = derived
        now = self._touch()

        if self.status == InvoiceStatus.PAID.value:
            self.raise_(
                InvoicePaid(
                    invoice_id=str(self.id),
                    organization_id=str(self.organization_id),
                    sales_order_id=self.sales_order_id,
                    payment_id=str(payment_id),
                    amount=amount,
                    method=method,
                    old_status=old_status,
                    paid_amount=self.paid_amount,
                    total_amount=self.total_amount,
                    paid_at=now,
                )
            )
        else:
            self.raise_(
                InvoicePartiallyPaid(
                    invoice_id=str(self.id),
                    organization_id=str(self.organization_id),
                    sales_order_id=self.sales_order_id,
                    payment_id=str(payment_id),
                    amount=amount,
                    method=method,
                    old_status=old_status,
                    paid_amount=self.paid_amount,
                    balance_amount=self.balance_amount,
                    paid_at=now,
                )
            )

    def reverse_payment(self, payment_id: str, amount: float, reason: str | None = None) -> None:
        """Take a voided payment's signed amount back out of the totals."""
        old_status = self.status
        self.paid_amount = money((self.paid_amount or 0.0) - amount)
        self.balance_amount = money(self.total_amount - self.paid_amount)
        self.status = self.calculate_status()
        now = self._touch()
        self.raise_(
            InvoicePaymentReversed(
                invoice_id=str(self.id),
                organization_id=str(self.organization_id),
                payment_id=str(payment_id),
                amount=amount,
                paid_amount=self.paid_amount,
                balance_amount=self.balance_amount,
                old_status=old_status,
                new_status=self.status,
                reason=reason,
                reversed_at=now,
            )
        )

    def apply_refund(self, payment_id: str, amount: float) -> None:
        """Give ``amount`` back to the customer on a paid invoice."""
        if not self.can_refund():
            raise ValidationError({"status": ["invoice must be paid to process refund"]})
        if amount <= 0:
            raise ValidationError({"amount": ["refund amount must be greater than zero"]})
        if money(amount) > money(self.paid_amount):
            raise ValidationError(
                {"amount": [f"refund amount ({amount:.2f}) exceeds amount paid ({self.paid_amount:.2f})"]}
            )

        self.paid_amount = money(self.paid_amount - amount)
        self.balance_amount = money(self.total_amount - self.paid_amount)
        now = self._touch()
        self.raise_(
            InvoiceRefunded(
                invoice_id=str(self.id),
                organization_id=str(self.organization_id),
                payment_id=str(payment_id),
                amount=amount,
                paid_amount=self.paid_amount,
                balance_amount=self.balance_amount,
                refunded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------
    def soft_delete(self) -> None:
        now = self._touch()
        self.deleted_at = now
        self.raise_(
            InvoiceDeleted(
                invoice_id=str(self.id),
                organization_id=str(self.organization_id),
                deleted_at=now,
            )
        )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def sorted_items(self) -> list:
        return sorted(self.items, key=lambda item: item.line_number or 0)
