"""Payment aggregate (CQRS): money received against, or refunded from, an invoice.

Payments are append-only. A refund is a payment with a negative amount and
``payment_type == "refund"``. The only reversal is voiding, which flips the
status and keeps the row.

State Machine:
    COMPLETED → VOID
"""

from datetime import UTC, date, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, Identifier, String, Text

from billing.domain import billing
from billing.payment.events import PaymentRecorded, PaymentVoided, RefundRecorded


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    COMPLETED = "completed"
    VOID = "void"


class PaymentMethod(Enum):
    CASH = "cash"
    BANK = "bank"
    UPI = "upi"
    CHEQUE = "cheque"
    OTHER = "other"


class PaymentType(Enum):
    PAYMENT = "payment"
    REFUND = "refund"


_VALID_TRANSITIONS = {
    PaymentStatus.COMPLETED: {PaymentStatus.VOID},
    PaymentStatus.VOID: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@billing.aggregate
class Payment:
    organization_id: Identifier(required=True)
    invoice_id: Identifier(required=True)
    amount: Float(required=True)  # Signed: negative for refunds
    payment_date: Date()
    method: String(choices=PaymentMethod, default=PaymentMethod.CASH.value)
    reference: String(max_length=255)
    status: String(choices=PaymentStatus, default=PaymentStatus.COMPLETED.value)
    payment_type: String(choices=PaymentType, default=PaymentType.PAYMENT.value)
    sales_return_id: Identifier()
    notes: Text()
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def receive(
        cls,
        organization_id: str,
        invoice_id: str,
        amount: float,
        method: str = PaymentMethod.CASH.value,
        payment_date: date | None = None,
        reference: str | None = None,
        notes: str | None = None,
    ):
        """Record money received for an invoice."""
        if amount <= 0:
            raise ValidationError({"amount": ["payment amount must be greater than zero"]})

        now = datetime.now(UTC)
        payment = cls(
            organization_id=organization_id,
            invoice_id=invoice_id,
            amount=amount,
            payment_date=payment_date or now.date(),
            method=method or PaymentMethod.CASH.value,
            reference=reference,
            notes=notes,
            status=PaymentStatus.COMPLETED.value,
            payment_type=PaymentType.PAYMENT.value,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentRecorded(
                payment_id=str(payment.id),
                organization_id=str(organization_id),
                invoice_id=str(invoice_id),
                amount=amount,
                method=payment.method,
                reference=reference,
                recorded_at=now,
            )
        )
        return payment

    @classmethod
    def refund(
        cls,
        organization_id: str,
        invoice_id: str,
        sales_return_id: str,
        amount: float,
        method: str = PaymentMethod.CASH.value,
        payment_date: date | None = None,
        reference: str | None = None,
        notes: str | None = None,
    ):
        """Record a refund; ``amount`` is the positive sum paid back."""
        if amount <= 0:
            raise ValidationError({"amount": ["refund amount must be greater than zero"]})

        now = datetime.now(UTC)
        payment = cls(
            organization_id=organization_id,
            invoice_id=invoice_id,
            amount=-amount,
            payment_date=payment_date or now.date(),
            method=method or PaymentMethod.CASH.value,
            reference=reference,
            notes=notes,
            status=PaymentStatus.COMPLETED.value,
            payment_type=PaymentType.REFUND.value,
            sales_return_id=sales_return_id,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            RefundRecorded(
                payment_id=str(payment.id),
                organization_id=str(organization_id),
                invoice_id=str(invoice_id),
                sales_return_id=str(sales_return_id),
                amount=payment.amount,
                method=payment.method,
                recorded_at=now,
            )
        )
        return payment

    def can_void(self) -> bool:
        return self.status == PaymentStatus.COMPLETED.value

    def assert_can_transition(self, target: PaymentStatus) -> None:
        try:
            current = PaymentStatus(self.status)
        except ValueError:
            raise ValidationError({"status": [f"unknown current status: {self.status}"]}) from None
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"cannot transition from {current.value} to {target.value}"]})

    def void(self, reason: str | None = None) -> None:
        """Void a completed payment, keeping the record."""
        if not self.can_void():
            raise ValidationError({"status": [f"payment in {self.status} status cannot be voided"]})
        self.assert_can_transition(PaymentStatus.VOID)

        now = datetime.now(UTC)
        self.status = PaymentStatus.VOID.value
        if reason:
            self.notes = f"{self.notes or ''}\n[VOIDED: {reason}]"
        self.updated_at = now
        self.raise_(
            PaymentVoided(
                payment_id=str(self.id),
                organization_id=str(self.organization_id),
                invoice_id=str(self.invoice_id),
                amount=self.amount,
                reason=reason,
                voided_at=now,
            )
        )
