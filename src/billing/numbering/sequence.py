"""Per-organization document numbering.

Numbers come from a counter row keyed by organization, document kind and
period, so a number is never reused even when earlier documents are deleted.

    Invoices:       INV-2024-0001   (per year)
    Sales orders:   SO-20240315-0001  (per day)
    Sales returns:  RMA-20240315-0001 (per day)
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from billing.domain import billing


class DocumentKind(Enum):
    INVOICE = "INV"
    SALES_ORDER = "SO"
    SALES_RETURN = "RMA"


@billing.aggregate
class NumberSequence:
    sequence_key: String(identifier=True, required=True, max_length=120)
    organization_id: Identifier(required=True)
    kind: String(choices=DocumentKind, required=True)
    period: String(required=True, max_length=8)
    last_value: Integer(default=0)
    updated_at: DateTime()

    def advance(self) -> int:
        self.last_value = (self.last_value or 0) + 1
        self.updated_at = datetime.now(UTC)
        return self.last_value


def _period(kind: DocumentKind, today) -> str:
    if kind == DocumentKind.INVOICE:
        return f"{today.year}"
    return today.strftime("%Y%m%d")


def next_number(organization_id: str, kind: DocumentKind, today=None) -> str:
    """Reserve and format the next document number for an organization.

    The counter is saved through the current unit of work, so a number is
    only consumed when the document that uses it is committed.
    """
    today = today or datetime.now(UTC).date()
    period = _period(kind, today)
    key = f"{organization_id}:{kind.value}:{period}"

    repo = current_domain.repository_for(NumberSequence)
    try:
        sequence = repo.get(key)
    except ObjectNotFoundError:
        sequence = NumberSequence(
            sequence_key=key,
            organization_id=organization_id,
            kind=kind.value,
            period=period,
            last_value=0,
        )

    value = sequence.advance()
    repo.add(sequence)
    return f"{kind.value}-{period}-{value:04d}"
