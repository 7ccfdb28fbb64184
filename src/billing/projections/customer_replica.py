"""Customer and contact replicas, plus the display-name rules.

Rows are written only by the upstream event handlers and by the self-heal
path after a live lookup. Both go through the upserts here, which overwrite
every column so redelivery leaves the row unchanged. ``updated_at`` moves
only with the event time; a payload without one keeps the stored stamp.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from billing.customers.port import CustomerProfile
from billing.domain import billing

UNKNOWN_CUSTOMER = "Unknown Customer"

CUSTOMER_COLUMNS = (
    "organization_id",
    "display_name",
    "company_name",
    "email",
    "phone",
    "billing_street",
    "billing_city",
    "billing_state",
    "billing_code",
    "billing_country",
    "shipping_street",
    "shipping_city",
    "shipping_state",
    "shipping_code",
    "shipping_country",
)


@billing.projection
class CustomerReplica:
    customer_id = Identifier(identifier=True, required=True)
    organization_id = Identifier()
    display_name = String(max_length=255)
    company_name = String(max_length=255)
    email = String(max_length=255)
    phone = String(max_length=50)
    billing_street = String(max_length=255)
    billing_city = String(max_length=100)
    billing_state = String(max_length=100)
    billing_code = String(max_length=20)
    billing_country = String(max_length=100)
    shipping_street = String(max_length=255)
    shipping_city = String(max_length=100)
    shipping_state = String(max_length=100)
    shipping_code = String(max_length=20)
    shipping_country = String(max_length=100)
    updated_at = DateTime()


@billing.projection
class ContactReplica:
    contact_id = Identifier(identifier=True, required=True)
    organization_id = Identifier()
    customer_id = Identifier()
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    email = String(max_length=255)
    phone = String(max_length=50)
    mobile = String(max_length=50)
    is_primary = Boolean(default=False)
    updated_at = DateTime()

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


def compose_display_name(
    display_name: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    current: str | None = None,
) -> str | None:
    """Work out a customer's display name from an event payload.

    1. An explicit display name wins.
    2. First and last name together give "first last".
    3. A single name part is spliced into ``current``: a first name replaces
       its first word, a last name its last word. Without a current value
       the part is used on its own.

    Returns None when the payload carries no name at all.
    """
    if display_name:
        return display_name.strip()
    if first_name and last_name:
        return f"{first_name} {last_name}".strip()
    if not (first_name or last_name):
        return None

    words = (current or "").split()
    if not words:
        return (first_name or last_name).strip()
    if first_name:
        words[0] = first_name.strip()
    else:
        words[-1] = last_name.strip()
    return " ".join(words)


def creation_display_name(display_name, first_name, last_name, company_name) -> str:
    """Display name for a newly created customer, never empty."""
    return compose_display_name(display_name, first_name, last_name) or company_name or UNKNOWN_CUSTOMER


def upsert_customer(customer_id: str, values: dict, occurred_at: datetime | None = None) -> CustomerReplica:
    """Insert the replica or overwrite every column of an existing one."""
    repo = current_domain.repository_for(CustomerReplica)
    try:
        record = repo.get(str(customer_id))
    except ObjectNotFoundError:
        record = CustomerReplica(customer_id=str(customer_id))

    for column in CUSTOMER_COLUMNS:
        setattr(record, column, values.get(column))
    if occurred_at is not None or record.updated_at is None:
        record.updated_at = occurred_at or datetime.now(UTC)
    repo.add(record)
    return record


def upsert_customer_from_profile(profile: CustomerProfile) -> CustomerReplica:
    """Self-heal the replica from a live customer-service answer."""
    values = {column: getattr(profile, column, None) for column in CUSTOMER_COLUMNS}
    values["display_name"] = profile.display_name or profile.company_name or UNKNOWN_CUSTOMER
    return upsert_customer(profile.id, values, occurred_at=datetime.now(UTC))


def upsert_contact(contact_id: str, values: dict, occurred_at: datetime | None = None) -> ContactReplica:
    repo = current_domain.repository_for(ContactReplica)
    try:
        record = repo.get(str(contact_id))
    except ObjectNotFoundError:
        record = ContactReplica(contact_id=str(contact_id))

    for column in ("organization_id", "customer_id", "first_name", "last_name", "email", "phone", "mobile"):
        setattr(record, column, values.get(column))
    record.is_primary = bool(values.get("is_primary"))
    if occurred_at is not None or record.updated_at is None:
        record.updated_at = occurred_at or datetime.now(UTC)
    repo.add(record)
    return record


def customer_profile(record: CustomerReplica | None) -> CustomerProfile | None:
    """View a replica row through the collaborator's profile type."""
    if record is None:
        return None
    return CustomerProfile(
        id=str(record.customer_id),
        **{column: getattr(record, column) for column in CUSTOMER_COLUMNS},
    )
