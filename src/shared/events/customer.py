"""Cross-domain event contracts for Customer service events.

Billing keeps a local replica of customers and contacts for display and
lookup. These classes define the payloads it consumes; they are registered
as external events via billing.register_external_event() with matching
type strings so Protean's stream deserialization works correctly.

``updated_fields`` is a JSON list naming the fields an update touched, so
consumers can tell "cleared" apart from "not sent".
"""

from protean.core.event import BaseEvent
from protean.fields import Boolean, DateTime, Identifier, String, Text


class CustomerCreated(BaseEvent):
    """A customer record was created."""

    __version__ = 1

    customer_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    display_name = String()
    first_name = String()
    last_name = String()
    company_name = String()
    email = String()
    phone = String()
    street1 = String()
    city = String()
    state = String()
    zip_code = String()
    country = String()
    occurred_at = DateTime()


class CustomerUpdated(BaseEvent):
    """One or more customer fields changed."""

    __version__ = 1

    customer_id = Identifier(required=True)
    organization_id = Identifier()
    display_name = String()
    first_name = String()
    last_name = String()
    company_name = String()
    email = String()
    phone = String()
    street1 = String()
    city = String()
    state = String()
    zip_code = String()
    country = String()
    updated_fields = Text()  # JSON: list of field names
    occurred_at = DateTime()


class ContactCreated(BaseEvent):
    """A contact person was created, optionally attached to a company."""

    __version__ = 1

    contact_id = Identifier(required=True)
    organization_id = Identifier(required=True)
    company_id = Identifier()
    first_name = String()
    last_name = String()
    email = String()
    phone = String()
    mobile = String()
    is_primary = Boolean(default=False)
    occurred_at = DateTime()


class ContactUpdated(BaseEvent):
    """One or more contact fields changed."""

    __version__ = 1

    contact_id = Identifier(required=True)
    organization_id = Identifier()
    company_id = Identifier()
    first_name = String()
    last_name = String()
    email = String()
    phone = String()
    mobile = String()
    is_primary = Boolean()
    updated_fields = Text()  # JSON: list of field names
    occurred_at = DateTime()
