"""Inbound cross-domain event handlers: Billing mirrors customers and contacts.

Created events upsert the whole replica row. Updated events patch only the
fields the event lists in ``updated_fields`` or carries with a value. An
update for a row billing has never seen is skipped; the live lookup in the
invoice queries heals it later.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.customer import ContactCreated, ContactUpdated, CustomerCreated, CustomerUpdated

from billing.domain import billing
from billing.invoice.invoice import Invoice
from billing.projections.customer_replica import (
    ContactReplica,
    CustomerReplica,
    compose_display_name,
    creation_display_name,
    upsert_contact,
    upsert_customer,
)
from billing.shared.payload import patch_selector

logger = structlog.get_logger(__name__)

billing.register_external_event(CustomerCreated, "Customer.CustomerCreated.v1")
billing.register_external_event(CustomerUpdated, "Customer.CustomerUpdated.v1")
billing.register_external_event(ContactCreated, "Customer.ContactCreated.v1")
billing.register_external_event(ContactUpdated, "Customer.ContactUpdated.v1")

# Payload field -> replica column
_CUSTOMER_PATCH = (
    ("company_name", "company_name"),
    ("email", "email"),
    ("phone", "phone"),
    ("street1", "billing_street"),
    ("city", "billing_city"),
    ("state", "billing_state"),
    ("zip_code", "billing_code"),
    ("country", "billing_country"),
)

_CONTACT_PATCH = ("first_name", "last_name", "email", "phone", "mobile")


@billing.event_handler(part_of=Invoice, stream_category="customer::customer")
class CustomerReplicaEventHandler:
    """Keeps CustomerReplica in step with the customer service."""

    @handle(CustomerCreated)
    def on_customer_created(self, event: CustomerCreated) -> None:
        logger.info("Replicating customer", customer_id=str(event.customer_id))
        upsert_customer(
            event.customer_id,
            {
                "organization_id": event.organization_id,
                "display_name": creation_display_name(
                    event.display_name, event.first_name, event.last_name, event.company_name
                ),
                "company_name": event.company_name,
                "email": event.email,
                "phone": event.phone,
                "billing_street": event.street1,
                "billing_city": event.city,
                "billing_state": event.state,
                "billing_code": event.zip_code,
                "billing_country": event.country,
            },
            occurred_at=event.occurred_at,
        )

    @handle(CustomerUpdated)
    def on_customer_updated(self, event: CustomerUpdated) -> None:
        repo = current_domain.repository_for(CustomerReplica)
        try:
            record = repo.get(str(event.customer_id))
        except ObjectNotFoundError:
            logger.warning("Update for unknown customer replica skipped", customer_id=str(event.customer_id))
            return

        should_apply = patch_selector(event.updated_fields)
        for field, column in _CUSTOMER_PATCH:
            value = getattr(event, field)
            if should_apply(field, value):
                setattr(record, column, value)

        if should_apply("display_name", event.display_name):
            record.display_name = event.display_name
        else:
            name = compose_display_name(
                first_name=event.first_name,
                last_name=event.last_name,
                current=record.display_name,
            )
            if name:
                record.display_name = name

        if event.occurred_at:
            record.updated_at = event.occurred_at
        repo.add(record)
        logger.info("Customer replica patched", customer_id=str(event.customer_id))


@billing.event_handler(part_of=Invoice, stream_category="customer::contact")
class ContactReplicaEventHandler:
    """Keeps ContactReplica in step with the customer service."""

    @handle(ContactCreated)
    def on_contact_created(self, event: ContactCreated) -> None:
        logger.info("Replicating contact", contact_id=str(event.contact_id))
        upsert_contact(
            event.contact_id,
            {
                "organization_id": event.organization_id,
                "customer_id": event.company_id,
                "first_name": event.first_name,
                "last_name": event.last_name,
                "email": event.email,
                "phone": event.phone,
                "mobile": event.mobile,
                "is_primary": event.is_primary,
            },
            occurred_at=event.occurred_at,
        )

    @handle(ContactUpdated)
    def on_contact_updated(self, event: ContactUpdated) -> None:
        repo = current_domain.repository_for(ContactReplica)
        try:
            record = repo.get(str(event.contact_id))
        except ObjectNotFoundError:
            logger.warning("Update for unknown contact replica skipped", contact_id=str(event.contact_id))
            return

        should_apply = patch_selector(event.updated_fields)
        for field in _CONTACT_PATCH:
            value = getattr(event, field)
            if should_apply(field, value):
                setattr(record, field, value)
        if should_apply("is_primary", event.is_primary):
            record.is_primary = bool(event.is_primary)
        if event.company_id:
            record.customer_id = event.company_id

        if event.occurred_at:
            record.updated_at = event.occurred_at
        repo.add(record)
