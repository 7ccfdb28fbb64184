"""Customer and contact resolution for responses and documents.

The replica is tried first. A missing replica, or one without a display
name, falls back to a live lookup against the customer service, and a
successful lookup heals the replica. If both fail the caller gets a
placeholder instead of an error.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from billing.customers import get_directory
from billing.customers.port import CustomerProfile
from billing.projections.customer_replica import (
    ContactReplica,
    CustomerReplica,
    customer_profile,
    upsert_contact,
    upsert_customer_from_profile,
)
from billing.shared.errors import CollaboratorError

logger = structlog.get_logger(__name__)

GENERIC_CUSTOMER = "Generic Customer"


def replica_customer(customer_id) -> CustomerReplica | None:
    try:
        return current_domain.repository_for(CustomerReplica).get(str(customer_id))
    except ObjectNotFoundError:
        return None


def replica_contact(contact_id) -> ContactReplica | None:
    try:
        return current_domain.repository_for(ContactReplica).get(str(contact_id))
    except ObjectNotFoundError:
        return None


def primary_contact(customer_id) -> ContactReplica | None:
    contacts = (
        current_domain.repository_for(ContactReplica)
        ._dao.query.filter(customer_id=str(customer_id), is_primary=True)
        .all()
        .items
    )
    return contacts[0] if contacts else None


def resolve_customer(organization_id, customer_id) -> dict:
    """Return ``{id, display_name, company_name}`` for a response body."""
    record = replica_customer(customer_id)
    profile = customer_profile(record) if record is not None and record.display_name else None

    if profile is None:
        logger.info("Customer missing or invalid in read model, asking customer service", customer_id=str(customer_id))
        try:
            remote = get_directory().get_customer(str(organization_id), str(customer_id))
        except CollaboratorError as exc:
            logger.warning("Customer lookup failed", customer_id=str(customer_id), error=str(exc))
            remote = None
        if remote is not None:
            upsert_customer_from_profile(remote)
            profile = remote

    if profile is None:
        return {"id": str(customer_id), "display_name": GENERIC_CUSTOMER, "company_name": GENERIC_CUSTOMER}
    return {
        "id": str(profile.id),
        "display_name": profile.display_name or profile.company_name or GENERIC_CUSTOMER,
        "company_name": profile.company_name,
    }


def resolve_contact(organization_id, contact_id, customer_id) -> dict | None:
    """Contact for a response; without a contact id, the customer's primary contact."""
    if not contact_id:
        record = primary_contact(customer_id)
    else:
        record = replica_contact(contact_id)
        if record is None:
            try:
                remote = get_directory().get_contact(str(organization_id), str(contact_id))
            except CollaboratorError as exc:
                logger.warning("Contact lookup failed", contact_id=str(contact_id), error=str(exc))
                remote = None
            if remote is not None:
                record = upsert_contact(
                    remote.id,
                    {
                        "organization_id": organization_id,
                        "customer_id": remote.customer_id or customer_id,
                        "first_name": remote.first_name,
                        "last_name": remote.last_name,
                        "email": remote.email,
                        "phone": remote.phone,
                    },
                )

    if record is None:
        return None
    return {
        "id": str(record.contact_id),
        "first_name": record.first_name,
        "last_name": record.last_name,
        "email": record.email,
    }


def document_customer(customer_id) -> CustomerProfile | None:
    """Customer for a rendered document; None makes the renderer use a placeholder."""
    record = replica_customer(customer_id)
    if record is None:
        logger.warning("Customer not found for invoice document, using placeholder", customer_id=str(customer_id))
    return customer_profile(record)
