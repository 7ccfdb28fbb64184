"""Customer-profile service port (abstract interface).

Billing only asks the customer service for a profile when the local replica
is missing or unusable. Both lookups answer None for "not found" and raise
CollaboratorError when the service cannot be reached.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CustomerProfile:
    id: str
    organization_id: str | None = None
    display_name: str | None = None
    company_name: str | None = None
    email: str | None = None
    phone: str | None = None
    billing_street: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_code: str | None = None
    billing_country: str | None = None
    shipping_street: str | None = None
    shipping_city: str | None = None
    shipping_state: str | None = None
    shipping_code: str | None = None
    shipping_country: str | None = None


@dataclass(frozen=True)
class ContactProfile:
    id: str
    customer_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None


class CustomerDirectory(ABC):
    """Abstract customer service interface."""

    @abstractmethod
    def get_customer(self, organization_id: str, customer_id: str) -> CustomerProfile | None:
        ...

    @abstractmethod
    def get_contact(self, organization_id: str, contact_id: str) -> ContactProfile | None:
        ...
