"""In-memory customer directory for development and testing."""

from billing.customers.port import ContactProfile, CustomerDirectory, CustomerProfile
from billing.shared.errors import CollaboratorError


class FakeCustomerDirectory(CustomerDirectory):
    """Serves profiles registered with add_customer()/add_contact()."""

    def __init__(self) -> None:
        self.customers: dict[str, CustomerProfile] = {}
        self.contacts: dict[str, ContactProfile] = {}
        self.available: bool = True
        self.calls: list[dict] = []

    def configure(self, available: bool = True) -> None:
        self.available = available

    def add_customer(self, profile: CustomerProfile) -> None:
        self.customers[str(profile.id)] = profile

    def add_contact(self, profile: ContactProfile) -> None:
        self.contacts[str(profile.id)] = profile

    def get_customer(self, organization_id: str, customer_id: str) -> CustomerProfile | None:
        self.calls.append({"method": "get_customer", "organization_id": organization_id, "id": customer_id})
        if not self.available:
            raise CollaboratorError("customer", "service unavailable")
        return self.customers.get(str(customer_id))

    def get_contact(self, organization_id: str, contact_id: str) -> ContactProfile | None:
        self.calls.append({"method": "get_contact", "organization_id": organization_id, "id": contact_id})
        if not self.available:
            raise CollaboratorError("customer", "service unavailable")
        return self.contacts.get(str(contact_id))
