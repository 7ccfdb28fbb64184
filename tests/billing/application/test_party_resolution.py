"""Application tests for customer and contact resolution in read responses.

Lookup order: replica, then the customer service (healing the replica),
then the "Generic Customer" placeholder.
"""

from billing.customers.port import ContactProfile, CustomerProfile
from billing.projections.customer_replica import CustomerReplica, upsert_contact, upsert_customer
from billing.projections.parties import document_customer, resolve_contact, resolve_customer
from protean import current_domain


class TestResolveCustomer:
    def test_replica_is_used_without_remote_call(self, directory):
        upsert_customer("cust-1", {"organization_id": "org-001", "display_name": "Asha Rao", "company_name": "Rao Motors"})
        data = resolve_customer("org-001", "cust-1")
        assert data == {"id": "cust-1", "display_name": "Asha Rao", "company_name": "Rao Motors"}
        assert directory.calls == []

    def test_missing_replica_is_healed_from_customer_service(self, directory):
        directory.add_customer(CustomerProfile(id="cust-2", organization_id="org-001", display_name="Vikram Shah"))
        data = resolve_customer("org-001", "cust-2")
        assert data["display_name"] == "Vikram Shah"
        assert current_domain.repository_for(CustomerReplica).get("cust-2").display_name == "Vikram Shah"

        resolve_customer("org-001", "cust-2")
        assert len(directory.calls) == 1

    def test_replica_without_name_triggers_lookup(self, directory):
        upsert_customer("cust-3", {"organization_id": "org-001"})
        directory.add_customer(CustomerProfile(id="cust-3", company_name="Shah Traders"))
        assert resolve_customer("org-001", "cust-3")["display_name"] == "Shah Traders"

    def test_unknown_customer_gets_placeholder(self):
        data = resolve_customer("org-001", "cust-404")
        assert data == {"id": "cust-404", "display_name": "Generic Customer", "company_name": "Generic Customer"}

    def test_unreachable_service_gets_placeholder(self, directory):
        directory.configure(available=False)
        assert resolve_customer("org-001", "cust-5")["display_name"] == "Generic Customer"


class TestResolveContact:
    def test_primary_contact_used_when_none_given(self):
        upsert_contact("ct-1", {"customer_id": "cust-1", "first_name": "Ravi", "is_primary": True})
        upsert_contact("ct-2", {"customer_id": "cust-1", "first_name": "Meera"})
        assert resolve_contact("org-001", None, "cust-1")["id"] == "ct-1"

    def test_missing_contact_is_fetched_and_healed(self, directory):
        directory.add_contact(ContactProfile(id="ct-9", first_name="Neha", last_name="Joshi"))
        data = resolve_contact("org-001", "ct-9", "cust-1")
        assert data["first_name"] == "Neha"

        resolve_contact("org-001", "ct-9", "cust-1")
        assert len(directory.calls) == 1

    def test_unknown_contact_is_none(self):
        assert resolve_contact("org-001", "ct-404", "cust-1") is None


class TestDocumentCustomer:
    def test_replica_profile_returned(self):
        upsert_customer("cust-1", {"display_name": "Asha Rao", "billing_city": "Pune"})
        profile = document_customer("cust-1")
        assert profile.display_name == "Asha Rao"
        assert profile.billing_city == "Pune"

    def test_missing_customer_is_none(self, directory):
        assert document_customer("cust-404") is None
        assert directory.calls == []
