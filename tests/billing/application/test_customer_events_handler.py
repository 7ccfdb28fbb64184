"""Application tests for the customer and contact replica handlers.

Covers:
- on_customer_created: full upsert, display-name fallbacks, idempotent redelivery
- on_customer_updated: partial patch driven by updated_fields, name splicing,
  unknown customers skipped
- on_contact_created / on_contact_updated: upsert and patch
"""

import json
from datetime import UTC, datetime

import pytest
from billing.projections.customer_events import ContactReplicaEventHandler, CustomerReplicaEventHandler
from billing.projections.customer_replica import ContactReplica, CustomerReplica
from billing.projections.queries import list_customers
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from shared.events.customer import ContactCreated, ContactUpdated, CustomerCreated, CustomerUpdated


def _created(**overrides):
    payload = {
        "customer_id": "cust-100",
        "organization_id": "org-001",
        "first_name": "Asha",
        "last_name": "Rao",
        "company_name": "Rao Motors",
        "email": "asha@example.com",
        "city": "Pune",
        "zip_code": "411001",
        "occurred_at": datetime.now(UTC),
    }
    payload.update(overrides)
    return CustomerCreated(**payload)


def _replica(customer_id="cust-100"):
    return current_domain.repository_for(CustomerReplica).get(customer_id)


class TestCustomerCreated:
    def test_creates_replica_with_composed_name(self):
        CustomerReplicaEventHandler().on_customer_created(_created())
        record = _replica()
        assert record.display_name == "Asha Rao"
        assert record.billing_city == "Pune"
        assert record.billing_code == "411001"

    def test_explicit_display_name_wins(self):
        CustomerReplicaEventHandler().on_customer_created(_created(display_name="Asha R."))
        assert _replica().display_name == "Asha R."

    def test_company_name_used_without_person_name(self):
        CustomerReplicaEventHandler().on_customer_created(_created(first_name=None, last_name=None))
        assert _replica().display_name == "Rao Motors"

    def test_unknown_customer_when_nothing_to_show(self):
        CustomerReplicaEventHandler().on_customer_created(
            _created(first_name=None, last_name=None, company_name=None)
        )
        assert _replica().display_name == "Unknown Customer"

    def test_redelivery_leaves_one_row(self):
        handler = CustomerReplicaEventHandler()
        handler.on_customer_created(_created())
        handler.on_customer_created(_created())
        assert len(list_customers("org-001")) == 1
        assert _replica().display_name == "Asha Rao"

    def test_redelivery_without_event_time_leaves_row_unchanged(self):
        handler = CustomerReplicaEventHandler()
        handler.on_customer_created(_created(occurred_at=None))
        first = _replica().to_dict()

        handler.on_customer_created(_created(occurred_at=None))

        assert _replica().to_dict() == first
        assert first["updated_at"] is not None


class TestCustomerUpdated:
    def _seed(self):
        CustomerReplicaEventHandler().on_customer_created(_created())

    def test_patches_only_sent_fields(self):
        self._seed()
        CustomerReplicaEventHandler().on_customer_updated(
            CustomerUpdated(customer_id="cust-100", email="new@example.com")
        )
        record = _replica()
        assert record.email == "new@example.com"
        assert record.billing_city == "Pune"
        assert record.display_name == "Asha Rao"

    def test_listed_field_can_be_cleared(self):
        self._seed()
        CustomerReplicaEventHandler().on_customer_updated(
            CustomerUpdated(customer_id="cust-100", updated_fields=json.dumps(["city"]))
        )
        assert _replica().billing_city is None

    def test_first_name_only_is_spliced_into_display_name(self):
        self._seed()
        CustomerReplicaEventHandler().on_customer_updated(CustomerUpdated(customer_id="cust-100", first_name="Anita"))
        assert _replica().display_name == "Anita Rao"

    def test_last_name_only_is_spliced_into_display_name(self):
        self._seed()
        CustomerReplicaEventHandler().on_customer_updated(CustomerUpdated(customer_id="cust-100", last_name="Iyer"))
        assert _replica().display_name == "Asha Iyer"

    def test_unknown_customer_is_skipped(self):
        CustomerReplicaEventHandler().on_customer_updated(CustomerUpdated(customer_id="cust-missing", email="x@y.z"))
        with pytest.raises(ObjectNotFoundError):
            _replica("cust-missing")


class TestContactEvents:
    def test_contact_created_and_patched(self):
        handler = ContactReplicaEventHandler()
        handler.on_contact_created(
            ContactCreated(
                contact_id="ct-1",
                organization_id="org-001",
                company_id="cust-100",
                first_name="Ravi",
                last_name="Kumar",
                is_primary=True,
            )
        )
        handler.on_contact_updated(ContactUpdated(contact_id="ct-1", phone="+91-99999"))

        record = current_domain.repository_for(ContactReplica).get("ct-1")
        assert record.full_name == "Ravi Kumar"
        assert record.phone == "+91-99999"
        assert record.is_primary is True
        assert record.customer_id == "cust-100"

    def test_update_for_unknown_contact_is_skipped(self):
        ContactReplicaEventHandler().on_contact_updated(ContactUpdated(contact_id="ct-missing", phone="1"))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(ContactReplica).get("ct-missing")
