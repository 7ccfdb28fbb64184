"""Integration tests for the read-model endpoints."""

from billing.projections.customer_replica import upsert_contact, upsert_customer
from billing.projections.item_replica import upsert_item

HEADERS = {"X-Organization-ID": "org-001"}


class TestReadModelAPI:
    def test_customers_are_sorted_by_display_name(self, client):
        upsert_customer("cust-2", {"organization_id": "org-001", "display_name": "Zara Khan"})
        upsert_customer("cust-1", {"organization_id": "org-001", "display_name": "Asha Rao"})
        upsert_customer("cust-3", {"organization_id": "org-002", "display_name": "Other Org"})

        rows = client.get("/read-model/customers", headers=HEADERS).json()
        assert [row["display_name"] for row in rows] == ["Asha Rao", "Zara Khan"]

    def test_customer_by_id(self, client):
        upsert_customer("cust-1", {"organization_id": "org-001", "display_name": "Asha Rao"})
        assert client.get("/read-model/customers/cust-1").json()["display_name"] == "Asha Rao"
        assert client.get("/read-model/customers/cust-404").status_code == 404

    def test_items_filter_by_type(self, client):
        upsert_item("svc-1", {"organization_id": "org-001", "name": "Inspection", "item_type": "service"})
        upsert_item("prt-1", {"organization_id": "org-001", "name": "Gasket", "item_type": "part"})

        rows = client.get("/read-model/items", params={"item_type": "part"}, headers=HEADERS).json()
        assert [row["id"] for row in rows] == ["prt-1"]
        assert len(client.get("/read-model/items", headers=HEADERS).json()) == 2
        assert client.get("/read-model/items/svc-1").json()["name"] == "Inspection"

    def test_customer_search(self, client):
        upsert_customer("cust-1", {"organization_id": "org-001", "display_name": "Asha Rao"})
        upsert_customer("cust-2", {"organization_id": "org-001", "display_name": "Zara Khan"})

        rows = client.get("/read-model/customers", params={"q": "khan"}, headers=HEADERS).json()
        assert [row["id"] for row in rows] == ["cust-2"]

    def test_item_search_by_sku(self, client):
        upsert_item("prt-1", {"organization_id": "org-001", "name": "Gasket", "sku": "GK-7", "item_type": "part"})
        upsert_item("prt-2", {"organization_id": "org-001", "name": "Bolt", "sku": "BT-1", "item_type": "part"})

        rows = client.get("/read-model/items", params={"q": "gk-7"}, headers=HEADERS).json()
        assert [row["id"] for row in rows] == ["prt-1"]

    def test_contacts_filtered_by_customer_and_query(self, client):
        upsert_contact("con-1", {"organization_id": "org-001", "customer_id": "cust-1", "first_name": "Ravi"})
        upsert_contact("con-2", {"organization_id": "org-001", "customer_id": "cust-1", "first_name": "Meera"})
        upsert_contact("con-3", {"organization_id": "org-001", "customer_id": "cust-2", "first_name": "Ravi"})

        rows = client.get(
            "/read-model/contacts", params={"customer_id": "cust-1", "q": "ravi"}, headers=HEADERS
        ).json()
        assert [row["id"] for row in rows] == ["con-1"]
        assert len(client.get("/read-model/contacts", headers=HEADERS).json()) == 3

    def test_contacts_require_organization(self, client):
        assert client.get("/read-model/contacts").status_code == 422
