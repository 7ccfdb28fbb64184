"""Integration tests for the invoice endpoints."""

from billing.invoice.invoice import Invoice, InvoiceStatus
from protean import current_domain

HEADERS = {"X-Organization-ID": "org-001"}

INVOICE_BODY = {
    "customer_id": "cust-001",
    "subject": "Quarterly maintenance",
    "items": [
        {"item_id": "svc-001", "name": "Inspection", "quantity": 1, "unit_price": 100, "discount": 10, "tax": 9},
        {"item_id": "prt-001", "name": "Filter", "quantity": 2, "unit_price": 25, "discount": 5, "tax": 4.5},
    ],
}


def _create(client, **overrides):
    response = client.post("/invoices", json={**INVOICE_BODY, **overrides}, headers=HEADERS)
    assert response.status_code == 201
    return response.json()["invoice_id"]


class TestCreateInvoiceAPI:
    def test_create_returns_201_and_persists(self, client):
        invoice_id = _create(client)
        invoice = current_domain.repository_for(Invoice).get(invoice_id)
        assert invoice.status == InvoiceStatus.DRAFT.value
        assert invoice.total_amount == 148.5
        assert invoice.organization_id == "org-001"

    def test_missing_organization_header_is_rejected(self, client):
        response = client.post("/invoices", json=INVOICE_BODY)
        assert response.status_code == 422

    def test_domain_validation_errors_map_to_422(self, client):
        response = client.post(
            "/invoices",
            json={**INVOICE_BODY, "items": [{"item_id": "svc-001", "quantity": 0, "unit_price": 10}]},
            headers=HEADERS,
        )
        assert response.status_code == 422
        assert response.json()["detail"]["items"] == ["item 1: quantity must be greater than 0"]


class TestReadInvoiceAPI:
    def test_get_invoice(self, client):
        invoice_id = _create(client)
        response = client.get(f"/invoices/{invoice_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["total_amount"] == 148.5
        assert len(body["items"]) == 2
        assert body["customer"]["display_name"] == "Generic Customer"

    def test_unknown_invoice_is_404(self, client):
        assert client.get("/invoices/does-not-exist").status_code == 404

    def test_list_and_module_filter(self, client):
        _create(client)
        _create(client, source_system="FSM", source_reference_id="wo-1")
        assert len(client.get("/invoices", headers=HEADERS).json()) == 2
        rows = client.get("/invoices/module/FSM", headers=HEADERS).json()
        assert [row["source_reference_id"] for row in rows] == ["wo-1"]


class TestInvoiceLifecycleAPI:
    def test_update_draft(self, client):
        invoice_id = _create(client)
        response = client.put(f"/invoices/{invoice_id}", json={"notes": "Call before visiting"})
        assert response.status_code == 200
        assert client.get(f"/invoices/{invoice_id}").json()["notes"] == "Call before visiting"

    def test_send_returns_number(self, client):
        invoice_id = _create(client)
        response = client.post(f"/invoices/{invoice_id}/send")
        assert response.status_code == 200
        assert response.json()["invoice_number"].endswith("-0001")

    def test_send_twice_is_422(self, client):
        invoice_id = _create(client)
        client.post(f"/invoices/{invoice_id}/send")
        assert client.post(f"/invoices/{invoice_id}/send").status_code == 422

    def test_render_failure_is_502(self, client, renderer):
        invoice_id = _create(client)
        renderer.configure(should_succeed=False)
        assert client.post(f"/invoices/{invoice_id}/send").status_code == 502

    def test_status_change_and_audit_log(self, client):
        invoice_id = _create(client)
        client.post(f"/invoices/{invoice_id}/send")
        response = client.put(f"/invoices/{invoice_id}/status", json={"status": "overdue", "notes": "30 days"})
        assert response.status_code == 200
        assert response.json()["status"] == "overdue"

        actions = [entry["action"] for entry in client.get(f"/invoices/{invoice_id}/audit-logs").json()]
        assert actions == ["invoice_sent", "status_change"]

    def test_pdf_endpoint_returns_path(self, client):
        invoice_id = _create(client)
        response = client.get(f"/invoices/{invoice_id}/pdf")
        assert response.status_code == 200
        assert response.json()["pdf_path"] == f"fake/org-001/{invoice_id}.pdf"

    def test_delete_then_404(self, client):
        invoice_id = _create(client)
        response = client.delete(f"/invoices/{invoice_id}")
        assert response.json()["status"] == "deleted"
        assert client.get(f"/invoices/{invoice_id}").status_code == 404


class TestEstimateConversionAPI:
    ESTIMATE_BODY = {
        "customer_id": "cust-001",
        "items": [{"item_id": "prt-001", "description": "Brake pads", "quantity": 2, "unit_price": 40, "tax": 8}],
    }

    def test_convert_creates_crm_draft(self, client):
        response = client.post("/estimates/EST-9/invoice", json=self.ESTIMATE_BODY, headers=HEADERS)
        assert response.status_code == 201

        body = client.get(f"/invoices/{response.json()['invoice_id']}").json()
        assert body["source_system"] == "CRM"
        assert body["source_reference_id"] == "EST-9"
        assert body["status"] == "draft"
        assert body["total_amount"] == 88.0
        assert body["items"][0]["name"] == "Brake pads"

    def test_stock_shortage_is_422(self, client, inventory):
        inventory.set_stock("prt-001", 1, name="Brake pads")
        response = client.post("/estimates/EST-9/invoice", json=self.ESTIMATE_BODY, headers=HEADERS)
        assert response.status_code == 422
        assert response.json()["detail"]["stock"][0].startswith("stock unavailable for items: Brake pads")

    def test_missing_organization_header_is_rejected(self, client):
        assert client.post("/estimates/EST-9/invoice", json=self.ESTIMATE_BODY).status_code == 422
