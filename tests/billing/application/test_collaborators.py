"""Tests for the collaborator ports, their adapters and factories."""

from unittest.mock import MagicMock

import pytest
import requests
from billing.customers import get_directory, reset_directory, set_directory
from billing.customers.fake_adapter import FakeCustomerDirectory
from billing.customers.http_adapter import HttpCustomerDirectory
from billing.documents import get_renderer, reset_renderer
from billing.documents.reportlab_adapter import ReportLabInvoiceRenderer
from billing.inventory import get_inventory, reset_inventory
from billing.inventory.http_adapter import HttpInventoryService
from billing.inventory.port import StockLine
from billing.invoice.invoice import Invoice
from billing.shared.errors import CollaboratorError


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload or {}
    return response


class TestFactories:
    def test_inventory_is_optional(self, monkeypatch):
        monkeypatch.delenv("INVENTORY_SERVICE_URL", raising=False)
        reset_inventory()
        assert get_inventory() is None

    def test_inventory_url_enables_http_adapter(self, monkeypatch):
        monkeypatch.setenv("INVENTORY_SERVICE_URL", "http://inventory:8085/")
        reset_inventory()
        inventory = get_inventory()
        assert isinstance(inventory, HttpInventoryService)
        assert inventory.base_url == "http://inventory:8085"

    def test_directory_defaults_to_http(self):
        reset_directory()
        assert isinstance(get_directory(), HttpCustomerDirectory)
        fake = FakeCustomerDirectory()
        set_directory(fake)
        assert get_directory() is fake

    def test_renderer_defaults_to_reportlab(self, monkeypatch, tmp_path):
        monkeypatch.setenv("INVOICE_PDF_DIR", str(tmp_path))
        reset_renderer()
        renderer = get_renderer()
        assert isinstance(renderer, ReportLabInvoiceRenderer)
        assert renderer.output_dir == tmp_path


class TestHttpInventoryService:
    def test_shortages_are_parsed(self):
        session = MagicMock()
        session.post.return_value = _response(
            payload={"data": {"unavailable_items": [{"item_id": "prt-1", "name": "Filter", "requested": 3, "available": 1}]}}
        )
        service = HttpInventoryService("http://inventory", session=session)

        shortages = service.check_availability([StockLine(item_id="prt-1", quantity=3)])
        assert shortages[0].name == "Filter"
        assert shortages[0].available == 1
        assert session.post.call_args.kwargs["json"] == {"items": [{"item_id": "prt-1", "quantity": 3}]}

    def test_error_status_raises(self):
        session = MagicMock()
        session.post.return_value = _response(status_code=500)
        service = HttpInventoryService("http://inventory", session=session)
        with pytest.raises(CollaboratorError) as exc:
            service.update_stock([StockLine("prt-1", 1)], "sales", "sales_order", "so-1", "Sales Order Created")
        assert str(exc.value) == "inventory: service returned status: 500"

    def test_transport_error_raises(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("refused")
        service = HttpInventoryService("http://inventory", session=session)
        with pytest.raises(CollaboratorError):
            service.check_availability([StockLine("prt-1", 1)])


class TestHttpCustomerDirectory:
    def test_customer_is_mapped(self):
        session = MagicMock()
        session.get.return_value = _response(
            payload={"data": {"id": "cust-1", "display_name": "Asha Rao", "city": "Pune", "phone_work": "123"}}
        )
        directory = HttpCustomerDirectory("http://customers", session=session)

        profile = directory.get_customer("org-001", "cust-1")
        assert profile.display_name == "Asha Rao"
        assert profile.billing_city == "Pune"
        assert profile.phone == "123"
        assert session.get.call_args.kwargs["headers"] == {"X-Organization-ID": "org-001"}

    def test_not_found_is_none(self):
        session = MagicMock()
        session.get.return_value = _response(status_code=404)
        directory = HttpCustomerDirectory("http://customers", session=session)
        assert directory.get_contact("org-001", "ct-1") is None

    def test_other_errors_raise(self):
        session = MagicMock()
        session.get.return_value = _response(status_code=503)
        directory = HttpCustomerDirectory("http://customers", session=session)
        with pytest.raises(CollaboratorError):
            directory.get_customer("org-001", "cust-1")


class TestReportLabInvoiceRenderer:
    def test_writes_pdf_per_organization(self, tmp_path):
        invoice = Invoice.create(
            organization_id="org-001",
            customer_id="cust-001",
            subject="Quarterly maintenance",
            items_data=[{"item_id": "svc-1", "name": "Inspection", "quantity": 1, "unit_price": 100.0}],
        )
        path = ReportLabInvoiceRenderer(str(tmp_path)).render_invoice(invoice, None)

        assert path == str(tmp_path / "org-001" / f"{invoice.id}.pdf")
        assert (tmp_path / "org-001" / f"{invoice.id}.pdf").read_bytes().startswith(b"%PDF")
