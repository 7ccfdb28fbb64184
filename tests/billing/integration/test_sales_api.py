"""Integration tests for the sales order and sales return endpoints."""

HEADERS = {"X-Organization-ID": "org-001"}

ORDER_BODY = {
    "customer_id": "cust-001",
    "items": [{"item_id": "prt-001", "name": "Filter", "quantity": 2, "unit_price": 25}],
}


def _create_order(client):
    response = client.post("/sales-orders", json=ORDER_BODY, headers=HEADERS)
    assert response.status_code == 201
    return response.json()["sales_order_id"]


def _shipped_order(client):
    order_id = _create_order(client)
    client.post(f"/sales-orders/{order_id}/confirm")
    invoice_id = client.post(f"/sales-orders/{order_id}/invoice").json()["invoice_id"]
    client.post(f"/invoices/{invoice_id}/send")
    client.post("/payments", json={"invoice_id": invoice_id, "amount": 50})
    client.post(f"/sales-orders/{order_id}/ship")
    return order_id, invoice_id


class TestSalesOrderAPI:
    def test_create_and_read(self, client):
        order_id = _create_order(client)
        body = client.get(f"/sales-orders/{order_id}").json()
        assert body["status"] == "draft"
        assert body["total_amount"] == 50.0

    def test_stock_shortage_is_422(self, client, inventory):
        inventory.set_stock("prt-001", 1, name="Filter")
        response = client.post("/sales-orders", json=ORDER_BODY, headers=HEADERS)
        assert response.status_code == 422
        assert response.json()["detail"]["stock"] == [
            "stock unavailable for items: Filter (requested: 2, available: 1)"
        ]

    def test_confirm_returns_number(self, client):
        order_id = _create_order(client)
        response = client.post(f"/sales-orders/{order_id}/confirm")
        assert response.status_code == 200
        assert response.json()["order_number"].startswith("SO-")

    def test_invoice_from_order_is_201(self, client):
        order_id = _create_order(client)
        client.post(f"/sales-orders/{order_id}/confirm")
        response = client.post(f"/sales-orders/{order_id}/invoice")
        assert response.status_code == 201
        invoice = client.get(f"/invoices/{response.json()['invoice_id']}").json()
        assert invoice["source_system"] == "INVENTORY"
        assert client.get(f"/sales-orders/{order_id}").json()["status"] == "invoiced"

    def test_paid_invoice_moves_order_to_paid(self, client):
        order_id, _ = _shipped_order(client)
        assert client.get(f"/sales-orders/{order_id}").json()["status"] == "shipped"

    def test_update_and_cancel(self, client):
        order_id = _create_order(client)
        assert client.put(f"/sales-orders/{order_id}", json={"notes": "Rush"}).status_code == 200
        response = client.post(f"/sales-orders/{order_id}/cancel", json={"reason": "Duplicate"})
        assert response.json()["status"] == "cancelled"
        assert client.post(f"/sales-orders/{order_id}/confirm").status_code == 422

    def test_list_orders(self, client):
        _create_order(client)
        assert len(client.get("/sales-orders", headers=HEADERS).json()) == 1


class TestSalesReturnAPI:
    def _open_return(self, client, order_id, quantity=1):
        line_id = client.get(f"/sales-orders/{order_id}").json()["items"][0]["id"]
        return client.post(
            "/sales-returns",
            json={
                "sales_order_id": order_id,
                "return_reason": "Damaged",
                "items": [{"sales_order_item_id": line_id, "returned_quantity": quantity}],
            },
        )

    def test_full_return_and_refund(self, client):
        order_id, invoice_id = _shipped_order(client)
        response = self._open_return(client, order_id)
        assert response.status_code == 201
        return_id = response.json()["sales_return_id"]

        assert client.post(f"/sales-returns/{return_id}/receive", json={}).json()["status"] == "received"
        refund = client.post(f"/sales-returns/{return_id}/refund", json={"method": "bank"})
        assert refund.status_code == 200
        refund_id = refund.json()["refund_payment_id"]

        assert client.get(f"/payments/{refund_id}").json()["amount"] == -25.0
        invoice = client.get(f"/invoices/{invoice_id}").json()
        assert invoice["status"] == "paid"
        assert invoice["paid_amount"] == 25.0
        assert client.get(f"/sales-returns/{return_id}").json()["status"] == "refunded"
        assert len(client.get(f"/sales-orders/{order_id}/returns").json()) == 1
        assert len(client.get("/sales-returns", headers=HEADERS).json()) == 1

    def test_excess_quantity_is_422(self, client):
        order_id, _ = _shipped_order(client)
        assert self._open_return(client, order_id, quantity=5).status_code == 422

    def test_refund_before_receipt_is_422(self, client):
        order_id, _ = _shipped_order(client)
        return_id = self._open_return(client, order_id).json()["sales_return_id"]
        assert client.post(f"/sales-returns/{return_id}/refund", json={}).status_code == 422
