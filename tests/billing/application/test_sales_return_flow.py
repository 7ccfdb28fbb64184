"""Application tests for sales returns: creation, receiving and refunds."""

import json

import pytest
from billing.invoice.invoice import Invoice, InvoiceStatus
from billing.invoice.queries import get_audit_logs
from billing.invoice.sending import SendInvoice
from billing.payment.payment import Payment, PaymentType
from billing.payment.recording import RecordPayment
from billing.sales_order.confirmation import ConfirmSalesOrder
from billing.sales_order.creation import CreateSalesOrder
from billing.sales_order.fulfillment import ShipSalesOrder
from billing.sales_order.invoicing import CreateInvoiceFromOrder
from billing.sales_order.sales_order import SalesOrder
from billing.sales_return.creation import CreateSalesReturn, ReceiveSalesReturn
from billing.sales_return.queries import get_sales_return, list_returns_by_order
from billing.sales_return.refund import ProcessRefund, refund_invoice_id
from billing.sales_return.sales_return import SalesReturn, SalesReturnStatus
from billing.stock.adjustment import AdjustmentStatus, StockAdjustment
from protean import current_domain
from protean.exceptions import ValidationError


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _shipped_order():
    """A paid and shipped order for two filters at 25.00, plus its invoice id."""
    order_id = _process(
        CreateSalesOrder(
            organization_id="org-001",
            customer_id="cust-001",
            items=json.dumps([{"item_id": "prt-001", "name": "Filter", "quantity": 2, "unit_price": 25.0}]),
        )
    )
    _process(ConfirmSalesOrder(sales_order_id=order_id))
    invoice_id = _process(CreateInvoiceFromOrder(sales_order_id=order_id))
    _process(SendInvoice(invoice_id=invoice_id))
    _process(RecordPayment(invoice_id=invoice_id, amount=50.0))
    _process(ShipSalesOrder(sales_order_id=order_id))
    return order_id, invoice_id


def _order_line_id(order_id):
    order = current_domain.repository_for(SalesOrder).get(order_id)
    return str(order.sorted_items()[0].id)


def _open_return(order_id, quantity=1):
    return _process(
        CreateSalesReturn(
            sales_order_id=order_id,
            return_reason="Damaged in transit",
            items=json.dumps([{"sales_order_item_id": _order_line_id(order_id), "returned_quantity": quantity}]),
        )
    )


def _return(sales_return_id):
    return current_domain.repository_for(SalesReturn).get(sales_return_id)


class TestCreateSalesReturn:
    def test_return_is_numbered_and_approved(self):
        order_id, _ = _shipped_order()
        sales_return = _return(_open_return(order_id))
        assert sales_return.status == SalesReturnStatus.APPROVED.value
        assert sales_return.return_number.startswith("RMA-")
        assert sales_return.return_number.endswith("-0001")
        assert sales_return.return_amount == 25.0
        assert sales_return.approved_date is not None

    def test_returned_quantity_cannot_exceed_order(self):
        order_id, _ = _shipped_order()
        with pytest.raises(ValidationError) as exc:
            _open_return(order_id, quantity=3)
        assert exc.value.messages["items"] == [
            "item 1: returned quantity (3.00) exceeds original quantity (2.00)"
        ]
        assert list_returns_by_order(order_id) == []

    def test_unshipped_order_cannot_be_returned(self):
        order_id = _process(
            CreateSalesOrder(
                organization_id="org-001",
                customer_id="cust-001",
                items=json.dumps([{"item_id": "prt-001", "name": "Filter", "quantity": 1, "unit_price": 10.0}]),
            )
        )
        with pytest.raises(ValidationError) as exc:
            _open_return(order_id)
        assert "sales_order_id" in exc.value.messages

    def test_reason_is_required(self):
        order_id, _ = _shipped_order()
        with pytest.raises(ValidationError):
            _process(
                CreateSalesReturn(
                    sales_order_id=order_id,
                    items=json.dumps([{"sales_order_item_id": _order_line_id(order_id), "returned_quantity": 1}]),
                )
            )


class TestReceiveSalesReturn:
    def test_receive_records_notes(self):
        order_id, _ = _shipped_order()
        sales_return_id = _open_return(order_id)
        _process(ReceiveSalesReturn(sales_return_id=sales_return_id, receiving_notes="Box dented"))
        sales_return = _return(sales_return_id)
        assert sales_return.status == SalesReturnStatus.RECEIVED.value
        assert sales_return.receiving_notes == "Box dented"

    def test_receive_twice_fails(self):
        order_id, _ = _shipped_order()
        sales_return_id = _open_return(order_id)
        _process(ReceiveSalesReturn(sales_return_id=sales_return_id))
        with pytest.raises(ValidationError):
            _process(ReceiveSalesReturn(sales_return_id=sales_return_id))


class TestProcessRefund:
    def _received_return(self):
        order_id, invoice_id = _shipped_order()
        sales_return_id = _open_return(order_id)
        _process(ReceiveSalesReturn(sales_return_id=sales_return_id))
        return sales_return_id, invoice_id

    def test_refund_records_negative_payment(self):
        sales_return_id, invoice_id = self._received_return()
        refund_id = _process(ProcessRefund(sales_return_id=sales_return_id, method="bank"))

        refund = current_domain.repository_for(Payment).get(refund_id)
        assert refund.amount == -25.0
        assert refund.payment_type == PaymentType.REFUND.value
        assert str(refund.sales_return_id) == sales_return_id
        assert str(refund.invoice_id) == invoice_id

    def test_refund_reduces_paid_amount_and_keeps_invoice_paid(self):
        sales_return_id, invoice_id = self._received_return()
        _process(ProcessRefund(sales_return_id=sales_return_id))

        invoice = current_domain.repository_for(Invoice).get(invoice_id)
        assert invoice.paid_amount == 25.0
        assert invoice.balance_amount == 25.0
        assert invoice.status == InvoiceStatus.PAID.value
        assert get_audit_logs(invoice_id)[-1]["action"] == "REFUND_RECORDED"

    def test_refund_closes_return(self):
        sales_return_id, _ = self._received_return()
        refund_id = _process(ProcessRefund(sales_return_id=sales_return_id))
        data = get_sales_return(sales_return_id)
        assert data["status"] == "refunded"
        assert data["refund_payment_id"] == refund_id

    def test_refund_is_processed_once(self):
        sales_return_id, invoice_id = self._received_return()
        _process(ProcessRefund(sales_return_id=sales_return_id))
        with pytest.raises(ValidationError):
            _process(ProcessRefund(sales_return_id=sales_return_id))
        assert current_domain.repository_for(Invoice).get(invoice_id).paid_amount == 25.0

    def test_unreceived_return_cannot_be_refunded(self):
        order_id, _ = _shipped_order()
        sales_return_id = _open_return(order_id)
        with pytest.raises(ValidationError):
            _process(ProcessRefund(sales_return_id=sales_return_id))

    def test_refund_queues_stock_return(self, inventory):
        inventory.set_stock("prt-001", 10)
        sales_return_id, _ = self._received_return()
        _process(ProcessRefund(sales_return_id=sales_return_id))

        adjustment = (
            current_domain.repository_for(StockAdjustment)
            ._dao.query.filter(reference_id=sales_return_id)
            .all()
            .items[0]
        )
        assert adjustment.transaction_type == "return"
        assert adjustment.status == AdjustmentStatus.APPLIED.value
        # 10 - 2 sold + 1 returned
        assert inventory.levels["prt-001"] == 9

    def test_refund_invoice_id_resolves_through_order(self):
        sales_return_id, invoice_id = self._received_return()
        assert refund_invoice_id(sales_return_id) == invoice_id
