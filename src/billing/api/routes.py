"""FastAPI routes for the Billing domain: invoices, payments, sales orders,
sales returns and the read model.

Every route runs inside the billing domain context pushed by the app
middleware. Money-moving routes go through ``process_serialized`` so that
commands touching the same invoice run one at a time.
"""

import json

from fastapi import APIRouter, Header
from protean.utils.globals import current_domain

from billing.api.schemas import (
    CancelSalesOrderRequest,
    ConvertEstimateRequest,
    CreateInvoiceRequest,
    CreateSalesOrderRequest,
    CreateSalesReturnRequest,
    DocumentResponse,
    InvoiceIdResponse,
    InvoiceNumberResponse,
    OrderNumberResponse,
    PaymentIdResponse,
    ProcessRefundRequest,
    ReceiveSalesReturnRequest,
    RecordPaymentRequest,
    RefundResponse,
    SalesOrderIdResponse,
    SalesReturnIdResponse,
    StatusResponse,
    UpdateInvoiceRequest,
    UpdateInvoiceStatusRequest,
    UpdateSalesOrderRequest,
    VoidPaymentRequest,
)
from billing.invoice.creation import CreateInvoice
from billing.invoice.deletion import DeleteInvoice
from billing.invoice.document import RenderInvoiceDocument
from billing.invoice.editing import UpdateInvoice
from billing.invoice.estimate_conversion import ConvertEstimateToInvoice
from billing.invoice.queries import get_audit_logs, get_invoice, list_invoices, list_invoices_by_module
from billing.invoice.sending import SendInvoice
from billing.invoice.status import UpdateInvoiceStatus
from billing.payment.queries import get_payment, list_payments_by_invoice, list_payments_by_module
from billing.payment.recording import RecordPayment
from billing.payment.serialization import process_serialized
from billing.payment.voiding import VoidPayment, payment_invoice_id
from billing.projections import queries as read_model
from billing.sales_order.confirmation import ConfirmSalesOrder
from billing.sales_order.creation import CreateSalesOrder, UpdateSalesOrder
from billing.sales_order.fulfillment import CancelSalesOrder, ShipSalesOrder
from billing.sales_order.invoicing import CreateInvoiceFromOrder
from billing.sales_order.queries import get_sales_order, list_sales_orders
from billing.sales_return.creation import CreateSalesReturn, ReceiveSalesReturn
from billing.sales_return.queries import get_sales_return, list_returns_by_order, list_sales_returns
from billing.sales_return.refund import ProcessRefund, refund_invoice_id


def _dump_json(value):
    if value is None:
        return None
    if isinstance(value, list):
        return json.dumps([entry.model_dump() for entry in value])
    return json.dumps(value.model_dump())


# ---------------------------------------------------------------------------
# Invoice Router
# ---------------------------------------------------------------------------
invoice_router = APIRouter(prefix="/invoices", tags=["invoices"])


@invoice_router.post("", status_code=201, response_model=InvoiceIdResponse)
async def create_invoice(body: CreateInvoiceRequest, x_organization_id: str = Header()) -> InvoiceIdResponse:
    """Create a draft invoice. It gets a number only when it is sent."""
    command = CreateInvoice(
        organization_id=x_organization_id,
        customer_id=body.customer_id,
        contact_id=body.contact_id,
        owner_id=body.owner_id,
        subject=body.subject,
        source_system=body.source_system,
        source_reference_id=body.source_reference_id,
        reference_no=body.reference_no,
        sales_order=body.sales_order,
        purchase_order=body.purchase_order,
        invoice_date=body.invoice_date,
        due_date=body.due_date,
        currency=body.currency,
        adjustment=body.adjustment,
        excise_duty=body.excise_duty,
        sales_commission=body.sales_commission,
        tds_amount=body.tds_amount,
        tcs_amount=body.tcs_amount,
        terms=body.terms,
        notes=body.notes,
        billing_address=_dump_json(body.billing_address),
        shipping_address=_dump_json(body.shipping_address),
        items=_dump_json(body.items),
    )
    result = current_domain.process(command, asynchronous=False)
    return InvoiceIdResponse(invoice_id=result)


@invoice_router.get("")
async def list_all_invoices(x_organization_id: str = Header()) -> list[dict]:
    return list_invoices(x_organization_id)


@invoice_router.get("/module/{source_system}")
async def list_module_invoices(source_system: str, x_organization_id: str = Header()) -> list[dict]:
    """Invoices raised by one source system (FSM, CRM, INVENTORY, MANUAL)."""
    return list_invoices_by_module(x_organization_id, source_system)


@invoice_router.get("/{invoice_id}")
async def read_invoice(invoice_id: str) -> dict:
    return get_invoice(invoice_id)


@invoice_router.put("/{invoice_id}", response_model=StatusResponse)
async def update_invoice(invoice_id: str, body: UpdateInvoiceRequest) -> StatusResponse:
    command = UpdateInvoice(
        invoice_id=invoice_id,
        subject=body.subject,
        contact_id=body.contact_id,
        owner_id=body.owner_id,
        reference_no=body.reference_no,
        purchase_order=body.purchase_order,
        invoice_date=body.invoice_date,
        due_date=body.due_date,
        currency=body.currency,
        adjustment=body.adjustment,
        excise_duty=body.excise_duty,
        sales_commission=body.sales_commission,
        tds_amount=body.tds_amount,
        tcs_amount=body.tcs_amount,
        terms=body.terms,
        notes=body.notes,
        billing_address=_dump_json(body.billing_address),
        shipping_address=_dump_json(body.shipping_address),
        items=_dump_json(body.items),
        expected_version=body.expected_version,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@invoice_router.delete("/{invoice_id}", response_model=StatusResponse)
async def delete_invoice(invoice_id: str) -> StatusResponse:
    current_domain.process(DeleteInvoice(invoice_id=invoice_id), asynchronous=False)
    return StatusResponse(status="deleted")


@invoice_router.post("/{invoice_id}/send", response_model=InvoiceNumberResponse)
async def send_invoice(invoice_id: str) -> InvoiceNumberResponse:
    invoice_number = current_domain.process(SendInvoice(invoice_id=invoice_id), asynchronous=False)
    return InvoiceNumberResponse(invoice_id=invoice_id, invoice_number=invoice_number)


@invoice_router.put("/{invoice_id}/status", response_model=StatusResponse)
async def update_invoice_status(invoice_id: str, body: UpdateInvoiceStatusRequest) -> StatusResponse:
    command = UpdateInvoiceStatus(
        invoice_id=invoice_id,
        status=body.status,
        notes=body.notes,
        performed_by=body.performed_by,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.status)


@invoice_router.get("/{invoice_id}/pdf", response_model=DocumentResponse)
async def render_invoice_pdf(invoice_id: str) -> DocumentResponse:
    """Render the invoice document. Drafts come back watermarked."""
    pdf_path = current_domain.process(RenderInvoiceDocument(invoice_id=invoice_id), asynchronous=False)
    return DocumentResponse(invoice_id=invoice_id, pdf_path=pdf_path)


@invoice_router.get("/{invoice_id}/audit-logs")
async def read_audit_logs(invoice_id: str) -> list[dict]:
    return get_audit_logs(invoice_id)


@invoice_router.get("/{invoice_id}/payments")
async def read_invoice_payments(invoice_id: str) -> list[dict]:
    return list_payments_by_invoice(invoice_id)


# ---------------------------------------------------------------------------
# Estimate Router
# ---------------------------------------------------------------------------
estimate_router = APIRouter(prefix="/estimates", tags=["invoices"])


@estimate_router.post("/{estimate_id}/invoice", status_code=201, response_model=InvoiceIdResponse)
async def convert_estimate(
    estimate_id: str, body: ConvertEstimateRequest, x_organization_id: str = Header()
) -> InvoiceIdResponse:
    """Turn a CRM estimate into a draft invoice that links back to it."""
    command = ConvertEstimateToInvoice(
        organization_id=x_organization_id,
        estimate_id=estimate_id,
        customer_id=body.customer_id,
        contact_id=body.contact_id,
        subject=body.subject,
        invoice_date=body.invoice_date,
        due_date=body.due_date,
        currency=body.currency,
        adjustment=body.adjustment,
        terms=body.terms,
        notes=body.notes,
        billing_address=_dump_json(body.billing_address),
        shipping_address=_dump_json(body.shipping_address),
        items=_dump_json(body.items),
    )
    result = current_domain.process(command, asynchronous=False)
    return InvoiceIdResponse(invoice_id=result)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("", status_code=201, response_model=PaymentIdResponse)
async def record_payment(body: RecordPaymentRequest) -> PaymentIdResponse:
    """Record money received against a sent invoice."""
    command = RecordPayment(
        invoice_id=body.invoice_id,
        amount=body.amount,
        payment_date=body.payment_date,
        method=body.method,
        reference=body.reference,
        notes=body.notes,
        expected_version=body.expected_version,
    )
    payment_id = process_serialized(command, body.invoice_id)
    return PaymentIdResponse(payment_id=payment_id)


@payment_router.get("/module/{source_system}")
async def list_module_payments(source_system: str, x_organization_id: str = Header()) -> list[dict]:
    return list_payments_by_module(x_organization_id, source_system)


@payment_router.get("/{payment_id}")
async def read_payment(payment_id: str) -> dict:
    return get_payment(payment_id)


@payment_router.post("/{payment_id}/void", response_model=StatusResponse)
async def void_payment(payment_id: str, body: VoidPaymentRequest) -> StatusResponse:
    command = VoidPayment(payment_id=payment_id, reason=body.reason, expected_version=body.expected_version)
    process_serialized(command, payment_invoice_id(payment_id))
    return StatusResponse(status="voided")


# ---------------------------------------------------------------------------
# Sales Order Router
# ---------------------------------------------------------------------------
sales_order_router = APIRouter(prefix="/sales-orders", tags=["sales-orders"])


@sales_order_router.post("", status_code=201, response_model=SalesOrderIdResponse)
async def create_sales_order(body: CreateSalesOrderRequest, x_organization_id: str = Header()) -> SalesOrderIdResponse:
    command = CreateSalesOrder(
        organization_id=x_organization_id,
        customer_id=body.customer_id,
        contact_id=body.contact_id,
        order_date=body.order_date,
        currency=body.currency,
        tds_amount=body.tds_amount,
        tcs_amount=body.tcs_amount,
        terms=body.terms,
        notes=body.notes,
        items=_dump_json(body.items),
    )
    result = current_domain.process(command, asynchronous=False)
    return SalesOrderIdResponse(sales_order_id=result)


@sales_order_router.get("")
async def list_all_sales_orders(x_organization_id: str = Header()) -> list[dict]:
    return list_sales_orders(x_organization_id)


@sales_order_router.get("/{sales_order_id}")
async def read_sales_order(sales_order_id: str) -> dict:
    return get_sales_order(sales_order_id)


@sales_order_router.put("/{sales_order_id}", response_model=StatusResponse)
async def update_sales_order(sales_order_id: str, body: UpdateSalesOrderRequest) -> StatusResponse:
    command = UpdateSalesOrder(
        sales_order_id=sales_order_id,
        contact_id=body.contact_id,
        order_date=body.order_date,
        currency=body.currency,
        tds_amount=body.tds_amount,
        tcs_amount=body.tcs_amount,
        terms=body.terms,
        notes=body.notes,
        items=_dump_json(body.items),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@sales_order_router.post("/{sales_order_id}/confirm", response_model=OrderNumberResponse)
async def confirm_sales_order(sales_order_id: str) -> OrderNumberResponse:
    order_number = current_domain.process(ConfirmSalesOrder(sales_order_id=sales_order_id), asynchronous=False)
    return OrderNumberResponse(sales_order_id=sales_order_id, order_number=order_number)


@sales_order_router.post("/{sales_order_id}/invoice", status_code=201, response_model=InvoiceIdResponse)
async def create_invoice_from_order(sales_order_id: str) -> InvoiceIdResponse:
    invoice_id = current_domain.process(CreateInvoiceFromOrder(sales_order_id=sales_order_id), asynchronous=False)
    return InvoiceIdResponse(invoice_id=invoice_id)


@sales_order_router.post("/{sales_order_id}/ship", response_model=StatusResponse)
async def ship_sales_order(sales_order_id: str) -> StatusResponse:
    current_domain.process(ShipSalesOrder(sales_order_id=sales_order_id), asynchronous=False)
    return StatusResponse(status="shipped")


@sales_order_router.post("/{sales_order_id}/cancel", response_model=StatusResponse)
async def cancel_sales_order(sales_order_id: str, body: CancelSalesOrderRequest) -> StatusResponse:
    current_domain.process(CancelSalesOrder(sales_order_id=sales_order_id, reason=body.reason), asynchronous=False)
    return StatusResponse(status="cancelled")


@sales_order_router.get("/{sales_order_id}/returns")
async def read_order_returns(sales_order_id: str) -> list[dict]:
    return list_returns_by_order(sales_order_id)


# ---------------------------------------------------------------------------
# Sales Return Router
# ---------------------------------------------------------------------------
sales_return_router = APIRouter(prefix="/sales-returns", tags=["sales-returns"])


@sales_return_router.post("", status_code=201, response_model=SalesReturnIdResponse)
async def create_sales_return(body: CreateSalesReturnRequest) -> SalesReturnIdResponse:
    """Open a return against a paid, shipped order. It is approved on creation."""
    command = CreateSalesReturn(
        sales_order_id=body.sales_order_id,
        return_reason=body.return_reason,
        return_date=body.return_date,
        notes=body.notes,
        items=_dump_json(body.items),
    )
    result = current_domain.process(command, asynchronous=False)
    return SalesReturnIdResponse(sales_return_id=result)


@sales_return_router.get("")
async def list_all_sales_returns(x_organization_id: str = Header()) -> list[dict]:
    return list_sales_returns(x_organization_id)


@sales_return_router.get("/{sales_return_id}")
async def read_sales_return(sales_return_id: str) -> dict:
    return get_sales_return(sales_return_id)


@sales_return_router.post("/{sales_return_id}/receive", response_model=StatusResponse)
async def receive_sales_return(sales_return_id: str, body: ReceiveSalesReturnRequest) -> StatusResponse:
    command = ReceiveSalesReturn(sales_return_id=sales_return_id, receiving_notes=body.receiving_notes)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="received")


@sales_return_router.post("/{sales_return_id}/refund", response_model=RefundResponse)
async def process_refund(sales_return_id: str, body: ProcessRefundRequest) -> RefundResponse:
    command = ProcessRefund(
        sales_return_id=sales_return_id,
        method=body.method,
        payment_date=body.payment_date,
        reference=body.reference,
        notes=body.notes,
        expected_version=body.expected_version,
    )
    refund_payment_id = process_serialized(command, refund_invoice_id(sales_return_id))
    return RefundResponse(sales_return_id=sales_return_id, refund_payment_id=refund_payment_id)


# ---------------------------------------------------------------------------
# Read Model Router
# ---------------------------------------------------------------------------
read_model_router = APIRouter(prefix="/read-model", tags=["read-model"])


@read_model_router.get("/customers")
async def list_customers(q: str | None = None, x_organization_id: str = Header()) -> list[dict]:
    """Customers of the organization, optionally matching ``q`` on name, company, email or phone."""
    return read_model.list_customers(x_organization_id, q)


@read_model_router.get("/customers/{customer_id}")
async def read_customer(customer_id: str) -> dict:
    return read_model.get_customer(customer_id)


@read_model_router.get("/contacts")
async def list_contacts(
    q: str | None = None, customer_id: str | None = None, x_organization_id: str = Header()
) -> list[dict]:
    return read_model.list_contacts(x_organization_id, q, customer_id)


@read_model_router.get("/items")
async def list_items(
    item_type: str | None = None, q: str | None = None, x_organization_id: str = Header()
) -> list[dict]:
    """Items of the organization, optionally matching ``q`` on name, SKU or description."""
    return read_model.list_items(x_organization_id, item_type, q)


@read_model_router.get("/items/{item_id}")
async def read_item(item_id: str) -> dict:
    return read_model.get_item(item_id)
