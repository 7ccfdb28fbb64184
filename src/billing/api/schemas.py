"""Pydantic request/response schemas for the Billing API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Business rules (positive quantities, payment
limits, transitions) are enforced by the domain so their messages reach
the caller unchanged.
"""

from datetime import date

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class LineItemSchema(BaseModel):
    item_id: str
    item_type: str | None = None
    name: str | None = None
    description: str | None = None
    quantity: float
    unit_price: float = 0.0
    discount: float = 0.0
    tax: float = 0.0
    metadata: dict | None = None  # Owned by the originating module


class AddressSchema(BaseModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    code: str | None = None
    country: str | None = None


class ReturnLineSchema(BaseModel):
    sales_order_item_id: str
    returned_quantity: float
    unit_price: float | None = None
    tax: float | None = None
    reason: str | None = None


# ---------------------------------------------------------------------------
# Invoice Request Schemas
# ---------------------------------------------------------------------------
class CreateInvoiceRequest(BaseModel):
    customer_id: str
    contact_id: str | None = None
    owner_id: str | None = None
    subject: str
    source_system: str = "MANUAL"
    source_reference_id: str | None = None
    reference_no: str | None = None
    sales_order: str | None = None
    purchase_order: str | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    currency: str = "USD"
    adjustment: float = 0.0
    excise_duty: float = 0.0
    sales_commission: float = 0.0
    tds_amount: float = 0.0
    tcs_amount: float = 0.0
    terms: str | None = None
    notes: str | None = None
    billing_address: AddressSchema | None = None
    shipping_address: AddressSchema | None = None
    items: list[LineItemSchema]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "subject": "Quarterly maintenance",
                    "items": [
                        {"item_id": "svc-001", "quantity": 1, "unit_price": 100, "discount": 10, "tax": 9},
                        {"item_id": "prt-001", "quantity": 2, "unit_price": 25, "discount": 5, "tax": 4.5},
                    ],
                }
            ]
        }
    }


class EstimateLineSchema(BaseModel):
    item_id: str
    description: str | None = None
    quantity: float
    unit_price: float = 0.0
    discount: float = 0.0
    tax: float = 0.0


class ConvertEstimateRequest(BaseModel):
    customer_id: str
    contact_id: str | None = None
    subject: str | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    currency: str = "USD"
    adjustment: float = 0.0
    terms: str | None = None
    notes: str | None = None
    billing_address: AddressSchema | None = None
    shipping_address: AddressSchema | None = None
    items: list[EstimateLineSchema]


class UpdateInvoiceRequest(BaseModel):
    contact_id: str | None = None
    owner_id: str | None = None
    subject: str | None = None
    reference_no: str | None = None
    purchase_order: str | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    currency: str | None = None
    adjustment: float | None = None
    excise_duty: float | None = None
    sales_commission: float | None = None
    tds_amount: float | None = None
    tcs_amount: float | None = None
    terms: str | None = None
    notes: str | None = None
    billing_address: AddressSchema | None = None
    shipping_address: AddressSchema | None = None
    items: list[LineItemSchema] | None = None
    expected_version: int | None = None


class UpdateInvoiceStatusRequest(BaseModel):
    status: str
    notes: str | None = None
    performed_by: str = "System"


# ---------------------------------------------------------------------------
# Payment Request Schemas
# ---------------------------------------------------------------------------
class RecordPaymentRequest(BaseModel):
    invoice_id: str
    amount: float
    payment_date: date | None = None
    method: str = "cash"
    reference: str | None = None
    notes: str | None = None
    expected_version: int | None = None


class VoidPaymentRequest(BaseModel):
    reason: str | None = None
    expected_version: int | None = None


# ---------------------------------------------------------------------------
# Sales Order Request Schemas
# ---------------------------------------------------------------------------
class CreateSalesOrderRequest(BaseModel):
    customer_id: str
    contact_id: str | None = None
    order_date: date | None = None
    currency: str = "USD"
    tds_amount: float = 0.0
    tcs_amount: float = 0.0
    terms: str | None = None
    notes: str | None = None
    items: list[LineItemSchema]


class UpdateSalesOrderRequest(BaseModel):
    contact_id: str | None = None
    order_date: date | None = None
    currency: str | None = None
    tds_amount: float | None = None
    tcs_amount: float | None = None
    terms: str | None = None
    notes: str | None = None
    items: list[LineItemSchema] | None = None


class CancelSalesOrderRequest(BaseModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Sales Return Request Schemas
# ---------------------------------------------------------------------------
class CreateSalesReturnRequest(BaseModel):
    sales_order_id: str
    return_reason: str
    return_date: date | None = None
    notes: str | None = None
    items: list[ReturnLineSchema]


class ReceiveSalesReturnRequest(BaseModel):
    receiving_notes: str | None = None


class ProcessRefundRequest(BaseModel):
    method: str = "cash"
    payment_date: date | None = None
    reference: str | None = None
    notes: str | None = None
    expected_version: int | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class InvoiceIdResponse(BaseModel):
    invoice_id: str


class InvoiceNumberResponse(BaseModel):
    invoice_id: str
    invoice_number: str


class DocumentResponse(BaseModel):
    invoice_id: str
    pdf_path: str


class PaymentIdResponse(BaseModel):
    payment_id: str


class SalesOrderIdResponse(BaseModel):
    sales_order_id: str


class OrderNumberResponse(BaseModel):
    sales_order_id: str
    order_number: str


class SalesReturnIdResponse(BaseModel):
    sales_return_id: str


class RefundResponse(BaseModel):
    sales_return_id: str
    refund_payment_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
