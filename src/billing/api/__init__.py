"""Billing domain API package."""

from billing.api.errors import register_exception_handlers
from billing.api.routes import (
    estimate_router,
    invoice_router,
    payment_router,
    read_model_router,
    sales_order_router,
    sales_return_router,
)

__all__ = [
    "invoice_router",
    "estimate_router",
    "payment_router",
    "sales_order_router",
    "sales_return_router",
    "read_model_router",
    "register_exception_handlers",
]
