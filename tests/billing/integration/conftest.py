import pytest
from billing.api import (
    estimate_router,
    invoice_router,
    payment_router,
    read_model_router,
    register_exception_handlers,
    sales_order_router,
    sales_return_router,
)
from fastapi import FastAPI
from fastapi.testclient import TestClient


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    for router in (
        invoice_router,
        estimate_router,
        payment_router,
        sales_order_router,
        sales_return_router,
        read_model_router,
    ):
        app.include_router(router)
    return TestClient(app)
