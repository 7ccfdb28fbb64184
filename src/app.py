"""Billing FastAPI application.

Processes commands synchronously over HTTP. Every request runs inside the
billing domain context and carries its method and path in the log context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in the UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
from billing.domain import billing  # noqa: E402
from billing.utils.logging import add_context, clear_context
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

billing.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Billing API",
    description="Invoices, payments, sales orders and sales returns",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the billing domain context and bind request fields to the log context."""
    add_context(method=request.method, path=request.url.path)
    try:
        with billing.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from billing.api import (  # noqa: E402
    estimate_router,
    invoice_router,
    payment_router,
    read_model_router,
    register_exception_handlers,
    sales_order_router,
    sales_return_router,
)

register_exception_handlers(app)
app.include_router(invoice_router)
app.include_router(estimate_router)
app.include_router(payment_router)
app.include_router(sales_order_router)
app.include_router(sales_return_router)
app.include_router(read_model_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": billing.name})
