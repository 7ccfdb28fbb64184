import os

import pytest
from billing.customers import reset_directory, set_directory
from billing.customers.fake_adapter import FakeCustomerDirectory
from billing.documents import reset_renderer, set_renderer
from billing.documents.fake_adapter import FakeInvoiceRenderer
from billing.inventory import reset_inventory, set_inventory
from billing.inventory.fake_adapter import FakeInventoryService


@pytest.fixture(scope="session")
def _billing_domain(request):
    """Initialize the billing domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from billing.domain import billing

    billing.init()
    return billing


@pytest.fixture(scope="session", autouse=True)
def setup_db(_billing_domain):
    from billing.utils.db import drop_db, setup_db

    setup_db(_billing_domain)

    yield

    drop_db(_billing_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_billing_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _billing_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def inventory():
    """Stock is tracked by an in-memory inventory service in every test."""
    fake = FakeInventoryService()
    set_inventory(fake)
    yield fake
    reset_inventory()


@pytest.fixture(autouse=True)
def directory():
    fake = FakeCustomerDirectory()
    set_directory(fake)
    yield fake
    reset_directory()


@pytest.fixture(autouse=True)
def renderer():
    fake = FakeInvoiceRenderer()
    set_renderer(fake)
    yield fake
    reset_renderer()
