"""Shared BDD fixtures and step definitions for the Billing domain."""

import json

import pytest
from billing.invoice.creation import CreateInvoice
from billing.invoice.invoice import Invoice
from billing.invoice.sending import SendInvoice
from billing.payment.recording import RecordPayment
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def ids():
    """Identifiers of the records a scenario has created, by role."""
    return {}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def _process(command, error=None):
    if error is None:
        return current_domain.process(command, asynchronous=False)
    try:
        return current_domain.process(command, asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc
        return None


# ---------------------------------------------------------------------------
# Invoice Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a draft invoice with a line of {quantity:d} x {unit_price:f}"))
def _draft_invoice(ids, quantity, unit_price):
    ids["invoice"] = _process(
        CreateInvoice(
            organization_id="org-001",
            customer_id="cust-001",
            subject="BDD invoice",
            items=json.dumps(
                [{"item_id": "svc-001", "name": "Service", "quantity": quantity, "unit_price": unit_price}]
            ),
        )
    )


@given("the invoice was sent")
def _invoice_sent(ids):
    ids["invoice_number"] = _process(SendInvoice(invoice_id=ids["invoice"]))


# ---------------------------------------------------------------------------
# Payment steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("a payment of {amount:f} is recorded"))
@given(parsers.cfparse("a payment of {amount:f} was recorded"))
def _record_payment(ids, error, amount):
    payment_id = _process(RecordPayment(invoice_id=ids["invoice"], amount=amount), error)
    if payment_id:
        ids.setdefault("payments", []).append(payment_id)


# ---------------------------------------------------------------------------
# Invoice Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the invoice status is "{status}"'))
def _invoice_status(ids, status):
    assert current_domain.repository_for(Invoice).get(ids["invoice"]).status == status


@then(parsers.cfparse("the invoice balance is {balance:f}"))
def _invoice_balance(ids, balance):
    assert current_domain.repository_for(Invoice).get(ids["invoice"]).balance_amount == balance


@then(parsers.cfparse("the invoice paid amount is {paid:f}"))
def _invoice_paid(ids, paid):
    assert current_domain.repository_for(Invoice).get(ids["invoice"]).paid_amount == paid


@then("the action fails with a validation error")
def _action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the error for "{field}" is "{message}"'))
def _error_message(error, field, message):
    assert error["exc"].messages[field] == [message]
