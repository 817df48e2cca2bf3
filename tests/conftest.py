"""Shared test fixtures for the invoicedesk test suite."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from invoicedesk.domain.models.api import BusinessProfile, Client
from invoicedesk.domain.models.form import InvoiceFormState
from invoicedesk.domain.models.invoice import LineItem
from invoicedesk.domain.models.recurring import RecurringSettings


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def today() -> date:
    return date(2025, 1, 15)


@pytest.fixture
def client_mh() -> Client:
    """Buyer in Maharashtra (27)."""
    return Client(
        id=7,
        name="XYZ Enterprises",
        email="accounts@xyz.example",
        gstin="27AADCB2230M1ZP",
        billing_state_code="27",
    )


@pytest.fixture
def profile_ts() -> BusinessProfile:
    """Seller in Telangana (36)."""
    return BusinessProfile(
        business_name="ABC Traders",
        gstin="36AABCU9603R1ZM",
        state_code="36",
        default_payment_terms_days=15,
        default_notes="Thank you for your business",
        default_terms="Payment within 15 days",
    )


@pytest.fixture
def two_items() -> tuple[LineItem, ...]:
    return (
        LineItem(description="Consulting", quantity=Decimal("2"), rate=Decimal("100"), gst_rate=Decimal("18")),
        LineItem(description="Hosting", quantity=Decimal("1"), rate=Decimal("50"), gst_rate=Decimal("12")),
    )


@pytest.fixture
def valid_form(today, client_mh, two_items) -> InvoiceFormState:
    """A complete one-off invoice ready to save."""
    return InvoiceFormState(
        invoice_number="INV-001",
        client=client_mh,
        seller_state_code="36",
        business_name="ABC Traders",
        invoice_date=today,
        due_date=date(2025, 2, 14),
        line_items=two_items,
        recurring=RecurringSettings(start_date=today),
    )


@pytest.fixture
def recurring_form(valid_form, today) -> InvoiceFormState:
    return valid_form.model_copy(update={
        "recurring": RecurringSettings(
            is_recurring=True,
            start_date=today,
            auto_send=True,
            send_to_email="accounts@xyz.example",
        ),
    })
