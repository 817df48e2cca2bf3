# invoicedesk/domain/models/api.py
"""
Response shapes of the invoicing REST backend.

Each endpoint the client reads gets its own model so payloads are
validated once at the I/O boundary; unknown keys are ignored.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from invoicedesk.domain.models.invoice import CustomField


class _ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Client(_ApiModel):
    id: int
    name: str = ""
    display_name: str | None = None
    email: str | None = None
    gstin: str | None = None
    billing_state_code: str | None = None
    currency: str | None = None


class BusinessProfile(_ApiModel):
    id: int | None = None
    business_name: str = ""
    gstin: str | None = None
    state_code: str | None = None
    default_payment_terms_days: int | None = None
    default_notes: str | None = None
    default_terms: str | None = None
    invoice_prefix: str | None = None


class NextInvoiceNumber(_ApiModel):
    next_number: str = "INV-001"


class ExchangeRateQuote(_ApiModel):
    # "from" is a keyword, so the quote keeps only what the form needs
    to: str | None = None
    rate: Decimal = Decimal("1")
    updated_at: datetime | None = None


class SalesInvoiceLineItem(_ApiModel):
    id: int | None = None
    description: str | None = None
    hsn_sac_code: str | None = None
    quantity: Decimal | None = None
    unit: str | None = None
    rate: Decimal | None = None
    gst_rate: Decimal | None = None


class SalesInvoiceRecord(_ApiModel):
    id: int
    invoice_number: str | None = None
    status: str | None = None
    client_id: int | None = None
    client: Client | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    currency: str | None = None
    exchange_rate: Decimal | None = None
    discount_amount: Decimal | None = None
    discount_type: str | None = None
    tax_type: str | None = None
    place_of_supply: str | None = None
    igst_rate: Decimal | None = None
    cess_rate: Decimal | None = None
    is_reverse_charge: bool | None = None
    notes: str | None = None
    terms: str | None = None
    total_amount: Decimal | None = None
    recurring_invoice_id: int | None = None
    line_items: list[SalesInvoiceLineItem] = []
    custom_fields: list[CustomField] = []


class RecurringInvoiceRecord(_ApiModel):
    id: int
    name: str | None = None
    client_id: int | None = None
    frequency: str | None = None
    status: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    next_run_date: date | None = None
    currency: str | None = None
    payment_terms_days: int | None = None
    auto_send: bool | None = None
    send_to_email: str | None = None
    send_cc_emails: str | None = None
    send_email_subject: str | None = None
    send_email_body: str | None = None


class OtpResponse(_ApiModel):
    success: bool = False
    message: str | None = None
    token: str | None = None
