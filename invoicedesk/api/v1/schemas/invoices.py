# invoicedesk/api/v1/schemas/invoices.py
"""Request and response schemas for invoice endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from invoicedesk.domain.models.form import InvoiceFormState
from invoicedesk.domain.models.invoice import (
    ZERO,
    Calculations,
    Currency,
    Discount,
    LineItem,
    TaxConfig,
)


class CalculateRequest(BaseModel):
    """Inputs of the totals calculation (a subset of the invoice form)."""

    line_items: list[LineItem] = Field(default_factory=list)
    discount: Discount = Field(default_factory=Discount)
    extra_charges: Decimal = ZERO
    tax_config: TaxConfig = Field(default_factory=TaxConfig)
    currency: Currency = Currency.INR
    exchange_rate: Decimal | None = Field(default=None, gt=0)


class CalculateResponse(BaseModel):
    calculations: Calculations
    average_gst_rate: Decimal
    amount_in_words: str
    formatted_total: str


class ValidateResponse(BaseModel):
    valid: bool
    errors: dict[str, str]


class InvoicePayloadRequest(BaseModel):
    form: InvoiceFormState
    # Date stamped as exchange_rate_date on foreign-currency invoices
    today: date | None = None
