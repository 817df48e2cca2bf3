# invoicedesk/domain/models/form.py
"""Serializable state of one create/edit-invoice session."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from invoicedesk.domain.models.api import Client
from invoicedesk.domain.models.invoice import (
    ZERO,
    Currency,
    CustomField,
    Discount,
    LineItem,
    TaxConfig,
)
from invoicedesk.domain.models.recurring import RecurringSettings


class InvoiceFormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Set when editing an existing invoice / its linked schedule
    invoice_id: int | None = None
    recurring_invoice_id: int | None = None

    invoice_number: str = ""
    title: str = "Tax Invoice"
    client: Client | None = None
    seller_state_code: str | None = None
    business_name: str = ""

    invoice_date: date | None = None
    due_date: date | None = None
    payment_terms_days: int = 30

    currency: Currency = Currency.INR
    exchange_rate: Decimal | None = None

    line_items: tuple[LineItem, ...] = (LineItem(),)
    discount: Discount = Field(default_factory=Discount)
    extra_charges: Decimal = ZERO
    tax_config: TaxConfig = Field(default_factory=TaxConfig)

    notes: str = ""
    terms: str = ""
    custom_fields: tuple[CustomField, ...] = ()

    recurring: RecurringSettings = Field(default_factory=RecurringSettings)

    errors: dict[str, str] = Field(default_factory=dict)
    is_saving: bool = False

    @property
    def is_editing(self) -> bool:
        return self.invoice_id is not None
