# invoicedesk/domain/models/invoice.py
"""
Invoice form models: line items, tax configuration, discount and the
derived calculations record.

Models are frozen so edits always produce a new object
(``model_copy(update=...)``) and so they can be used as cache keys.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

ZERO = Decimal("0")


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class TaxType(str, Enum):
    GST_INDIA = "gst_india"
    NONE = "none"


class GstType(str, Enum):
    IGST = "igst"
    CGST_SGST = "cgst_sgst"


class DiscountType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class LineItem(BaseModel):
    """One invoice row. ``destroy`` maps to the API's ``_destroy`` flag."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int | None = None
    description: str = ""
    hsn_sac_code: str = ""
    quantity: Decimal = Decimal("1")
    unit: str = "qty"
    rate: Decimal = ZERO
    gst_rate: Decimal = Decimal("18")
    show_description: bool = False
    destroy: bool = Field(default=False, alias="_destroy")


class TaxConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    tax_type: TaxType = TaxType.GST_INDIA
    place_of_supply: str = ""
    gst_type: GstType = GstType.IGST
    cess_rate: Decimal = Field(default=ZERO, ge=0)
    is_reverse_charge: bool = False


class Discount(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal = ZERO
    type: DiscountType = DiscountType.FIXED


class ItemCalculation(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total: Decimal = ZERO


class Calculations(BaseModel):
    """Derived totals for the whole invoice."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal = ZERO
    discount: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    cgst_amount: Decimal = ZERO
    sgst_amount: Decimal = ZERO
    igst_amount: Decimal = ZERO
    cess_amount: Decimal = ZERO
    total_tax: Decimal = ZERO
    total: Decimal = ZERO
    total_in_inr: Decimal = ZERO
    item_calculations: tuple[ItemCalculation, ...] = ()


class CustomField(BaseModel):
    """Free-form label/value pair printed on the invoice (e.g. GST Number)."""

    model_config = ConfigDict(frozen=True)

    label: str = ""
    value: str = ""
