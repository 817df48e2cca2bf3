# invoicedesk/domain/services/invoice_totals.py
"""
Invoice totals calculation.

Tax is charged per line item at that item's own GST rate on the gross
(pre-discount) amount. Discount and extra charges only move the taxable
amount, which feeds cess and the grand total:

    taxable_amount = subtotal - discount + extra_charges
    total          = taxable_amount + total_tax + cess_amount

Everything here is pure; identical inputs give identical results.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Iterable

from invoicedesk.domain.models.invoice import (
    ZERO,
    Calculations,
    Currency,
    Discount,
    DiscountType,
    GstType,
    ItemCalculation,
    LineItem,
    TaxConfig,
    TaxType,
)

HUNDRED = Decimal("100")
DEFAULT_DISPLAY_GST_RATE = Decimal("18")


def calculate_item(item: LineItem, tax_type: TaxType) -> ItemCalculation:
    amount = item.quantity * item.rate
    tax_amount = amount * item.gst_rate / HUNDRED if tax_type == TaxType.GST_INDIA else ZERO
    return ItemCalculation(amount=amount, tax_amount=tax_amount, total=amount + tax_amount)


def calculate_discount(subtotal: Decimal, discount: Discount) -> Decimal:
    if discount.type == DiscountType.PERCENTAGE:
        return subtotal * discount.amount / HUNDRED
    return discount.amount


def calculate_totals(
    line_items: Iterable[LineItem],
    discount: Discount | None = None,
    extra_charges: Decimal = ZERO,
    tax_config: TaxConfig | None = None,
    currency: Currency = Currency.INR,
    exchange_rate: Decimal | None = None,
) -> Calculations:
    """Compute per-item and aggregate totals for an invoice.

    Items flagged for deletion are skipped. A missing ``exchange_rate`` for
    a foreign-currency invoice falls back to 1.
    """
    discount = discount or Discount()
    tax_config = tax_config or TaxConfig()
    extra_charges = _dec(extra_charges)

    item_calculations = tuple(
        calculate_item(item, tax_config.tax_type) for item in line_items if not item.destroy
    )

    subtotal = sum((c.amount for c in item_calculations), ZERO)
    total_tax = sum((c.tax_amount for c in item_calculations), ZERO)

    discount_value = calculate_discount(subtotal, discount)
    taxable_amount = subtotal - discount_value + extra_charges

    cgst_amount = sgst_amount = igst_amount = ZERO
    if tax_config.tax_type == TaxType.GST_INDIA:
        if tax_config.gst_type == GstType.CGST_SGST:
            cgst_amount = total_tax / 2
            sgst_amount = total_tax / 2
        else:
            igst_amount = total_tax

    cess_amount = ZERO
    if tax_config.cess_rate > 0:
        cess_amount = taxable_amount * tax_config.cess_rate / HUNDRED

    total = taxable_amount + total_tax + cess_amount

    total_in_inr = total
    if currency != Currency.INR:
        total_in_inr = total * (_dec(exchange_rate) or Decimal("1"))

    return Calculations(
        subtotal=subtotal,
        discount=discount_value,
        taxable_amount=taxable_amount,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        igst_amount=igst_amount,
        cess_amount=cess_amount,
        total_tax=total_tax,
        total=total,
        total_in_inr=total_in_inr,
        item_calculations=item_calculations,
    )


@lru_cache(maxsize=256)
def cached_totals(
    line_items: tuple[LineItem, ...],
    discount: Discount,
    extra_charges: Decimal,
    tax_config: TaxConfig,
    currency: Currency,
    exchange_rate: Decimal | None,
) -> Calculations:
    """Memoized :func:`calculate_totals`, keyed on the full input tuple."""
    return calculate_totals(line_items, discount, extra_charges, tax_config, currency, exchange_rate)


def _dec(val) -> Decimal:
    """Convert int/float/str to Decimal without binary float noise; None -> 0."""
    if val is None:
        return ZERO
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val))


def average_gst_rate(line_items: Iterable[LineItem]) -> Decimal:
    """Unweighted mean GST rate of live items, for display only."""
    rates = [item.gst_rate for item in line_items if not item.destroy]
    if not rates:
        return DEFAULT_DISPLAY_GST_RATE
    return sum(rates, ZERO) / len(rates)
