# invoicedesk/domain/services/invoice_validation.py
"""
Local validation of the invoice form.

``validate_invoice_form`` returns a field-keyed map of messages; an empty
map means the save may proceed. Nothing here touches the network.
``validate_amounts`` adds numeric bounds checks for money and rate fields.
"""

from __future__ import annotations

import re
from decimal import Decimal

from invoicedesk.domain.models.form import InvoiceFormState
from invoicedesk.domain.models.invoice import Currency, DiscountType
from invoicedesk.domain.models.recurring import EndType
from invoicedesk.domain.services.gst_states import GST_RATES
from invoicedesk.domain.services.line_items import live_line_items

MAX_AMOUNT = Decimal("999999999.99")
MAX_RATE = Decimal("100")
MAX_QUANTITY = Decimal("999999")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _is_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value.strip()))


def validate_invoice_form(form: InvoiceFormState) -> dict[str, str]:
    errors: dict[str, str] = {}

    if form.client is None:
        errors["client"] = "Please select a client"

    # Recurring invoices get their dates per occurrence from the scheduler
    if not form.recurring.is_recurring:
        if form.invoice_date is None:
            errors["invoice_date"] = "Invoice date is required"
        if form.due_date is None:
            errors["due_date"] = "Due date is required"

    items = live_line_items(form.line_items)
    if not items:
        errors["line_items"] = "At least one line item is required"
    elif any(not item.description.strip() for item in items):
        errors["line_items"] = "All line items must have a description"

    if form.recurring.is_recurring:
        settings = form.recurring
        if settings.start_date is None:
            errors["start_date"] = "Start date is required"
        if settings.end_type == EndType.END_ON_DATE:
            if settings.end_date is None:
                errors["end_date"] = "End date is required"
            elif settings.start_date and settings.end_date < settings.start_date:
                errors["end_date"] = "End date must be after start date"
        if settings.auto_send:
            email = (settings.send_to_email or "").strip()
            if not email:
                errors["send_to_email"] = "Email address is required for auto-send"
            elif not _is_email(email):
                errors["send_to_email"] = "Please enter a valid email address"

    return errors


def validate_for_save(form: InvoiceFormState) -> dict[str, str]:
    """Field errors plus amount bounds (joined under ``amounts``)."""
    errors = validate_invoice_form(form)
    amount_errors = validate_amounts(form)
    if amount_errors:
        errors["amounts"] = "; ".join(amount_errors)
    return errors


def validate_amounts(form: InvoiceFormState) -> list[str]:
    """Bounds checks on numeric inputs; returns human-readable messages."""
    errors: list[str] = []

    discount = form.discount.amount
    if discount < 0:
        errors.append("Discount amount cannot be negative")
    elif discount > MAX_AMOUNT:
        errors.append("Discount amount exceeds maximum allowed")
    elif form.discount.type == DiscountType.PERCENTAGE and discount > MAX_RATE:
        errors.append("Discount percentage cannot exceed 100%")

    if form.extra_charges < 0:
        errors.append("Extra charges cannot be negative")
    elif form.extra_charges > MAX_AMOUNT:
        errors.append("Extra charges exceed maximum allowed")

    if form.currency != Currency.INR and form.exchange_rate is not None:
        if form.exchange_rate <= 0:
            errors.append("Exchange rate must be positive")
        elif form.exchange_rate > MAX_AMOUNT:
            errors.append("Exchange rate exceeds maximum allowed")

    if form.tax_config.cess_rate > MAX_RATE:
        errors.append(f"Cess rate exceeds maximum allowed ({MAX_RATE}%)")

    if form.invoice_date and form.due_date and form.due_date < form.invoice_date:
        errors.append("Due date must be on or after invoice date")

    for position, item in enumerate(live_line_items(form.line_items), start=1):
        if item.rate < 0:
            errors.append(f"Line item {position}: rate cannot be negative")
        elif item.rate > MAX_AMOUNT:
            errors.append(f"Line item {position}: rate exceeds maximum allowed")

        if item.quantity <= 0:
            errors.append(f"Line item {position}: quantity must be positive")
        elif item.quantity > MAX_QUANTITY:
            errors.append(f"Line item {position}: quantity exceeds maximum allowed")

        if item.gst_rate not in GST_RATES:
            errors.append(
                f"Line item {position}: GST rate must be one of "
                + ", ".join(f"{r}%" for r in GST_RATES)
            )

    return errors
