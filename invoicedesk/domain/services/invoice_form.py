# invoicedesk/domain/services/invoice_form.py
"""
Transitions over :class:`InvoiceFormState`.

Each function takes the current state and returns a new one; the totals
are a selector over the state (``select_calculations``) rather than
stored fields, so they can never drift from the inputs.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from invoicedesk.domain.models.api import BusinessProfile, Client, RecurringInvoiceRecord, SalesInvoiceRecord
from invoicedesk.domain.models.form import InvoiceFormState
from invoicedesk.domain.models.invoice import (
    ZERO,
    Calculations,
    Currency,
    CustomField,
    Discount,
    DiscountType,
    GstType,
    LineItem,
    TaxConfig,
    TaxType,
)
from invoicedesk.domain.models.recurring import RecurringSettings
from invoicedesk.domain.services import line_items as li
from invoicedesk.domain.services.gst_states import normalize_state_code, resolve_gst_type
from invoicedesk.domain.services.invoice_totals import average_gst_rate, cached_totals
from invoicedesk.domain.services.recurring_schedule import default_settings, settings_from_record


def new_form(today: date, invoice_number: str = "") -> InvoiceFormState:
    return InvoiceFormState(
        invoice_number=invoice_number,
        invoice_date=today,
        recurring=default_settings(today),
    )


def _due_from_terms(invoice_date: date | None, days: int) -> date | None:
    return invoice_date + timedelta(days=days) if invoice_date else None


# ---------------------------------------------------------------------------
# Defaults and loading
# ---------------------------------------------------------------------------

def apply_business_profile(
    state: InvoiceFormState,
    profile: BusinessProfile,
    default_payment_terms_days: int = 30,
) -> InvoiceFormState:
    """Seed a new invoice from the seller's profile.

    On an invoice being edited only the seller facts are taken; the
    stored notes, terms and dates are left alone.
    """
    terms_days = profile.default_payment_terms_days or default_payment_terms_days
    update: dict[str, Any] = {
        "seller_state_code": normalize_state_code(profile.state_code) or None,
        "business_name": profile.business_name,
        "payment_terms_days": terms_days,
    }
    if not state.is_editing:
        update["notes"] = profile.default_notes or ""
        update["terms"] = profile.default_terms or ""
        update["due_date"] = _due_from_terms(state.invoice_date, terms_days)
        if profile.state_code:
            update["tax_config"] = state.tax_config.model_copy(
                update={"place_of_supply": normalize_state_code(profile.state_code)}
            )
        if profile.gstin:
            update["custom_fields"] = (CustomField(label="GST Number", value=profile.gstin),)

    new_state = state.model_copy(update=update)
    # A client picked before the profile arrived still needs its GST type
    if new_state.client is not None:
        new_state = _auto_detect_gst(new_state)
    return new_state


def load_invoice(
    state: InvoiceFormState,
    record: SalesInvoiceRecord,
    recurring: RecurringInvoiceRecord | None = None,
) -> InvoiceFormState:
    """Populate the form from an existing invoice (edit mode)."""
    items = tuple(
        LineItem(
            id=item.id,
            description=item.description or "",
            hsn_sac_code=item.hsn_sac_code or "",
            quantity=item.quantity or Decimal("1"),
            unit=item.unit or "qty",
            rate=item.rate or ZERO,
            gst_rate=item.gst_rate if item.gst_rate is not None else Decimal("18"),
        )
        for item in record.line_items
    ) or state.line_items

    try:
        currency = Currency(record.currency or Currency.INR.value)
    except ValueError:
        currency = Currency.INR
    try:
        discount_type = DiscountType(record.discount_type or DiscountType.FIXED.value)
    except ValueError:
        discount_type = DiscountType.FIXED

    tax_config = TaxConfig(
        tax_type=TaxType.NONE if record.tax_type == "none" else TaxType.GST_INDIA,
        place_of_supply=normalize_state_code(record.place_of_supply),
        gst_type=GstType.IGST if record.igst_rate else GstType.CGST_SGST,
        cess_rate=record.cess_rate or ZERO,
        is_reverse_charge=bool(record.is_reverse_charge),
    )

    recurring_settings = state.recurring
    if recurring is not None:
        recurring_settings = settings_from_record(recurring)

    return state.model_copy(update={
        "invoice_id": record.id,
        "recurring_invoice_id": record.recurring_invoice_id or (recurring.id if recurring else None),
        "invoice_number": record.invoice_number or state.invoice_number,
        "client": record.client or state.client,
        "invoice_date": record.invoice_date,
        "due_date": record.due_date,
        "currency": currency,
        "exchange_rate": record.exchange_rate,
        "discount": Discount(amount=record.discount_amount or ZERO, type=discount_type),
        "notes": record.notes or "",
        "terms": record.terms or "",
        "line_items": items,
        "custom_fields": tuple(record.custom_fields),
        "tax_config": tax_config,
        "recurring": recurring_settings,
        "errors": {},
    })


# ---------------------------------------------------------------------------
# Client and tax
# ---------------------------------------------------------------------------

def _auto_detect_gst(state: InvoiceFormState) -> InvoiceFormState:
    buyer_state = state.client.billing_state_code if state.client else None
    gst_type = resolve_gst_type(state.seller_state_code, buyer_state)
    if gst_type is None:
        return state
    tax_config = state.tax_config.model_copy(update={
        "place_of_supply": normalize_state_code(buyer_state),
        "gst_type": gst_type,
    })
    return state.model_copy(update={"tax_config": tax_config})


def select_client(state: InvoiceFormState, client: Client | None) -> InvoiceFormState:
    """Choosing a client re-derives the GST type, discarding manual overrides."""
    recurring = state.recurring
    if client is not None and client.email and not recurring.send_to_email:
        recurring = recurring.model_copy(update={"send_to_email": client.email})
    errors = dict(state.errors)
    if client is not None:
        errors.pop("client", None)
    new_state = state.model_copy(update={"client": client, "recurring": recurring, "errors": errors})
    return _auto_detect_gst(new_state)


def configure_tax(state: InvoiceFormState, **changes: Any) -> InvoiceFormState:
    """Manual edit from the tax configuration dialog."""
    tax_config = TaxConfig.model_validate({**state.tax_config.model_dump(), **changes})
    return state.model_copy(update={"tax_config": tax_config})


# ---------------------------------------------------------------------------
# Scalar fields
# ---------------------------------------------------------------------------

def set_dates(
    state: InvoiceFormState,
    invoice_date: date | None = None,
    due_date: date | None = None,
) -> InvoiceFormState:
    """Changing the invoice date of a new invoice re-derives the due date."""
    update: dict[str, Any] = {}
    if invoice_date is not None:
        update["invoice_date"] = invoice_date
        if not state.is_editing and due_date is None:
            update["due_date"] = _due_from_terms(invoice_date, state.payment_terms_days)
    if due_date is not None:
        update["due_date"] = due_date
    return state.model_copy(update=update)


def set_discount(state: InvoiceFormState, amount: Decimal, discount_type: DiscountType | str) -> InvoiceFormState:
    discount = Discount(amount=amount, type=DiscountType(discount_type))
    return state.model_copy(update={"discount": discount})


def set_extra_charges(state: InvoiceFormState, amount: Decimal) -> InvoiceFormState:
    return state.model_copy(update={"extra_charges": Decimal(str(amount))})


def set_currency(state: InvoiceFormState, currency: Currency | str) -> InvoiceFormState:
    """A currency change invalidates any previously fetched rate."""
    currency = Currency(currency)
    if currency == state.currency:
        return state
    return state.model_copy(update={"currency": currency, "exchange_rate": None})


def set_exchange_rate(state: InvoiceFormState, rate: Decimal | None) -> InvoiceFormState:
    return state.model_copy(update={"exchange_rate": Decimal(str(rate)) if rate is not None else None})


def set_notes(state: InvoiceFormState, notes: str | None = None, terms: str | None = None) -> InvoiceFormState:
    update = {}
    if notes is not None:
        update["notes"] = notes
    if terms is not None:
        update["terms"] = terms
    return state.model_copy(update=update)


def set_recurring(state: InvoiceFormState, settings: RecurringSettings) -> InvoiceFormState:
    return state.model_copy(update={"recurring": settings})


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------

def add_line_item(state: InvoiceFormState) -> InvoiceFormState:
    return state.model_copy(update={"line_items": li.add_line_item(state.line_items)})


def remove_line_item(state: InvoiceFormState, index: int) -> InvoiceFormState:
    return state.model_copy(update={"line_items": li.remove_line_item(state.line_items, index)})


def update_line_item(state: InvoiceFormState, index: int, **changes: Any) -> InvoiceFormState:
    return state.model_copy(update={"line_items": li.update_line_item(state.line_items, index, **changes)})


# ---------------------------------------------------------------------------
# Custom fields
# ---------------------------------------------------------------------------

def add_custom_field(state: InvoiceFormState, label: str = "", value: str = "") -> InvoiceFormState:
    fields = (*state.custom_fields, CustomField(label=label, value=value))
    return state.model_copy(update={"custom_fields": fields})


def update_custom_field(state: InvoiceFormState, index: int, **changes: Any) -> InvoiceFormState:
    fields = list(state.custom_fields)
    fields[index] = fields[index].model_copy(update=changes)
    return state.model_copy(update={"custom_fields": tuple(fields)})


def remove_custom_field(state: InvoiceFormState, index: int) -> InvoiceFormState:
    fields = state.custom_fields[:index] + state.custom_fields[index + 1:]
    return state.model_copy(update={"custom_fields": fields})


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

def select_calculations(state: InvoiceFormState) -> Calculations:
    return cached_totals(
        tuple(state.line_items),
        state.discount,
        state.extra_charges,
        state.tax_config,
        state.currency,
        state.exchange_rate,
    )


def select_average_gst_rate(state: InvoiceFormState) -> Decimal:
    return average_gst_rate(state.line_items)
