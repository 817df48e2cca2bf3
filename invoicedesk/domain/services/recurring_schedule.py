# invoicedesk/domain/services/recurring_schedule.py
"""
Recurring schedule configuration.

Turns the form's :class:`RecurringSettings` plus the invoice template
(line items without tax fields, notes, terms) into the payload of the
recurring-invoice resource, and builds the plain sales-invoice payload
for the non-recurring path. Also computes run dates the same way the
backend scheduler does, for previews.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from dateutil.relativedelta import relativedelta

from invoicedesk.domain.models.api import RecurringInvoiceRecord
from invoicedesk.domain.models.form import InvoiceFormState
from invoicedesk.domain.models.invoice import Currency, TaxType
from invoicedesk.domain.models.recurring import EndType, Frequency, RecurringSettings
from invoicedesk.domain.services.invoice_totals import average_gst_rate
from invoicedesk.domain.services.line_items import line_items_payload, template_line_items

_STEPS: dict[Frequency, relativedelta] = {
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.BIWEEKLY: relativedelta(weeks=2),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.YEARLY: relativedelta(years=1),
}

_DISPLAY: dict[Frequency, str] = {
    Frequency.WEEKLY: "Weekly",
    Frequency.BIWEEKLY: "Every 2 Weeks",
    Frequency.MONTHLY: "Monthly",
    Frequency.QUARTERLY: "Quarterly",
    Frequency.YEARLY: "Yearly",
}

MAX_PREVIEW_RUNS = 24


# ---------------------------------------------------------------------------
# Schedule arithmetic
# ---------------------------------------------------------------------------

def frequency_display(frequency: Frequency | str) -> str:
    try:
        return _DISPLAY[Frequency(frequency)]
    except ValueError:
        return str(frequency).replace("_", " ").title()


def next_run_date(frequency: Frequency | str, from_date: date) -> date:
    """Next occurrence after ``from_date``; month steps clamp to month end."""
    try:
        step = _STEPS[Frequency(frequency)]
    except ValueError:
        step = _STEPS[Frequency.MONTHLY]
    return from_date + step


def upcoming_run_dates(settings: RecurringSettings, count: int = 6) -> list[date]:
    """First ``count`` run dates starting at ``start_date``, stopping at ``end_date``.

    Each run steps from the previous run, so a schedule starting on the
    31st drifts to the 30th/28th after a short month, like the scheduler.
    """
    if settings.start_date is None or count <= 0:
        return []
    count = min(count, MAX_PREVIEW_RUNS)
    end = settings.end_date if settings.end_type == EndType.END_ON_DATE else None

    runs: list[date] = []
    current = settings.start_date
    while len(runs) < count and (end is None or current <= end):
        runs.append(current)
        current = next_run_date(settings.frequency, current)
    return runs


# ---------------------------------------------------------------------------
# Settings lifecycle
# ---------------------------------------------------------------------------

def default_settings(today: date, client_email: str | None = None) -> RecurringSettings:
    """Fresh settings for a new invoice (recurring switched off)."""
    return RecurringSettings(
        is_recurring=False,
        frequency=Frequency.MONTHLY,
        start_date=today,
        end_type=EndType.NEVER,
        auto_send=False,
        send_to_email=client_email or None,
    )


def settings_from_record(record: RecurringInvoiceRecord) -> RecurringSettings:
    """Settings for an invoice whose linked schedule is being edited."""
    try:
        frequency = Frequency(record.frequency or Frequency.MONTHLY.value)
    except ValueError:
        frequency = Frequency.MONTHLY
    return RecurringSettings(
        is_recurring=True,
        frequency=frequency,
        start_date=record.start_date,
        end_type=EndType.END_ON_DATE if record.end_date else EndType.NEVER,
        end_date=record.end_date,
        auto_send=bool(record.auto_send),
        send_to_email=record.send_to_email,
        send_cc_emails=record.send_cc_emails,
        send_email_subject=record.send_email_subject,
        send_email_body=record.send_email_body,
    )


def change_end_type(settings: RecurringSettings, end_type: EndType) -> RecurringSettings:
    """Switching to "never" forgets the end date."""
    return settings.model_copy(update={
        "end_type": end_type,
        "end_date": settings.end_date if end_type == EndType.END_ON_DATE else None,
    })


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

def api_tax_type(form: InvoiceFormState) -> str:
    """``none`` or the GST split the backend should apply."""
    if form.tax_config.tax_type == TaxType.NONE:
        return "none"
    return form.tax_config.gst_type.value


def schedule_name(form: InvoiceFormState) -> str:
    client_name = ""
    if form.client is not None:
        client_name = form.client.display_name or form.client.name
    label = frequency_display(form.recurring.frequency)
    return f"{client_name} - {label}" if client_name else f"{label} invoice"


def build_recurring_payload(form: InvoiceFormState, name: str | None = None) -> dict[str, Any]:
    """Payload for creating/updating the recurring-invoice resource."""
    settings = form.recurring
    currency = form.currency.value

    payload: dict[str, Any] = {
        "name": name or schedule_name(form),
        "client_id": form.client.id if form.client else None,
        "frequency": settings.frequency.value,
        "start_date": settings.start_date,
        "currency": currency,
        "payment_terms_days": form.payment_terms_days,
        "auto_send": settings.auto_send,
        "template_data": {
            "line_items": template_line_items(form.line_items),
            "notes": form.notes,
            "terms": form.terms,
            "currency": currency,
            "tax_type": api_tax_type(form),
            "gst_rate": average_gst_rate(form.line_items),
        },
    }
    if settings.end_type == EndType.END_ON_DATE and settings.end_date:
        payload["end_date"] = settings.end_date
    if settings.auto_send:
        payload["send_to_email"] = (settings.send_to_email or "").strip()
        if settings.send_cc_emails:
            payload["send_cc_emails"] = settings.send_cc_emails
        if settings.send_email_subject:
            payload["send_email_subject"] = settings.send_email_subject
        if settings.send_email_body:
            payload["send_email_body"] = settings.send_email_body
    return payload


def build_invoice_payload(form: InvoiceFormState, today: date) -> dict[str, Any]:
    """Payload for creating/updating the sales invoice itself."""
    foreign = form.currency != Currency.INR
    payload: dict[str, Any] = {
        "client_id": form.client.id if form.client else None,
        "invoice_date": form.invoice_date,
        "due_date": form.due_date,
        "currency": form.currency.value,
        "discount_amount": form.discount.amount,
        "discount_type": form.discount.type.value,
        "tax_type": api_tax_type(form),
        "place_of_supply": form.tax_config.place_of_supply,
        "cess_rate": form.tax_config.cess_rate,
        "is_reverse_charge": form.tax_config.is_reverse_charge,
        "notes": form.notes,
        "terms": form.terms,
        "line_items": line_items_payload(form.line_items),
        "custom_fields": [f.model_dump() for f in form.custom_fields],
    }
    if foreign:
        payload["exchange_rate"] = form.exchange_rate
        payload["exchange_rate_date"] = today
    return payload
