# invoicedesk/api/v1/routes/invoices.py
"""
Invoice form endpoints: totals calculation, validation and the
sales-invoice payload the backend expects.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter

from invoicedesk.api.v1.envelope import ok, validation_failed
from invoicedesk.api.v1.schemas.invoices import (
    CalculateRequest,
    CalculateResponse,
    InvoicePayloadRequest,
    ValidateResponse,
)
from invoicedesk.domain.models.form import InvoiceFormState
from invoicedesk.domain.services.amount_in_words import amount_in_words, format_indian_number
from invoicedesk.domain.services.invoice_totals import average_gst_rate, calculate_totals
from invoicedesk.domain.services.invoice_validation import validate_for_save
from invoicedesk.domain.services.recurring_schedule import build_invoice_payload

logger = logging.getLogger("api.v1.invoices")

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post("/calculate", response_model=dict)
async def calculate(body: CalculateRequest):
    """Totals, tax split and amount in words for the given line items."""
    calculations = calculate_totals(
        body.line_items,
        discount=body.discount,
        extra_charges=body.extra_charges,
        tax_config=body.tax_config,
        currency=body.currency,
        exchange_rate=body.exchange_rate,
    )
    result = CalculateResponse(
        calculations=calculations,
        average_gst_rate=average_gst_rate(body.line_items),
        amount_in_words=amount_in_words(calculations.total, body.currency.value),
        formatted_total=format_indian_number(calculations.total),
    )
    return ok(result)


@router.post("/validate", response_model=dict)
async def validate(form: InvoiceFormState):
    errors = validate_for_save(form)
    return ok(ValidateResponse(valid=not errors, errors=errors))


@router.post("/payload", response_model=dict)
async def invoice_payload(body: InvoicePayloadRequest):
    """Sales-invoice create/update payload; 422 when the form is incomplete."""
    errors = validate_for_save(body.form)
    if errors:
        logger.info("Invoice payload rejected: %s", sorted(errors))
        return validation_failed(errors)
    return ok(build_invoice_payload(body.form, body.today or date.today()))
