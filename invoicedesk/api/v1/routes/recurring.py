# invoicedesk/api/v1/routes/recurring.py
"""
Recurring-invoice endpoints: schedule payload and run-date preview.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from invoicedesk.api.v1.envelope import ok, validation_failed
from invoicedesk.api.v1.schemas.recurring import (
    RecurringPayloadRequest,
    SchedulePreviewRequest,
    SchedulePreviewResponse,
)
from invoicedesk.domain.services.invoice_validation import validate_for_save
from invoicedesk.domain.services.recurring_schedule import (
    build_recurring_payload,
    frequency_display,
    next_run_date,
    upcoming_run_dates,
)

logger = logging.getLogger("api.v1.recurring")

router = APIRouter(prefix="/recurring-invoices", tags=["Recurring invoices"])


@router.post("/payload", response_model=dict)
async def recurring_payload(body: RecurringPayloadRequest):
    """Create/update payload for the recurring-invoice resource."""
    form = body.form
    if not form.recurring.is_recurring:
        form = form.model_copy(update={"recurring": form.recurring.model_copy(update={"is_recurring": True})})

    errors = validate_for_save(form)
    if errors:
        logger.info("Recurring payload rejected: %s", sorted(errors))
        return validation_failed(errors)
    return ok(build_recurring_payload(form, name=body.name))


@router.post("/preview", response_model=dict)
async def preview(body: SchedulePreviewRequest):
    settings = body.settings
    runs = upcoming_run_dates(settings, body.count)
    result = SchedulePreviewResponse(
        frequency=settings.frequency.value,
        frequency_display=frequency_display(settings.frequency),
        run_dates=runs,
        next_run_date=next_run_date(settings.frequency, runs[0]) if runs else None,
    )
    return ok(result)
