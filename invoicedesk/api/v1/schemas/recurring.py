# invoicedesk/api/v1/schemas/recurring.py
"""Request and response schemas for recurring-invoice endpoints."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from invoicedesk.domain.models.form import InvoiceFormState
from invoicedesk.domain.models.recurring import RecurringSettings
from invoicedesk.domain.services.recurring_schedule import MAX_PREVIEW_RUNS


class RecurringPayloadRequest(BaseModel):
    form: InvoiceFormState
    name: str | None = Field(default=None, max_length=255)


class SchedulePreviewRequest(BaseModel):
    settings: RecurringSettings
    count: int = Field(default=6, ge=1, le=MAX_PREVIEW_RUNS)


class SchedulePreviewResponse(BaseModel):
    frequency: str
    frequency_display: str
    run_dates: list[date]
    next_run_date: date | None = None
