# invoicedesk/domain/models/recurring.py
"""Recurring billing settings as edited on the invoice form."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Frequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class EndType(str, Enum):
    NEVER = "never"
    END_ON_DATE = "end_on_date"


class RecurringSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_recurring: bool = False
    frequency: Frequency = Frequency.MONTHLY
    start_date: date | None = None
    end_type: EndType = EndType.NEVER
    end_date: date | None = None
    auto_send: bool = False
    send_to_email: str | None = None
    send_cc_emails: str | None = None
    send_email_subject: str | None = None
    send_email_body: str | None = None
