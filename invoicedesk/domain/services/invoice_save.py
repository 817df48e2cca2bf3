# invoicedesk/domain/services/invoice_save.py
"""
Save flow for one create/edit-invoice session.

    idle -> validating -> validation_failed -> idle
                       -> saving -> success
                                 -> error -> idle

Recurring path: create the schedule (or update the linked one in place);
a newly created schedule for an invoice that already exists is then
linked back onto that invoice. The link call is best-effort: a failure is
logged and reported as ``link_status="pending"``; the schedule stays.

Direct path: create or update the invoice, then optionally send it. A
failed send is an error result that still carries the saved invoice and
its id, so a retry updates instead of creating again.

Calls are awaited one after another; nothing is retried.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable

from invoicedesk.domain.models.api import RecurringInvoiceRecord, SalesInvoiceRecord
from invoicedesk.domain.models.form import InvoiceFormState
from invoicedesk.domain.services.invoice_form import select_calculations
from invoicedesk.domain.services.invoice_validation import validate_for_save
from invoicedesk.domain.services.recurring_schedule import build_invoice_payload, build_recurring_payload
from invoicedesk.domain.services.template_variables import (
    DEFAULT_EMAIL_BODY,
    DEFAULT_EMAIL_SUBJECT,
    TemplateContext,
    substitute,
)
from invoicedesk.infrastructure.external.invoicing_api import InvoicingApiClient, InvoicingApiError

logger = logging.getLogger("invoice_save")


class SaveState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    VALIDATION_FAILED = "validation_failed"
    SAVING = "saving"
    SUCCESS = "success"
    ERROR = "error"


class LinkStatus(str, Enum):
    NOT_NEEDED = "not_needed"
    LINKED = "linked"
    PENDING = "pending"


class SaveInProgressError(RuntimeError):
    """Raised when save() is called while a previous save is still running."""


@dataclass
class SaveResult:
    state: SaveState
    form: InvoiceFormState
    invoice: SalesInvoiceRecord | None = None
    recurring: RecurringInvoiceRecord | None = None
    link_status: LinkStatus = LinkStatus.NOT_NEEDED
    errors: dict[str, str] = field(default_factory=dict)
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.state == SaveState.SUCCESS


def default_email_options(form: InvoiceFormState, invoice: SalesInvoiceRecord) -> dict:
    """Subject/body for "save and send" when the user did not edit them."""
    client = form.client
    ctx = TemplateContext(
        invoice_number=invoice.invoice_number or form.invoice_number,
        business_name=form.business_name,
        client_name=(client.display_name or client.name) if client else "",
        due_date=form.due_date,
        amount=invoice.total_amount if invoice.total_amount is not None else select_calculations(form).total,
        currency=form.currency.value,
    )
    return {
        "to": client.email if client else None,
        "subject": substitute(DEFAULT_EMAIL_SUBJECT, ctx),
        "body": substitute(DEFAULT_EMAIL_BODY, ctx),
    }


class InvoiceSaver:
    def __init__(
        self,
        api: InvoicingApiClient,
        today: Callable[[], date] = date.today,
        new_idempotency_key: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.api = api
        self._today = today
        self._new_key = new_idempotency_key
        # One key per session until a create succeeds, so a re-submit of
        # the same form is recognisable server-side
        self._idempotency_key: str | None = None
        self.state = SaveState.IDLE
        self.history: list[SaveState] = [SaveState.IDLE]

    @property
    def is_saving(self) -> bool:
        return self.state in (SaveState.VALIDATING, SaveState.SAVING)

    def _to(self, state: SaveState) -> None:
        self.state = state
        self.history.append(state)

    def _key(self) -> str:
        if self._idempotency_key is None:
            self._idempotency_key = self._new_key()
        return self._idempotency_key

    async def save(
        self,
        form: InvoiceFormState,
        send: bool = False,
        email_options: dict | None = None,
    ) -> SaveResult:
        if self.is_saving:
            raise SaveInProgressError("A save is already in progress")

        self._to(SaveState.VALIDATING)
        errors = validate_for_save(form)
        if errors:
            self._to(SaveState.VALIDATION_FAILED)
            self._to(SaveState.IDLE)
            return SaveResult(
                state=SaveState.VALIDATION_FAILED,
                form=form.model_copy(update={"errors": errors}),
                errors=errors,
            )

        form = form.model_copy(update={"errors": {}, "is_saving": True})
        self._to(SaveState.SAVING)
        try:
            if form.recurring.is_recurring:
                result = await self._save_recurring(form)
            else:
                result = await self._save_direct(form, send, email_options)
        except InvoicingApiError as exc:
            logger.error("Failed to save invoice: %s (status=%s)", exc, exc.status_code)
            self._to(SaveState.ERROR)
            self._to(SaveState.IDLE)
            return SaveResult(
                state=SaveState.ERROR,
                form=form.model_copy(update={"is_saving": False}),
                message=str(exc) or "Failed to save invoice",
            )
        except BaseException:
            # Cancelled or failed unexpectedly; reopen the gate and propagate
            self._to(SaveState.ERROR)
            self._to(SaveState.IDLE)
            raise

        # The record exists from here on; a retry updates it
        self._idempotency_key = None
        result.form = result.form.model_copy(update={"is_saving": False})
        if result.state == SaveState.ERROR:
            self._to(SaveState.ERROR)
            self._to(SaveState.IDLE)
        else:
            self._to(SaveState.SUCCESS)
        return result

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    async def _save_recurring(self, form: InvoiceFormState) -> SaveResult:
        payload = build_recurring_payload(form)

        if form.recurring_invoice_id is not None:
            recurring = await self.api.update_recurring_invoice(form.recurring_invoice_id, payload)
            logger.info("Updated recurring invoice %s", recurring.id)
            return SaveResult(state=SaveState.SUCCESS, form=form, recurring=recurring)

        recurring = await self.api.create_recurring_invoice(payload, idempotency_key=self._key())
        logger.info("Created recurring invoice %s", recurring.id)
        form = form.model_copy(update={"recurring_invoice_id": recurring.id})

        link_status = LinkStatus.NOT_NEEDED
        if form.invoice_id is not None:
            link_status = await self._link_schedule(form.invoice_id, recurring.id)

        return SaveResult(
            state=SaveState.SUCCESS,
            form=form,
            recurring=recurring,
            link_status=link_status,
        )

    async def _link_schedule(self, invoice_id: int, recurring_id: int) -> LinkStatus:
        try:
            await self.api.update_sales_invoice(invoice_id, {"recurring_invoice_id": recurring_id})
        except InvoicingApiError:
            logger.warning(
                "Could not link recurring invoice %s to invoice %s; link pending",
                recurring_id, invoice_id, exc_info=True,
            )
            return LinkStatus.PENDING
        return LinkStatus.LINKED

    async def _save_direct(
        self,
        form: InvoiceFormState,
        send: bool,
        email_options: dict | None,
    ) -> SaveResult:
        payload = build_invoice_payload(form, self._today())

        if form.invoice_id is not None:
            invoice = await self.api.update_sales_invoice(form.invoice_id, payload)
        else:
            invoice = await self.api.create_sales_invoice(payload, idempotency_key=self._key())
            form = form.model_copy(update={"invoice_id": invoice.id})
        logger.info("Saved invoice %s", invoice.id)

        if send:
            options = email_options if email_options is not None else default_email_options(form, invoice)
            try:
                invoice = await self.api.send_sales_invoice(invoice.id, options)
            except InvoicingApiError as exc:
                logger.error("Invoice %s saved but not sent: %s (status=%s)", invoice.id, exc, exc.status_code)
                return SaveResult(
                    state=SaveState.ERROR,
                    form=form,
                    invoice=invoice,
                    message=f"Invoice saved but could not be sent: {exc}",
                )
            logger.info("Sent invoice %s", invoice.id)

        return SaveResult(state=SaveState.SUCCESS, form=form, invoice=invoice)
