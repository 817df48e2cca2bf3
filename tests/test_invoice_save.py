# tests/test_invoice_save.py
"""Tests for the invoice save flow."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from invoicedesk.domain.models.api import RecurringInvoiceRecord, SalesInvoiceRecord
from invoicedesk.domain.services.invoice_save import (
    InvoiceSaver,
    LinkStatus,
    SaveInProgressError,
    SaveState,
)
from invoicedesk.infrastructure.external.invoicing_api import InvoicingApiError


@pytest.fixture
def api():
    mock = AsyncMock()
    mock.create_sales_invoice.return_value = SalesInvoiceRecord(id=101, invoice_number="INV-001")
    mock.update_sales_invoice.return_value = SalesInvoiceRecord(id=101)
    mock.send_sales_invoice.return_value = SalesInvoiceRecord(id=101, status="sent")
    mock.create_recurring_invoice.return_value = RecurringInvoiceRecord(id=55)
    mock.update_recurring_invoice.return_value = RecurringInvoiceRecord(id=55)
    return mock


@pytest.fixture
def saver(api, today):
    return InvoiceSaver(api, today=lambda: today, new_idempotency_key=lambda: "key-1")


class TestValidationGate:
    def test_invalid_form_makes_no_calls(self, event_loop, saver, api, valid_form):
        form = valid_form.model_copy(update={"client": None})
        result = event_loop.run_until_complete(saver.save(form))

        assert result.state == SaveState.VALIDATION_FAILED
        assert result.errors["client"] == "Please select a client"
        assert result.form.errors == result.errors
        assert api.method_calls == []
        assert saver.state == SaveState.IDLE
        assert saver.history == [
            SaveState.IDLE, SaveState.VALIDATING, SaveState.VALIDATION_FAILED, SaveState.IDLE,
        ]

    def test_recurring_without_email_makes_no_calls(self, event_loop, saver, api, recurring_form):
        settings = recurring_form.recurring.model_copy(update={"send_to_email": ""})
        form = recurring_form.model_copy(update={"recurring": settings})
        result = event_loop.run_until_complete(saver.save(form))

        assert result.state == SaveState.VALIDATION_FAILED
        assert "send_to_email" in result.errors
        api.create_recurring_invoice.assert_not_called()


class TestDirectPath:
    def test_create(self, event_loop, saver, api, valid_form):
        result = event_loop.run_until_complete(saver.save(valid_form))

        assert result.ok
        assert result.invoice.id == 101
        assert result.form.invoice_id == 101
        assert result.form.is_saving is False
        payload = api.create_sales_invoice.call_args.args[0]
        assert payload["client_id"] == 7
        assert api.create_sales_invoice.call_args.kwargs["idempotency_key"] == "key-1"
        api.create_recurring_invoice.assert_not_called()
        assert saver.history[-2:] == [SaveState.SAVING, SaveState.SUCCESS]

    def test_update_existing(self, event_loop, saver, api, valid_form):
        form = valid_form.model_copy(update={"invoice_id": 101})
        event_loop.run_until_complete(saver.save(form))

        api.update_sales_invoice.assert_awaited_once()
        assert api.update_sales_invoice.call_args.args[0] == 101
        api.create_sales_invoice.assert_not_called()

    def test_save_and_send(self, event_loop, saver, api, valid_form):
        options = {"to": "accounts@xyz.example"}
        result = event_loop.run_until_complete(saver.save(valid_form, send=True, email_options=options))

        api.send_sales_invoice.assert_awaited_once_with(101, options)
        assert result.invoice.status == "sent"

    def test_send_without_options_uses_default_email(self, event_loop, saver, api, valid_form):
        event_loop.run_until_complete(saver.save(valid_form, send=True))

        invoice_id, options = api.send_sales_invoice.call_args.args
        assert invoice_id == 101
        assert options["to"] == "accounts@xyz.example"
        assert options["subject"] == "Invoice #INV-001 from ABC Traders"
        assert "Dear XYZ Enterprises," in options["body"]
        assert "INR 292" in options["body"]
        assert "14 Feb 2025" in options["body"]

    def test_remote_error_surfaces_message(self, event_loop, saver, api, valid_form):
        api.create_sales_invoice.side_effect = InvoicingApiError("Client not found", status_code=422)
        result = event_loop.run_until_complete(saver.save(valid_form))

        assert result.state == SaveState.ERROR
        assert result.message == "Client not found"
        assert result.form.is_saving is False
        assert saver.state == SaveState.IDLE

    def test_retry_after_error_reuses_idempotency_key(self, event_loop, api, valid_form, today):
        keys = iter(["first", "second"])
        saver = InvoiceSaver(api, today=lambda: today, new_idempotency_key=lambda: next(keys))
        api.create_sales_invoice.side_effect = [InvoicingApiError("timeout"), SalesInvoiceRecord(id=1)]

        event_loop.run_until_complete(saver.save(valid_form))
        event_loop.run_until_complete(saver.save(valid_form))

        used = [c.kwargs["idempotency_key"] for c in api.create_sales_invoice.call_args_list]
        assert used == ["first", "first"]

    def test_send_failure_keeps_created_invoice(self, event_loop, saver, api, valid_form):
        api.send_sales_invoice.side_effect = InvoicingApiError("Mailer down", status_code=502)
        result = event_loop.run_until_complete(saver.save(valid_form, send=True))

        assert result.state == SaveState.ERROR
        assert result.invoice.id == 101
        assert result.form.invoice_id == 101
        assert result.form.is_saving is False
        assert "Mailer down" in result.message
        assert saver.state == SaveState.IDLE

        api.send_sales_invoice.side_effect = None
        retry = event_loop.run_until_complete(saver.save(result.form, send=True))

        assert retry.ok
        assert api.create_sales_invoice.await_count == 1
        api.update_sales_invoice.assert_awaited_once()
        assert api.update_sales_invoice.call_args.args[0] == 101


class TestRecurringPath:
    def test_create_schedule_for_new_invoice(self, event_loop, saver, api, recurring_form):
        result = event_loop.run_until_complete(saver.save(recurring_form))

        assert result.ok
        assert result.recurring.id == 55
        assert result.form.recurring_invoice_id == 55
        assert result.link_status == LinkStatus.NOT_NEEDED
        payload = api.create_recurring_invoice.call_args.args[0]
        assert payload["frequency"] == "monthly"
        api.create_sales_invoice.assert_not_called()
        api.update_sales_invoice.assert_not_called()

    def test_links_schedule_to_existing_invoice(self, event_loop, saver, api, recurring_form):
        form = recurring_form.model_copy(update={"invoice_id": 101})
        result = event_loop.run_until_complete(saver.save(form))

        api.update_sales_invoice.assert_awaited_once_with(101, {"recurring_invoice_id": 55})
        assert result.link_status == LinkStatus.LINKED

    def test_failed_link_is_pending_not_error(self, event_loop, saver, api, recurring_form):
        api.update_sales_invoice.side_effect = InvoicingApiError("boom", status_code=500)
        form = recurring_form.model_copy(update={"invoice_id": 101})
        result = event_loop.run_until_complete(saver.save(form))

        assert result.state == SaveState.SUCCESS
        assert result.link_status == LinkStatus.PENDING
        assert result.recurring.id == 55

    def test_update_linked_schedule_in_place(self, event_loop, saver, api, recurring_form):
        form = recurring_form.model_copy(update={"invoice_id": 101, "recurring_invoice_id": 55})
        result = event_loop.run_until_complete(saver.save(form))

        api.update_recurring_invoice.assert_awaited_once()
        assert api.update_recurring_invoice.call_args.args[0] == 55
        api.create_recurring_invoice.assert_not_called()
        api.update_sales_invoice.assert_not_called()
        assert result.link_status == LinkStatus.NOT_NEEDED

    def test_schedule_error(self, event_loop, saver, api, recurring_form):
        api.create_recurring_invoice.side_effect = InvoicingApiError("Frequency is invalid", status_code=422)
        result = event_loop.run_until_complete(saver.save(recurring_form))

        assert result.state == SaveState.ERROR
        assert result.message == "Frequency is invalid"


class TestDoubleSubmit:
    def test_second_save_refused_while_in_flight(self, event_loop, api, valid_form, today):
        release = asyncio.Event()

        async def slow_create(payload, idempotency_key=None):
            await release.wait()
            return SalesInvoiceRecord(id=7)

        api.create_sales_invoice.side_effect = slow_create
        saver = InvoiceSaver(api, today=lambda: today)

        async def scenario():
            first = asyncio.ensure_future(saver.save(valid_form))
            await asyncio.sleep(0)
            assert saver.is_saving
            with pytest.raises(SaveInProgressError):
                await saver.save(valid_form)
            release.set()
            return await first

        result = event_loop.run_until_complete(scenario())
        assert result.ok
        assert api.create_sales_invoice.await_count == 1

    def test_cancelled_save_reopens_gate(self, event_loop, api, valid_form, today):
        async def hang(payload, idempotency_key=None):
            await asyncio.Event().wait()

        api.create_sales_invoice.side_effect = hang
        saver = InvoiceSaver(api, today=lambda: today)

        async def scenario():
            task = asyncio.ensure_future(saver.save(valid_form))
            await asyncio.sleep(0)
            assert saver.is_saving
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        event_loop.run_until_complete(scenario())
        assert saver.state == SaveState.IDLE

        api.create_sales_invoice.side_effect = None
        result = event_loop.run_until_complete(saver.save(valid_form))
        assert result.ok
