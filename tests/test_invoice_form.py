# tests/test_invoice_form.py
"""Tests for invoice form state transitions and selectors."""

from datetime import date
from decimal import Decimal

from invoicedesk.domain.models.api import Client, SalesInvoiceRecord
from invoicedesk.domain.models.invoice import Currency, CustomField, DiscountType, GstType, TaxType
from invoicedesk.domain.services import invoice_form as f
from invoicedesk.domain.services.recurring_schedule import build_invoice_payload


class TestNewForm:
    def test_defaults(self, today):
        state = f.new_form(today, "INV-042")
        assert state.invoice_number == "INV-042"
        assert state.invoice_date == today
        assert state.recurring.is_recurring is False
        assert state.recurring.start_date == today
        assert len(state.line_items) == 1
        assert state.is_editing is False

    def test_business_profile_seeds_new_invoice(self, today, profile_ts):
        state = f.apply_business_profile(f.new_form(today), profile_ts)
        assert state.seller_state_code == "36"
        assert state.notes == "Thank you for your business"
        assert state.terms == "Payment within 15 days"
        assert state.due_date == date(2025, 1, 30)
        assert state.tax_config.place_of_supply == "36"
        assert state.custom_fields[0].label == "GST Number"
        assert state.custom_fields[0].value == "36AABCU9603R1ZM"

    def test_business_profile_keeps_edited_invoice_fields(self, valid_form, profile_ts):
        editing = valid_form.model_copy(update={"invoice_id": 5, "notes": "Keep me"})
        state = f.apply_business_profile(editing, profile_ts)
        assert state.notes == "Keep me"
        assert state.due_date == valid_form.due_date


class TestGstAutoDetect:
    def test_inter_state_client_gets_igst(self, today, profile_ts, client_mh):
        state = f.apply_business_profile(f.new_form(today), profile_ts)
        state = f.select_client(state, client_mh)
        assert state.tax_config.gst_type == GstType.IGST
        assert state.tax_config.place_of_supply == "27"

    def test_same_state_client_gets_cgst_sgst(self, today, profile_ts):
        local = Client(id=3, name="Local Co", billing_state_code="36")
        state = f.apply_business_profile(f.new_form(today), profile_ts)
        state = f.select_client(state, local)
        assert state.tax_config.gst_type == GstType.CGST_SGST

    def test_profile_after_client_still_detects(self, today, profile_ts):
        local = Client(id=3, name="Local Co", billing_state_code="36")
        state = f.select_client(f.new_form(today), local)
        state = f.apply_business_profile(state, profile_ts)
        assert state.tax_config.gst_type == GstType.CGST_SGST

    def test_manual_override_until_client_changes(self, today, profile_ts, client_mh):
        state = f.apply_business_profile(f.new_form(today), profile_ts)
        state = f.select_client(state, client_mh)
        state = f.configure_tax(state, gst_type=GstType.CGST_SGST)
        assert state.tax_config.gst_type == GstType.CGST_SGST
        state = f.select_client(state, client_mh)
        assert state.tax_config.gst_type == GstType.IGST

    def test_unknown_buyer_state_leaves_config(self, today, profile_ts):
        state = f.apply_business_profile(f.new_form(today), profile_ts)
        state = f.configure_tax(state, gst_type=GstType.CGST_SGST)
        state = f.select_client(state, Client(id=4, name="No state"))
        assert state.tax_config.gst_type == GstType.CGST_SGST

    def test_select_client_clears_error_and_fills_email(self, today, client_mh):
        state = f.new_form(today).model_copy(update={"errors": {"client": "Please select a client"}})
        state = f.select_client(state, client_mh)
        assert "client" not in state.errors
        assert state.recurring.send_to_email == "accounts@xyz.example"


class TestFieldEdits:
    def test_invoice_date_rederives_due_date(self, today):
        state = f.set_dates(f.new_form(today), invoice_date=date(2025, 3, 1))
        assert state.due_date == date(2025, 3, 31)

    def test_explicit_due_date_wins(self, today):
        state = f.set_dates(f.new_form(today), invoice_date=date(2025, 3, 1), due_date=date(2025, 3, 5))
        assert state.due_date == date(2025, 3, 5)

    def test_currency_change_clears_rate(self, today):
        state = f.set_exchange_rate(f.set_currency(f.new_form(today), "USD"), Decimal("83.5"))
        assert state.exchange_rate == Decimal("83.5")
        state = f.set_currency(state, Currency.EUR)
        assert state.currency == Currency.EUR
        assert state.exchange_rate is None

    def test_discount(self, today):
        state = f.set_discount(f.new_form(today), Decimal("10"), "percentage")
        assert state.discount.type == DiscountType.PERCENTAGE

    def test_extra_charges_feed_totals(self, valid_form):
        state = f.set_extra_charges(valid_form, 12.5)
        assert state.extra_charges == Decimal("12.5")
        assert f.select_calculations(state).taxable_amount == Decimal("262.5")

    def test_notes_and_terms(self, valid_form):
        state = f.set_notes(valid_form, notes="Thanks")
        assert state.notes == "Thanks"
        assert state.terms == valid_form.terms
        assert f.set_notes(state, terms="Net 30").terms == "Net 30"

    def test_set_recurring(self, valid_form, recurring_form):
        state = f.set_recurring(valid_form, recurring_form.recurring)
        assert state.recurring.is_recurring is True

    def test_disable_tax(self, valid_form):
        state = f.configure_tax(valid_form, tax_type=TaxType.NONE)
        assert f.select_calculations(state).total_tax == 0


class TestLineItemsAndSelectors:
    def test_calculations_follow_edits(self, valid_form):
        before = f.select_calculations(valid_form)
        state = f.update_line_item(valid_form, 1, rate="150")
        after = f.select_calculations(state)
        assert before.subtotal == Decimal("250")
        assert after.subtotal == Decimal("350")

    def test_remove_then_add(self, valid_form):
        state = f.remove_line_item(valid_form, 0)
        state = f.add_line_item(state)
        assert len(state.line_items) == 2
        assert f.select_average_gst_rate(state) == Decimal("15")


class TestLoadInvoice:
    def test_populates_edit_state(self, today):
        record = SalesInvoiceRecord.model_validate({
            "id": 99,
            "invoice_number": "INV-099",
            "client": {"id": 7, "name": "XYZ"},
            "invoice_date": "2025-01-10",
            "due_date": "2025-02-09",
            "currency": "USD",
            "exchange_rate": "83.5",
            "discount_amount": "5",
            "discount_type": "percentage",
            "tax_type": "gst",
            "place_of_supply": "27",
            "igst_rate": "18",
            "recurring_invoice_id": 4,
            "line_items": [{"id": 1, "description": "Dev", "quantity": "2", "rate": "10", "gst_rate": "5"}],
        })
        state = f.load_invoice(f.new_form(today), record)
        assert state.is_editing
        assert state.recurring_invoice_id == 4
        assert state.currency == Currency.USD
        assert state.discount.type == DiscountType.PERCENTAGE
        assert state.tax_config.gst_type == GstType.IGST
        assert state.line_items[0].id == 1
        assert state.line_items[0].gst_rate == Decimal("5")

    def test_stored_custom_fields_survive_an_update(self, today, profile_ts):
        record = SalesInvoiceRecord.model_validate({
            "id": 99,
            "invoice_number": "INV-099",
            "client": {"id": 7, "name": "XYZ"},
            "invoice_date": "2025-01-10",
            "due_date": "2025-02-09",
            "line_items": [{"id": 1, "description": "Dev", "quantity": "1", "rate": "10"}],
            "custom_fields": [{"label": "LUT Number", "value": "AD123"}],
        })
        state = f.load_invoice(f.new_form(today), record)
        state = f.apply_business_profile(state, profile_ts)

        assert state.custom_fields == (CustomField(label="LUT Number", value="AD123"),)
        payload = build_invoice_payload(state, today)
        assert payload["custom_fields"] == [{"label": "LUT Number", "value": "AD123"}]


class TestCustomFields:
    def test_add_update_remove(self, today):
        state = f.add_custom_field(f.new_form(today), "PO Number", "PO-77")
        state = f.add_custom_field(state)
        state = f.update_custom_field(state, 1, label="Vendor Code", value="V-9")
        assert [c.label for c in state.custom_fields] == ["PO Number", "Vendor Code"]

        state = f.remove_custom_field(state, 0)
        assert state.custom_fields == (CustomField(label="Vendor Code", value="V-9"),)

    def test_edits_do_not_touch_previous_state(self, today, profile_ts):
        before = f.apply_business_profile(f.new_form(today), profile_ts)
        after = f.update_custom_field(before, 0, value="36AAAAA0000A1Z5")
        assert before.custom_fields[0].value == "36AABCU9603R1ZM"
        assert after.custom_fields[0].value == "36AAAAA0000A1Z5"
