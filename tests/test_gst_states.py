# tests/test_gst_states.py
"""Tests for GST state codes and tax type resolution."""

import pytest

from invoicedesk.domain.models.invoice import GstType
from invoicedesk.domain.services.gst_states import (
    STATE_CODES,
    is_valid_state_code,
    normalize_state_code,
    resolve_gst_type,
    state_name,
)


class TestStateCodes:
    @pytest.mark.parametrize("raw,expected", [(7, "07"), ("7", "07"), (" 27 ", "27"), (None, ""), ("", "")])
    def test_normalize(self, raw, expected):
        assert normalize_state_code(raw) == expected

    def test_lookup(self):
        assert state_name("36") == "Telangana"
        assert state_name(99) is None
        assert is_valid_state_code("29")
        assert not is_valid_state_code("25")

    def test_table_has_no_gaps_except_merged_territory(self):
        assert len(STATE_CODES) == 36
        assert "25" not in STATE_CODES


class TestResolveGstType:
    def test_same_state(self):
        assert resolve_gst_type("27", 27) == GstType.CGST_SGST

    def test_different_states(self):
        assert resolve_gst_type("36", "27") == GstType.IGST

    def test_leading_zero_equivalence(self):
        assert resolve_gst_type("7", "07") == GstType.CGST_SGST

    @pytest.mark.parametrize("seller,buyer", [(None, "27"), ("27", ""), (None, None)])
    def test_unknown_side(self, seller, buyer):
        assert resolve_gst_type(seller, buyer) is None
