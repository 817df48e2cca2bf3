# invoicedesk/domain/services/line_items.py
"""
Line-item list editing.

Lists are never mutated in place: every edit returns a new tuple.
Rows the server already knows (they carry an ``id``) are soft-deleted
with ``_destroy`` so the update payload can tell the server to drop them;
unsaved rows are simply removed.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Sequence

from invoicedesk.domain.models.invoice import LineItem

DEFAULT_UNIT = "units"

# Simple formatting tags survive; everything else (incl. <script>) is dropped
_ALLOWED_TAGS = {"b", "i", "u", "strong", "em"}
_SCRIPT_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"</?\s*([a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")


def new_line_item() -> LineItem:
    """Blank row added by the form's "add item" button."""
    return LineItem()


def add_line_item(items: Sequence[LineItem], item: LineItem | None = None) -> tuple[LineItem, ...]:
    return (*items, item or new_line_item())


def remove_line_item(items: Sequence[LineItem], index: int) -> tuple[LineItem, ...]:
    """Soft-delete saved rows, drop unsaved ones."""
    if index < 0 or index >= len(items):
        raise IndexError(f"line item index {index} out of range")

    target = items[index]
    if target.id is not None:
        return tuple(
            it.model_copy(update={"destroy": True}) if i == index else it
            for i, it in enumerate(items)
        )
    return tuple(it for i, it in enumerate(items) if i != index)


def update_line_item(items: Sequence[LineItem], index: int, **changes: Any) -> tuple[LineItem, ...]:
    """Return a copy of ``items`` with the row at ``index`` updated."""
    if index < 0 or index >= len(items):
        raise IndexError(f"line item index {index} out of range")

    unknown = set(changes) - set(LineItem.model_fields)
    if unknown:
        raise ValueError(f"unknown line item field(s): {', '.join(sorted(unknown))}")

    # Re-validate so "2" / 2.5 coerce to Decimal like the rest of the row
    updated = LineItem.model_validate({**items[index].model_dump(), **changes})
    return tuple(updated if i == index else it for i, it in enumerate(items))


def live_line_items(items: Iterable[LineItem]) -> list[LineItem]:
    return [item for item in items if not item.destroy]


def sanitize_text(text: str | None) -> str | None:
    """Strip HTML except simple formatting tags; trims whitespace."""
    if text is None:
        return None
    if not text.strip():
        return text
    cleaned = _SCRIPT_RE.sub("", text)
    cleaned = _TAG_RE.sub(
        lambda m: m.group(0) if m.group(1).lower() in _ALLOWED_TAGS else "",
        cleaned,
    )
    return cleaned.strip()


def line_items_payload(items: Iterable[LineItem]) -> list[dict]:
    """Serialize rows for the sales-invoice create/update call.

    Every row is sent, destroyed ones included, so the server can upsert
    by ``id`` and drop the ``_destroy`` ones.
    """
    payload = []
    for item in items:
        row: dict[str, Any] = {
            "description": sanitize_text(item.description),
            "hsn_sac_code": sanitize_text(item.hsn_sac_code) or None,
            "quantity": item.quantity,
            "unit": sanitize_text(item.unit) or DEFAULT_UNIT,
            "rate": item.rate,
            "gst_rate": item.gst_rate,
        }
        if item.id is not None:
            row["id"] = item.id
        if item.destroy:
            row["_destroy"] = True
        payload.append(row)
    return payload


def template_line_items(items: Iterable[LineItem]) -> list[dict]:
    """Rows for a recurring template: live rows only, no GST fields."""
    return [
        {
            "description": sanitize_text(item.description),
            "hsn_sac_code": sanitize_text(item.hsn_sac_code) or None,
            "quantity": item.quantity,
            "unit": sanitize_text(item.unit) or DEFAULT_UNIT,
            "rate": item.rate,
        }
        for item in live_line_items(items)
    ]
