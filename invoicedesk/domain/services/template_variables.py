# invoicedesk/domain/services/template_variables.py
"""
Placeholder substitution for invoice email subject/body templates.

Supported variables: ``{invoice_number}``, ``{business_name}``,
``{client_name}``, ``{due_date}``, ``{amount}``. Anything else in braces
is left untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

DEFAULT_EMAIL_SUBJECT = "Invoice #{invoice_number} from {business_name}"
DEFAULT_EMAIL_BODY = """Dear {client_name},

Please find attached the invoice #{invoice_number} for {amount}.

Payment is due by {due_date}.

If you have any questions regarding this invoice, please don't hesitate to reach out.

Best regards,
{business_name}"""

VARIABLE_PATTERN = re.compile(r"\{(invoice_number|business_name|client_name|due_date|amount)\}")


@dataclass
class TemplateContext:
    invoice_number: str = ""
    business_name: str = ""
    client_name: str = ""
    due_date: date | None = None
    amount: Decimal | None = None
    currency: str = "INR"


def format_amount(amount: Decimal | None, currency: str) -> str:
    """``Decimal("125000.5")`` -> ``"INR 125,000.5"``."""
    if amount is None:
        return ""
    whole, _, fraction = f"{amount:f}".partition(".")
    sign = ""
    if whole.startswith("-"):
        sign, whole = "-", whole[1:]
    grouped = f"{int(whole):,}"
    return f"{currency} {sign}{grouped}{'.' + fraction if fraction else ''}"


def _value(name: str, ctx: TemplateContext) -> str:
    if name == "invoice_number":
        return ctx.invoice_number or ""
    if name == "business_name":
        return ctx.business_name or ""
    if name == "client_name":
        return ctx.client_name or ""
    if name == "due_date":
        return ctx.due_date.strftime("%d %b %Y") if ctx.due_date else ""
    if name == "amount":
        return format_amount(ctx.amount, ctx.currency)
    return "{" + name + "}"


def substitute(template: str | None, ctx: TemplateContext) -> str:
    if not template or not template.strip():
        return ""
    return VARIABLE_PATTERN.sub(lambda m: _value(m.group(1), ctx), template)
