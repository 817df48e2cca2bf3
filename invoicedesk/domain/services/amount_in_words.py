# invoicedesk/domain/services/amount_in_words.py
"""
Amount-in-words for invoice footers, using the Indian numbering system
(Crore = 10^7, Lakh = 10^5).

    >>> amount_in_words(Decimal("1250.50"))
    'One Thousand Two Hundred Fifty Rupees and Fifty Paise Only'
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CURRENCY_NAMES: dict[str, tuple[str, str]] = {
    "INR": ("Rupees", "Paise"),
    "USD": ("Dollars", "Cents"),
    "EUR": ("Euros", "Cents"),
    "GBP": ("Pounds", "Pence"),
}

_CENT = Decimal("0.01")


def _two_digits(n: int) -> str:
    if n < 20:
        return _ONES[n]
    ten, one = divmod(n, 10)
    return _TENS[ten] + (" " + _ONES[one] if one else "")


def _three_digits(n: int) -> str:
    hundred, rest = divmod(n, 100)
    if hundred == 0:
        return _two_digits(rest)
    words = _ONES[hundred] + " Hundred"
    return words if rest == 0 else f"{words} {_two_digits(rest)}"


def _whole_to_words(n: int) -> str:
    parts: list[str] = []
    # Above 99 crore the crore count itself is spelled in the same system
    crores, n = divmod(n, 10_000_000)
    if crores:
        parts.append(f"{_whole_to_words(crores) if crores > 99 else _two_digits(crores)} Crore")
    lakhs, n = divmod(n, 100_000)
    if lakhs:
        parts.append(f"{_two_digits(lakhs)} Lakh")
    thousands, n = divmod(n, 1000)
    if thousands:
        parts.append(f"{_two_digits(thousands)} Thousand")
    if n:
        parts.append(_three_digits(n))
    return " ".join(parts)


def amount_in_words(amount: Decimal | int | float, currency: str = "INR") -> str:
    amount = Decimal(str(amount))
    if amount == 0:
        return "Zero"
    if amount < 0:
        return "Minus " + amount_in_words(-amount, currency)

    rounded = amount.quantize(_CENT, rounding=ROUND_HALF_UP)
    whole = int(rounded)
    fraction = int((rounded - whole) * 100)

    main, sub = CURRENCY_NAMES.get(currency, CURRENCY_NAMES["INR"])

    words = _whole_to_words(whole)
    if words:
        words += f" {main}"
    if fraction:
        if words:
            words += " and "
        words += f"{_two_digits(fraction)} {sub}"
    return words + " Only"


def format_indian_number(amount: Decimal | int | float) -> str:
    """Group digits the Indian way with two decimals: ``1234567.8`` -> ``12,34,567.80``."""
    value = Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):f}".partition(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return f"{sign}{whole}.{fraction}"
