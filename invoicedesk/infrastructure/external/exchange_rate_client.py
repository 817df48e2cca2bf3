# invoicedesk/infrastructure/external/exchange_rate_client.py
"""
Public exchange-rate providers.

Both providers are queried with INR as the base currency and the result is
inverted, so the returned mapping reads "1 unit of X = N rupees".

* exchangerate-api.com (no key)
* freecurrencyapi.com (needs ``FREE_CURRENCY_API_KEY``)
"""

from __future__ import annotations

import logging
from decimal import Decimal

import httpx

from invoicedesk.core.config import settings

logger = logging.getLogger("exchange_rate_client")

_TIMEOUT = 5
_QUOTED = ("USD", "EUR", "GBP")


def _invert(rates: dict) -> dict[str, Decimal]:
    inverted = {"INR": Decimal("1")}
    for code in _QUOTED:
        per_inr = Decimal(str(rates[code]))
        inverted[code] = (Decimal("1") / per_inr).quantize(Decimal("0.0001"))
    return inverted


async def fetch_from_exchange_rate_api() -> dict[str, Decimal] | None:
    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
            r = await client.get(settings.EXCHANGE_RATE_API_URL)
            r.raise_for_status()
            return _invert(r.json()["rates"])
    except (httpx.HTTPError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
        logger.warning("Exchange rate API failed: %s", exc)
        return None


async def fetch_from_free_currency_api() -> dict[str, Decimal] | None:
    if not settings.FREE_CURRENCY_API_KEY:
        return None
    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
            r = await client.get(
                settings.FREE_CURRENCY_API_URL,
                params={"apikey": settings.FREE_CURRENCY_API_KEY, "base_currency": "INR"},
            )
            r.raise_for_status()
            return _invert(r.json()["data"])
    except (httpx.HTTPError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
        logger.warning("Free currency API failed: %s", exc)
        return None


async def fetch_rates() -> dict[str, Decimal] | None:
    """Try each provider in order of preference."""
    return await fetch_from_exchange_rate_api() or await fetch_from_free_currency_api()
