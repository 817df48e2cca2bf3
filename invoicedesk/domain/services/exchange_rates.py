# invoicedesk/domain/services/exchange_rates.py
"""
Exchange rates to INR, resolved in three layers.

Resolution order:
1. Redis (hot cache, 24h TTL by default)
2. Public rate providers (exchangerate-api, then freecurrencyapi)
3. Hardcoded fallback rates (never fails)

Rates are stored as "1 unit of X in INR"; cross rates go through INR.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from invoicedesk.core.config import settings
from invoicedesk.domain.models.invoice import Currency

logger = logging.getLogger("exchange_rates")

CACHE_KEY = "exchange_rates:current"

FALLBACK_RATES: dict[str, Decimal] = {
    "USD": Decimal("83.50"),
    "EUR": Decimal("91.20"),
    "GBP": Decimal("106.00"),
    "INR": Decimal("1.0"),
}

_RATE_PLACES = Decimal("0.000001")
_AMOUNT_PLACES = Decimal("0.01")


class UnsupportedCurrencyError(ValueError):
    """Raised for currency codes outside INR/USD/EUR/GBP."""


@dataclass
class RatesSnapshot:
    rates: dict[str, Decimal]
    updated_at: datetime | None
    source: str  # "cache", "provider", "fallback"


@dataclass
class Conversion:
    amount: Decimal
    rate: Decimal
    rate_date: date


def _code(currency: Currency | str) -> str:
    code = currency.value if isinstance(currency, Currency) else str(currency).upper()
    if code not in FALLBACK_RATES:
        raise UnsupportedCurrencyError(f"Unsupported currency: {currency}")
    return code


class ExchangeRateService:
    """Redis -> provider APIs -> hardcoded."""

    def __init__(
        self,
        redis_client: aioredis.Redis | None = None,
        fetcher: Callable[[], Awaitable[dict[str, Decimal] | None]] | None = None,
    ) -> None:
        self._redis = redis_client
        self._fetcher = fetcher

    async def _get_redis(self) -> aioredis.Redis:
        if self._redis is None:
            from invoicedesk.infrastructure.cache.redis_client import get_redis_client

            self._redis = get_redis_client()
        return self._redis

    async def _fetch(self) -> dict[str, Decimal] | None:
        if self._fetcher is not None:
            return await self._fetcher()
        from invoicedesk.infrastructure.external.exchange_rate_client import fetch_rates

        return await fetch_rates()

    # ---- Layer 1: Redis (hot cache) ----

    async def _get_cached(self) -> RatesSnapshot | None:
        try:
            r = await self._get_redis()
            raw = await r.get(CACHE_KEY)
        except (RedisError, OSError):
            logger.warning("Exchange rate cache unavailable", exc_info=True)
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
            rates = {k: Decimal(v) for k, v in data["rates"].items()}
            updated_at = datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else None
        except (ValueError, KeyError, ArithmeticError):
            logger.warning("Discarding malformed exchange rate cache entry")
            return None
        return RatesSnapshot(rates=rates, updated_at=updated_at, source="cache")

    async def _set_cached(self, snapshot: RatesSnapshot) -> None:
        payload = {
            "rates": {k: str(v) for k, v in snapshot.rates.items()},
            "updated_at": snapshot.updated_at.isoformat() if snapshot.updated_at else None,
        }
        try:
            r = await self._get_redis()
            await r.set(CACHE_KEY, json.dumps(payload), ex=settings.EXCHANGE_RATE_CACHE_TTL_SECONDS)
        except (RedisError, OSError):
            logger.warning("Failed to cache exchange rates", exc_info=True)

    # ---- Layer 2: providers ----

    async def _fetch_and_cache(self) -> RatesSnapshot | None:
        rates = await self._fetch()
        if not rates:
            return None
        snapshot = RatesSnapshot(rates=rates, updated_at=datetime.now(timezone.utc), source="provider")
        await self._set_cached(snapshot)
        logger.info("Exchange rates refreshed: %s", {k: str(v) for k, v in rates.items()})
        return snapshot

    # ---- Public API ----

    async def current_rates(self) -> RatesSnapshot:
        cached = await self._get_cached()
        if cached:
            return cached
        fetched = await self._fetch_and_cache()
        if fetched:
            return fetched
        logger.warning("Using fallback exchange rates")
        return RatesSnapshot(rates=dict(FALLBACK_RATES), updated_at=None, source="fallback")

    async def refresh(self) -> RatesSnapshot | None:
        try:
            r = await self._get_redis()
            await r.delete(CACHE_KEY)
        except (RedisError, OSError):
            logger.warning("Could not clear exchange rate cache", exc_info=True)
        return await self._fetch_and_cache()

    @staticmethod
    def _pair_rate(rates: dict[str, Decimal], from_code: str, to_code: str) -> Decimal:
        if from_code == to_code:
            return Decimal("1")
        # Providers may omit a currency; the fallback table fills the gap
        from_inr = rates.get(from_code) or FALLBACK_RATES[from_code]
        to_inr = rates.get(to_code) or FALLBACK_RATES[to_code]
        return from_inr / to_inr

    async def rate(self, from_currency: Currency | str, to_currency: Currency | str) -> Decimal:
        from_code, to_code = _code(from_currency), _code(to_currency)
        if from_code == to_code:
            return Decimal("1")
        snapshot = await self.current_rates()
        return self._pair_rate(snapshot.rates, from_code, to_code).quantize(_RATE_PLACES, rounding=ROUND_HALF_UP)

    async def convert(
        self,
        amount: Decimal,
        from_currency: Currency | str,
        to_currency: Currency | str,
    ) -> Conversion:
        from_code, to_code = _code(from_currency), _code(to_currency)
        if from_code == to_code:
            return Conversion(amount=amount, rate=Decimal("1"), rate_date=date.today())

        snapshot = await self.current_rates()
        rate = self._pair_rate(snapshot.rates, from_code, to_code)
        rate_date = snapshot.updated_at.date() if snapshot.updated_at else date.today()
        return Conversion(
            amount=(amount * rate).quantize(_AMOUNT_PLACES, rounding=ROUND_HALF_UP),
            rate=rate.quantize(_RATE_PLACES, rounding=ROUND_HALF_UP),
            rate_date=rate_date,
        )
