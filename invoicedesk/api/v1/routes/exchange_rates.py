# invoicedesk/api/v1/routes/exchange_rates.py
"""
Exchange rate lookups for foreign-currency invoices.
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from invoicedesk.api.v1.envelope import ok
from invoicedesk.domain.services.exchange_rates import ExchangeRateService, UnsupportedCurrencyError

router = APIRouter(prefix="/exchange-rates", tags=["Exchange rates"])


def get_exchange_rate_service() -> ExchangeRateService:
    return ExchangeRateService()


@router.get("/rate", response_model=dict)
async def get_rate(
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to_currency: str = Query(default="INR", alias="to", min_length=3, max_length=3),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
):
    try:
        rate = await service.rate(from_currency, to_currency)
    except UnsupportedCurrencyError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return ok({"from": from_currency.upper(), "to": to_currency.upper(), "rate": rate})


@router.get("/convert", response_model=dict)
async def convert(
    amount: Decimal = Query(..., ge=0),
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to_currency: str = Query(default="INR", alias="to", min_length=3, max_length=3),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
):
    try:
        conversion = await service.convert(amount, from_currency, to_currency)
    except UnsupportedCurrencyError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return ok({
        "from": from_currency.upper(),
        "to": to_currency.upper(),
        "amount": conversion.amount,
        "rate": conversion.rate,
        "rate_date": conversion.rate_date,
    })
