# invoicedesk/infrastructure/external/invoicing_api.py
"""
Client for the invoicing REST backend (``/api/v1``).

Covers the lookups that feed form defaults (clients, business profile,
next invoice number, exchange rate), sales-invoice and recurring-invoice
writes, invoice sending, the phone-OTP auth endpoints and onboarding.

Every response is validated into the matching model from
``invoicedesk.domain.models.api``. Create calls accept an
``idempotency_key`` sent as the ``Idempotency-Key`` header.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from invoicedesk.core.config import settings
from invoicedesk.domain.models.api import (
    BusinessProfile,
    Client,
    ExchangeRateQuote,
    NextInvoiceNumber,
    OtpResponse,
    RecurringInvoiceRecord,
    SalesInvoiceRecord,
)

logger = logging.getLogger("invoicing_api")


class InvoicingApiError(Exception):
    """Raised when the invoicing backend fails or returns an unusable body."""

    def __init__(self, message: str, status_code: int = 0, response: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response or {}


class InvoicingApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base = (base_url or settings.INVOICING_API_BASE_URL).rstrip("/")
        self.token = token if token is not None else settings.INVOICING_API_TOKEN
        self.timeout = timeout or settings.INVOICING_API_TIMEOUT_SECONDS
        self._transport = transport

    def _headers(self, idempotency_key: str | None = None) -> dict[str, str]:
        h = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        if idempotency_key:
            h["Idempotency-Key"] = idempotency_key
        return h

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict | None = None,
        idempotency_key: str | None = None,
    ) -> Any:
        url = f"{self.base}/v1{path}"
        logger.info("Invoicing API %s %s", method, path)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                r = await client.request(
                    method,
                    url,
                    headers=self._headers(idempotency_key),
                    params=params,
                    json=to_jsonable_python(json_body) if json_body is not None else None,
                )
                r.raise_for_status()
            except httpx.HTTPStatusError as exc:
                body: dict = {}
                try:
                    body = exc.response.json()
                except ValueError:
                    pass
                logger.error(
                    "Invoicing API HTTP error: %s %s -> %d %s",
                    method, path, exc.response.status_code, body,
                )
                message = body.get("error") if isinstance(body, dict) else None
                raise InvoicingApiError(
                    message or f"Invoicing API error: {exc.response.status_code}",
                    status_code=exc.response.status_code,
                    response=body if isinstance(body, dict) else {"body": body},
                ) from exc
            except httpx.TimeoutException as exc:
                logger.error("Invoicing API timeout: %s %s", method, path)
                raise InvoicingApiError("Invoicing API timeout") from exc
            except httpx.HTTPError as exc:
                logger.error("Invoicing API transport error: %s %s: %s", method, path, exc)
                raise InvoicingApiError(f"Invoicing API unreachable: {exc}") from exc

        if not r.content.strip():
            return {}
        try:
            return r.json()
        except ValueError as exc:
            raise InvoicingApiError(
                "Invoicing API returned non-JSON body", status_code=r.status_code,
            ) from exc

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Unexpected %s payload: %s", model.__name__, exc)
            raise InvoicingApiError(f"Malformed {model.__name__} response") from exc

    # ----------------------------------------------------------------
    # Lookups feeding form defaults
    # ----------------------------------------------------------------

    async def list_clients(self) -> list[Client]:
        data = await self._request("GET", "/clients")
        items = data.get("clients", data.get("data", [])) if isinstance(data, dict) else data
        return [self._parse(Client, item) for item in items]

    async def get_business_profile(self) -> BusinessProfile:
        return self._parse(BusinessProfile, await self._request("GET", "/business_profile"))

    async def get_next_invoice_number(self) -> NextInvoiceNumber:
        return self._parse(NextInvoiceNumber, await self._request("GET", "/sales_invoices/next_number"))

    async def get_exchange_rate(self, from_currency: str, to_currency: str) -> ExchangeRateQuote:
        data = await self._request(
            "GET", "/exchange_rates/rate", params={"from": from_currency, "to": to_currency},
        )
        return self._parse(ExchangeRateQuote, data)

    # ----------------------------------------------------------------
    # Sales invoices
    # ----------------------------------------------------------------

    async def get_sales_invoice(self, invoice_id: int) -> SalesInvoiceRecord:
        return self._parse(SalesInvoiceRecord, await self._request("GET", f"/sales_invoices/{invoice_id}"))

    async def create_sales_invoice(
        self, payload: dict, idempotency_key: str | None = None,
    ) -> SalesInvoiceRecord:
        data = await self._request(
            "POST", "/sales_invoices", json_body=payload, idempotency_key=idempotency_key,
        )
        return self._parse(SalesInvoiceRecord, data)

    async def update_sales_invoice(self, invoice_id: int, payload: dict) -> SalesInvoiceRecord:
        data = await self._request("PATCH", f"/sales_invoices/{invoice_id}", json_body=payload)
        return self._parse(SalesInvoiceRecord, data)

    async def send_sales_invoice(
        self, invoice_id: int, email_options: dict | None = None,
    ) -> SalesInvoiceRecord:
        data = await self._request(
            "POST", f"/sales_invoices/{invoice_id}/send", json_body=email_options or {},
        )
        return self._parse(SalesInvoiceRecord, data)

    # ----------------------------------------------------------------
    # Recurring invoices
    # ----------------------------------------------------------------

    async def get_recurring_invoice(self, recurring_id: int) -> RecurringInvoiceRecord:
        data = await self._request("GET", f"/recurring_invoices/{recurring_id}")
        return self._parse(RecurringInvoiceRecord, data)

    async def create_recurring_invoice(
        self, payload: dict, idempotency_key: str | None = None,
    ) -> RecurringInvoiceRecord:
        data = await self._request(
            "POST", "/recurring_invoices", json_body=payload, idempotency_key=idempotency_key,
        )
        return self._parse(RecurringInvoiceRecord, data)

    async def update_recurring_invoice(self, recurring_id: int, payload: dict) -> RecurringInvoiceRecord:
        data = await self._request("PATCH", f"/recurring_invoices/{recurring_id}", json_body=payload)
        return self._parse(RecurringInvoiceRecord, data)

    # ----------------------------------------------------------------
    # Phone OTP auth + onboarding
    # ----------------------------------------------------------------

    async def send_otp(self, phone_number: str) -> OtpResponse:
        data = await self._request("POST", "/auth/send_otp", json_body={"phone_number": phone_number})
        return self._parse(OtpResponse, data)

    async def verify_otp(self, phone_number: str, otp: str) -> OtpResponse:
        data = await self._request(
            "POST", "/auth/verify_otp", json_body={"phone_number": phone_number, "otp": otp},
        )
        return self._parse(OtpResponse, data)

    async def resend_otp(self, phone_number: str, via: str = "sms") -> OtpResponse:
        data = await self._request(
            "POST", "/auth/resend_otp", json_body={"phone_number": phone_number, "via": via},
        )
        return self._parse(OtpResponse, data)

    async def complete_onboarding(self, name: str, workspace_name: str, workspace_type: str = "business") -> dict:
        return await self._request(
            "POST",
            "/onboarding/complete",
            json_body={"name": name, "workspace_name": workspace_name, "workspace_type": workspace_type},
        )
