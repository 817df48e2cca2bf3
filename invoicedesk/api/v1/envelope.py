# invoicedesk/api/v1/envelope.py
"""
Standardized API response envelope used by all v1 endpoints.

Every response wraps data in:
    {
        "status": "ok" | "error",
        "data": <payload>,
        "message": <optional string>,
        "errors": <optional list of detail dicts>
    }

Money values are serialized as strings so they survive the trip exactly.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard envelope for all v1 API responses."""

    status: str = "ok"
    data: T | None = None
    message: str | None = None
    errors: list[dict[str, Any]] | None = None


# ---------------------------------------------------------------------------
# Helpers for building responses
# ---------------------------------------------------------------------------

def ok(data: Any = None, message: str | None = None) -> dict:
    """Build a success response dict."""
    return ApiResponse(status="ok", data=data, message=message).model_dump(mode="json")


def error(message: str, errors: list[dict[str, Any]] | None = None, status: str = "error") -> dict:
    """Build an error response dict."""
    return ApiResponse(status=status, message=message, errors=errors).model_dump(mode="json")


def field_errors(errors: dict[str, str]) -> list[dict[str, str]]:
    """``{"client": "..."}`` -> ``[{"field": "client", "message": "..."}]``."""
    return [{"field": field, "message": message} for field, message in errors.items()]


def validation_failed(errors: dict[str, str], message: str = "Validation failed") -> JSONResponse:
    """422 response carrying the field-keyed form errors."""
    return JSONResponse(
        status_code=422,
        content=error(message, errors=field_errors(errors)),
    )
