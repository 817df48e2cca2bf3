# invoicedesk/api/v1/__init__.py
"""
Versioned API v1: aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from invoicedesk.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from invoicedesk.api.v1.routes.exchange_rates import router as exchange_rates_router
from invoicedesk.api.v1.routes.gst import router as gst_router
from invoicedesk.api.v1.routes.invoices import router as invoices_router
from invoicedesk.api.v1.routes.recurring import router as recurring_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(invoices_router)
v1_router.include_router(gst_router)
v1_router.include_router(recurring_router)
v1_router.include_router(exchange_rates_router)

__all__ = ["v1_router"]
