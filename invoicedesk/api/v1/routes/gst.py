# invoicedesk/api/v1/routes/gst.py
"""
GST reference endpoints: state codes and place-of-supply tax type.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from invoicedesk.api.v1.envelope import ok
from invoicedesk.domain.services.gst_states import (
    GST_RATES,
    STATE_CODES,
    is_valid_state_code,
    normalize_state_code,
    resolve_gst_type,
    state_name,
)

router = APIRouter(prefix="/gst", tags=["GST"])


@router.get("/states", response_model=dict)
async def list_states():
    states = [{"code": code, "name": name} for code, name in STATE_CODES.items()]
    return ok({"states": states, "gst_rates": list(GST_RATES)})


@router.get("/resolve-type", response_model=dict)
async def resolve_type(
    seller: str = Query(..., description="Seller state code, e.g. 27"),
    buyer: str = Query(..., description="Buyer (place of supply) state code"),
):
    """IGST for inter-state supply, CGST + SGST within one state."""
    for label, code in (("seller", seller), ("buyer", buyer)):
        if not is_valid_state_code(code):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown {label} state code: {code}",
            )
    gst_type = resolve_gst_type(seller, buyer)
    return ok({
        "gst_type": gst_type.value if gst_type else None,
        "place_of_supply": normalize_state_code(buyer),
        "place_of_supply_name": state_name(buyer),
    })
