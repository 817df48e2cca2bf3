# invoicedesk/domain/services/gst_states.py
"""
GST state codes and intra/inter-state tax type resolution.

Place of supply decides the tax heads: seller and buyer in the same state
pay CGST + SGST, different states pay IGST.
"""

from __future__ import annotations

from invoicedesk.domain.models.invoice import GstType

GST_RATES = (0, 5, 12, 18, 28)

STATE_CODES: dict[str, str] = {
    "01": "Jammu & Kashmir",
    "02": "Himachal Pradesh",
    "03": "Punjab",
    "04": "Chandigarh",
    "05": "Uttarakhand",
    "06": "Haryana",
    "07": "Delhi",
    "08": "Rajasthan",
    "09": "Uttar Pradesh",
    "10": "Bihar",
    "11": "Sikkim",
    "12": "Arunachal Pradesh",
    "13": "Nagaland",
    "14": "Manipur",
    "15": "Mizoram",
    "16": "Tripura",
    "17": "Meghalaya",
    "18": "Assam",
    "19": "West Bengal",
    "20": "Jharkhand",
    "21": "Odisha",
    "22": "Chhattisgarh",
    "23": "Madhya Pradesh",
    "24": "Gujarat",
    "26": "Dadra and Nagar Haveli and Daman and Diu",
    "27": "Maharashtra",
    "28": "Andhra Pradesh (Old)",
    "29": "Karnataka",
    "30": "Goa",
    "31": "Lakshadweep",
    "32": "Kerala",
    "33": "Tamil Nadu",
    "34": "Puducherry",
    "35": "Andaman and Nicobar",
    "36": "Telangana",
    "37": "Andhra Pradesh",
}


def normalize_state_code(code: str | int | None) -> str:
    """``7`` / ``"7"`` / ``" 07 "`` -> ``"07"``; blank -> ``""``."""
    if code is None:
        return ""
    text = str(code).strip()
    if not text:
        return ""
    return text.rjust(2, "0")


def state_name(code: str | int | None) -> str | None:
    return STATE_CODES.get(normalize_state_code(code))


def is_valid_state_code(code: str | int | None) -> bool:
    return normalize_state_code(code) in STATE_CODES


def resolve_gst_type(seller_state: str | int | None, buyer_state: str | int | None) -> GstType | None:
    """Return the GST type for a seller/buyer pair, or None if either is unknown."""
    seller = normalize_state_code(seller_state)
    buyer = normalize_state_code(buyer_state)
    if not seller or not buyer:
        return None
    return GstType.CGST_SGST if seller == buyer else GstType.IGST
