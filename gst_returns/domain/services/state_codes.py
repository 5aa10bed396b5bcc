# gst_returns/domain/services/state_codes.py
"""
GST jurisdiction (state/UT) codes.

The first two digits of every GSTIN and every place-of-supply field in a
return use these codes.
"""

from __future__ import annotations

from types import MappingProxyType

STATE_CODE_MAP = MappingProxyType({
    "Jammu and Kashmir": "01",
    "Himachal Pradesh": "02",
    "Punjab": "03",
    "Chandigarh": "04",
    "Uttarakhand": "05",
    "Haryana": "06",
    "Delhi": "07",
    "Rajasthan": "08",
    "Uttar Pradesh": "09",
    "Bihar": "10",
    "Sikkim": "11",
    "Arunachal Pradesh": "12",
    "Nagaland": "13",
    "Manipur": "14",
    "Mizoram": "15",
    "Tripura": "16",
    "Meghalaya": "17",
    "Assam": "18",
    "West Bengal": "19",
    "Jharkhand": "20",
    "Odisha": "21",
    "Chhattisgarh": "22",
    "Madhya Pradesh": "23",
    "Gujarat": "24",
    "Dadra and Nagar Haveli and Daman and Diu": "26",
    "Maharashtra": "27",
    "Karnataka": "29",
    "Goa": "30",
    "Lakshadweep": "31",
    "Kerala": "32",
    "Tamil Nadu": "33",
    "Puducherry": "34",
    "Andaman and Nicobar Islands": "35",
    "Telangana": "36",
    "Andhra Pradesh": "37",
    "Ladakh": "38",
    "Other Territory": "97",
    "Centre Jurisdiction": "99",
})


def state_code(state_name: str | None) -> str:
    """Return the 2-digit code for a state name.

    Unknown names are passed through unchanged; the GST portal rejects them on
    upload, which is where the user gets to see the problem.
    """
    name = state_name or ""
    return STATE_CODE_MAP.get(name, name)


def is_known_state(state_name: str | None) -> bool:
    return (state_name or "") in STATE_CODE_MAP
