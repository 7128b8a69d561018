# renttracker/utils.py
"""
Small helpers shared by the handlers and the repository.

Provides:
- normalize_phone(phone)  -> local 10 digit form like '0712345678'
- today_str(tz_name)      -> 'YYYY-MM-DD' for today in the given time zone
"""

import re
from datetime import datetime
from typing import Optional

import pytz


# ---------------------------------------------------------------------
# Phone normalization
# ---------------------------------------------------------------------
def normalize_phone(phone: Optional[str]) -> str:
    """
    Normalize Kenyan phone numbers to the local format used by M-PESA
    receipts: 07XXXXXXXX / 01XXXXXXXX.
    Inputs that are not recognisable Kenyan numbers come back as bare digits
    so that they can still be stored and matched exactly.
    """
    if not phone:
        return ""

    # Remove everything except digits
    s = re.sub(r"\D", "", str(phone).strip())

    # 254712345678 -> 0712345678
    if s.startswith("254") and len(s) == 12:
        return "0" + s[3:]

    # 712345678 -> 0712345678
    if len(s) == 9 and s[0] in "17":
        return "0" + s

    return s


# ---------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------
def today_str(tz_name: str = "Africa/Nairobi") -> str:
    """Today's date in ``tz_name`` as a fixed width ISO string."""
    tz = pytz.timezone(tz_name)
    return datetime.now(tz).date().isoformat()
