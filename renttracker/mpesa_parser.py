# mpesa_parser.py
"""Pull the payment details out of an M-PESA "received" SMS.

The parser is a pure function of its input: no Flask, no database. A typical
message looks like::

    QGH7XYZ12A Confirmed. You have received Ksh1,500.00 from JOHN DOE
    0712345678 on 05/06/24 at 10:15 AM

The amount must follow "Ksh" directly and the date must be zero padded
DD/MM/YY; "Ksh 1,500" or "on 5/6/24" do not match.

``match_message`` returns a :class:`ParsedPayment` or ``None``;
``parse_message`` raises :class:`UnparseableMessage` instead of returning
``None``.
"""

import re
from dataclasses import dataclass
from typing import Optional

from renttracker.errors import UnparseableMessage

RECEIVED_PATTERN = re.compile(
    r"received\s+Ksh(?P<amount>\d[\d,]*(?:\.\d+)?)"
    r"\s+from\s+(?P<name>.+?)"
    r"\s+(?P<phone>\d{10})\b"
    r"\s+on\s+(?P<date>\d{2}/\d{2}/\d{2})\b",
    re.IGNORECASE | re.DOTALL,
)

# Receipt code at the very start, e.g. "QGH7XYZ12A Confirmed."
RECEIPT_CODE_PATTERN = re.compile(r"^\s*(?P<code>[A-Z0-9]{10})\s+confirmed\b", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedPayment:
    amount: float
    name: str
    phone: str
    date_token: str
    mpesa_code: Optional[str] = None


def match_message(text: Optional[str]) -> Optional[ParsedPayment]:
    """Return the parsed payment, or None when ``text`` is not a receipt."""
    if not text:
        return None

    m = RECEIVED_PATTERN.search(text)
    if not m:
        return None

    name = " ".join(m.group("name").split())
    if not name:
        return None

    code_match = RECEIPT_CODE_PATTERN.search(text)
    return ParsedPayment(
        amount=float(m.group("amount").replace(",", "")),
        name=name,
        phone=m.group("phone"),
        date_token=m.group("date"),
        mpesa_code=code_match.group("code").upper() if code_match else None,
    )


def parse_message(text: Optional[str]) -> ParsedPayment:
    parsed = match_message(text)
    if parsed is None:
        raise UnparseableMessage()
    return parsed
