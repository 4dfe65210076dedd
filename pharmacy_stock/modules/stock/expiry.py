"""
Month-year expiry handling.

The canonical stored form is MM-YYYY. Older bills carry MM-YY; those parse
as 20YY and are rewritten to MM-YYYY wherever a lot key or a new bill is built.
"""

from __future__ import annotations

import calendar
import re
from datetime import date
from typing import Optional

_LONG = re.compile(r"^(\d{2})-(\d{4})$")
_SHORT = re.compile(r"^(\d{2})-(\d{2})$")


def parse_expiry(text) -> Optional[date]:
    """First day of the expiry month, or None if `text` is not MM-YYYY / MM-YY."""
    if not isinstance(text, str):
        return None
    s = text.strip()
    m = _LONG.match(s)
    if m:
        month, year = int(m.group(1)), int(m.group(2))
    else:
        m = _SHORT.match(s)
        if not m:
            return None
        month, year = int(m.group(1)), 2000 + int(m.group(2))
    if not 1 <= month <= 12 or year < 1:
        return None
    return date(year, month, 1)


def canonical_expiry(text) -> str:
    """MM-YYYY for anything parseable, otherwise the trimmed input."""
    d = parse_expiry(text)
    if d is None:
        return text.strip() if isinstance(text, str) else ""
    return f"{d.month:02d}-{d.year:04d}"


def is_valid_expiry(text, *, allow_short: bool = True) -> bool:
    if not isinstance(text, str):
        return False
    if not allow_short and not _LONG.match(text.strip()):
        return False
    return parse_expiry(text) is not None


def add_months(d: date, months: int) -> date:
    idx = d.year * 12 + (d.month - 1) + months
    return date(idx // 12, idx % 12 + 1, 1)


def end_of_month(d: date) -> date:
    return date(d.year, d.month, calendar.monthrange(d.year, d.month)[1])


def is_expired(text, today: Optional[date] = None) -> bool:
    """True once the whole expiry month has passed."""
    d = parse_expiry(text)
    if d is None:
        return False
    today = today or date.today()
    return add_months(d, 1) <= today
