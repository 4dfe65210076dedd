# pharmacy_stock/utils/helpers.py
from datetime import date, datetime, timezone
import logging
import uuid
from typing import Union, Optional

from ..constants import BILL_DATE_FORMAT

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date the way bills store it (DD-MM-YYYY)."""
    return date.today().strftime(BILL_DATE_FORMAT)


def now_iso() -> str:
    """UTC timestamp for history entries, e.g. 2025-05-01T10:15:00.123456+00:00."""
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    """Opaque stable id for catalog/contact/history records."""
    return uuid.uuid4().hex


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def fold(text) -> str:
    """Trim + lowercase; the comparison form for names, batches and bill numbers."""
    if text is None:
        return ""
    return str(text).strip().lower()
