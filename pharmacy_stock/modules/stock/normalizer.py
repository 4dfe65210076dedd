"""
Lot keys.

A lot is one (product, batch, expiry) triple. Keys are compared trimmed and
case-insensitively so "Paracetamol"/"B1 "/"05-25" and " paracetamol "/"b1"/"05-2025"
land in the same lot.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from .expiry import canonical_expiry

_log = logging.getLogger(__name__)


class LotKey(NamedTuple):
    product: str
    batch: str
    expiry: str

    def __str__(self) -> str:
        return f"{self.product}|{self.batch}|{self.expiry}"


def _part(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s.lower() if s else None


def normalize_key(product_name, batch, expiry) -> Optional[LotKey]:
    """
    Return the normalized LotKey, or None when any part is empty or not a
    string. None means the line cannot be reconciled and is skipped.
    """
    p, b, e = _part(product_name), _part(batch), _part(expiry)
    if p is None or b is None or e is None:
        _log.debug("Unreconcilable line skipped: product=%r batch=%r expiry=%r",
                   product_name, batch, expiry)
        return None
    return LotKey(p, b, canonical_expiry(e).lower())


def product_key(name) -> str:
    return _part(name) or ""
