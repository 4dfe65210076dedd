from .expiry import canonical_expiry, is_valid_expiry, parse_expiry
from .normalizer import LotKey, normalize_key
from .reconciliation import LotStock, StockLedger, reconcile

__all__ = [
    "canonical_expiry",
    "is_valid_expiry",
    "parse_expiry",
    "LotKey",
    "normalize_key",
    "LotStock",
    "StockLedger",
    "reconcile",
]
