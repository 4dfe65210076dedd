"""
Read-only dashboard figures derived from a StockLedger.

Conventions:
- Quantities are individual items.
- Stock value uses catalog MRP per item (pack MRP / items per pack).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from ...constants import EXPIRY_HORIZON_MONTHS
from ...utils.helpers import today_str
from .expiry import add_months, end_of_month, parse_expiry
from .normalizer import product_key
from .reconciliation import StockLedger


@dataclass(frozen=True)
class StockSummary:
    total_quantity: int
    total_value: float
    product_count: int
    lot_count: int


@dataclass(frozen=True)
class ExpiringLot:
    id: str
    product: str
    category: str
    company: str
    batch: str
    expiry: str
    quantity: int


def _catalog_index(catalog: Iterable) -> dict:
    return {product_key(p.name): p for p in catalog}


def stock_summary(ledger: StockLedger, catalog: Iterable) -> StockSummary:
    index = _catalog_index(catalog)
    qty = 0
    value = 0.0
    lots = 0
    for name, product_lots in ledger.by_product.items():
        p = index.get(product_key(name))
        per_item = (p.mrp / p.items_per_pack) if p and p.items_per_pack else 0.0
        for lot in product_lots:
            qty += lot.quantity
            value += lot.quantity * per_item
            lots += 1
    return StockSummary(
        total_quantity=qty,
        total_value=value,
        product_count=len(ledger.by_product),
        lot_count=lots,
    )


def expiry_cutoff(today: Optional[date] = None, months: int = EXPIRY_HORIZON_MONTHS) -> date:
    """Last day of the month `months` months after the current one."""
    today = today or date.today()
    return end_of_month(add_months(date(today.year, today.month, 1), months))


def nearing_expiry(
    ledger: StockLedger,
    catalog: Iterable,
    today: Optional[date] = None,
    months: int = EXPIRY_HORIZON_MONTHS,
) -> List[ExpiringLot]:
    """
    Lots with stock whose expiry month starts on or before the cutoff
    (already-expired lots included), soonest first.
    """
    cutoff = expiry_cutoff(today, months)
    index = _catalog_index(catalog)
    out: list[tuple[date, ExpiringLot]] = []
    for name, lots in ledger.by_product.items():
        p = index.get(product_key(name))
        for lot in lots:
            d = parse_expiry(lot.expiry)
            if d is None or d > cutoff or lot.quantity <= 0:
                continue
            out.append((d, ExpiringLot(
                id=f"{p.id if p else name}-{lot.batch}-{lot.expiry}",
                product=name,
                category=(p.category if p and p.category else "N/A"),
                company=(p.company if p and p.company else "N/A"),
                batch=lot.batch,
                expiry=lot.expiry,
                quantity=lot.quantity,
            )))
    out.sort(key=lambda t: t[0])
    return [lot for _, lot in out]


def bills_on(bills: Iterable, day: Optional[str] = None) -> list:
    """Bills dated `day` (DD-MM-YYYY, default today)."""
    day = day or today_str()
    return [b for b in bills if b.date == day]


def low_stock(catalog: Iterable) -> list:
    """Products whose running quantity is under their minimum stock level."""
    return [p for p in catalog if p.min_stock > 0 and p.quantity < p.min_stock]
