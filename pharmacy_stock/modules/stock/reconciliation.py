"""
Stock reconciliation.

On-hand stock is never stored per lot. It is replayed from the complete bill
history every time: purchase lines add, sales lines subtract, keyed by the
normalized (product, batch, expiry) lot key. The replay is a pure function of
its inputs, so calling it twice on the same history gives the same ledger.

Cost is O(total line items) per call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from .expiry import parse_expiry
from .normalizer import LotKey, normalize_key, product_key

_log = logging.getLogger(__name__)


@dataclass
class LotStock:
    key: LotKey
    product: str          # catalog name when resolvable, else first-seen text
    batch: str            # original case, first occurrence wins
    expiry: str
    quantity: int = 0     # signed accumulator

    @property
    def expiry_date(self) -> Optional[date]:
        return parse_expiry(self.expiry)

    @property
    def on_hand(self) -> int:
        """Display quantity, never below zero."""
        return max(0, self.quantity)


def _expiry_sort_key(lot: LotStock):
    d = lot.expiry_date
    return (d is None, d or date.min)


@dataclass
class StockLedger:
    """
    Result of one reconciliation pass.

    - `lots`: every lot seen in the history, signed, including lots at or
      below zero and lots of products no longer in the catalog.
    - `by_product`: catalog name -> lots with quantity > 0, soonest expiry
      first; unparsable expiries last in first-seen order.
    """
    lots: dict[LotKey, LotStock] = field(default_factory=dict)
    by_product: dict[str, list[LotStock]] = field(default_factory=dict)
    skipped_lines: int = 0

    def lots_for(self, product_name: str) -> list[LotStock]:
        k = product_key(product_name)
        for name, lots in self.by_product.items():
            if product_key(name) == k:
                return list(lots)
        return []

    def available(self, product_name, batch, expiry) -> int:
        key = normalize_key(product_name, batch, expiry)
        if key is None:
            return 0
        lot = self.lots.get(key)
        return lot.on_hand if lot else 0

    def total_for_product(self, product_name: str) -> int:
        return sum(l.quantity for l in self.lots_for(product_name))

    def totals(self) -> dict[str, int]:
        return {name: sum(l.quantity for l in lots) for name, lots in self.by_product.items()}


def reconcile(catalog: Iterable, purchase_bills: Iterable, sales_bills: Iterable) -> StockLedger:
    """
    Replay purchases (+) and sales (-) into a StockLedger.

    `catalog` is an iterable of products (anything with `.name`); bills are
    PurchaseBill / SalesBill records whose items expose product, batch,
    expiry and `stock_quantity`.
    """
    ledger = StockLedger()

    def _apply(items, sign: int) -> None:
        for item in items:
            key = normalize_key(item.product, item.batch, item.expiry)
            if key is None:
                ledger.skipped_lines += 1
                continue
            lot = ledger.lots.get(key)
            if lot is None:
                lot = LotStock(
                    key=key,
                    product=item.product.strip(),
                    batch=item.batch.strip(),
                    expiry=item.expiry.strip(),
                )
                ledger.lots[key] = lot
            lot.quantity += sign * int(item.stock_quantity or 0)

    for bill in purchase_bills:
        _apply(bill.items, +1)
    for bill in sales_bills:
        _apply(bill.items, -1)

    if ledger.skipped_lines:
        _log.warning("Reconciliation skipped %d line(s) without product/batch/expiry.",
                     ledger.skipped_lines)

    names = {product_key(p.name): p.name for p in catalog}
    for lot in ledger.lots.values():
        name = names.get(lot.key.product)
        if name is None:
            continue
        lot.product = name
        if lot.quantity > 0:
            ledger.by_product.setdefault(name, []).append(lot)

    for lots in ledger.by_product.values():
        lots.sort(key=_expiry_sort_key)

    _log.debug("Reconciled %d lot(s) across %d product(s).", len(ledger.lots), len(ledger.by_product))
    return ledger
