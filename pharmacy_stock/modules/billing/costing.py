"""
Pack-based pricing math. Pure functions, no rounding; display rounding is the
caller's business.

- PTR and MRP are per pack; quantities are individual items.
- Fractional packs are allowed (15 items of a 10-pack = 1.5 packs).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...utils.validators import try_parse_float


@dataclass(frozen=True)
class CostingResult:
    profit_per_pack: Optional[float] = None
    total_profit: Optional[float] = None
    margin_pct: Optional[float] = None
    total_item_amount: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return self.total_item_amount is not None


INVALID = CostingResult()


def compute_profit_and_margin(quantity_items, ptr_per_pack, items_per_pack, mrp_per_pack, discount_pct) -> CostingResult:
    """
    Profit and margin of a purchase line.

    total_item_amount is what was paid: PTR x packs, less the discount.
    Every field is None when an input is not numeric, when quantity, items
    per pack or MRP is not positive, or when PTR or discount is negative.
    """
    parsed = [try_parse_float(v) for v in
              (quantity_items, ptr_per_pack, items_per_pack, mrp_per_pack, discount_pct)]
    if not all(ok for ok, _ in parsed):
        return INVALID
    qty, ptr, per_pack, mrp, discount = (v for _, v in parsed)
    if qty <= 0 or per_pack <= 0 or mrp <= 0 or ptr < 0 or discount < 0:
        return INVALID

    packs = qty / per_pack
    paid = ptr * packs * (1 - discount / 100)
    revenue_at_mrp = mrp * packs
    total_profit = revenue_at_mrp - paid
    return CostingResult(
        profit_per_pack=total_profit / packs,
        total_profit=total_profit,
        margin_pct=(total_profit / revenue_at_mrp) * 100 if revenue_at_mrp > 0 else None,
        total_item_amount=paid,
    )


def price_per_item(mrp_per_pack, items_per_pack) -> float:
    """Selling price of one item; falls back to the pack MRP when pack size is unusable."""
    ok_m, mrp = try_parse_float(mrp_per_pack)
    ok_p, per_pack = try_parse_float(items_per_pack)
    if not ok_m:
        return 0.0
    if not ok_p or per_pack <= 0:
        return mrp
    return mrp / per_pack


def sales_line_amount(quantity_sold, unit_price, discount_pct) -> float:
    """quantity x price per item x (1 - discount%); 0 when inputs are out of range."""
    ok_q, qty = try_parse_float(quantity_sold)
    ok_u, price = try_parse_float(unit_price)
    ok_d, discount = try_parse_float(discount_pct if discount_pct not in (None, "") else 0)
    if not (ok_q and ok_u and ok_d):
        return 0.0
    if qty < 0 or price < 0 or not 0 <= discount <= 100:
        return 0.0
    return qty * price * (1 - discount / 100)


def simple_margin(ptr, mrp) -> tuple[Optional[float], Optional[float]]:
    """
    Per-pack (profit, margin %) from PTR and MRP alone; (None, None) when MRP
    is not positive.
    """
    ok_p, purchase = try_parse_float(ptr)
    ok_m, retail = try_parse_float(mrp)
    if not (ok_p and ok_m) or retail <= 0:
        return None, None
    profit = retail - purchase
    return profit, (profit / retail) * 100
