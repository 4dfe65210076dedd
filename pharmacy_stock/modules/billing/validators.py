"""
pharmacy_stock/modules/billing/validators.py

Purpose
-------
Turn bill input (a camelCase mapping as the bill screens submit it, or an
already-built bill record) into a typed PurchaseBill / SalesBill, collecting
every problem found into one ValidationError.

Public API
----------
- validate_purchase_bill(data, find_product) -> PurchaseBill
- validate_sales_bill(data, find_product, ledger) -> SalesBill

`find_product(name)` is a case-insensitive catalog lookup returning a
Product or None. `ledger` is the StockLedger that sales quantities are
checked against.

Rules
-----
- Bill number, party name and at least one item are required.
- Bill date is DD-MM-YYYY; an empty date means today.
- Expiry is MM-YYYY. Legacy MM-YY is accepted and rewritten to MM-YYYY.
- Quantities are positive whole numbers of individual items.
- Prices are >= 0, percentages 0..100.
- Sales: the quantity requested per lot (summed over the bill's lines)
  must not exceed what the ledger has on hand for that lot.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ...constants import BILL_DATE_FORMAT
from ...database.repositories.bills_repo import (
    PurchaseBill,
    PurchaseItem,
    SalesBill,
    SalesItem,
)
from ...database.repositories.products_repo import Product
from ...utils.errors import ValidationError
from ...utils.helpers import new_id, today_str
from ...utils.validators import (
    non_empty,
    try_parse_float,
    try_parse_int,
)
from ..stock.expiry import canonical_expiry, is_valid_expiry
from ..stock.normalizer import normalize_key
from ..stock.reconciliation import StockLedger
from .costing import compute_profit_and_margin, price_per_item, sales_line_amount

FindProduct = Callable[[str], Optional[Product]]


def _as_mapping(data: Any) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    to_dict = getattr(data, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Expected a mapping or bill record, got {type(data).__name__}.")


def _text(d: Mapping, key: str) -> str:
    v = d.get(key)
    return "" if v is None else str(v).strip()


def _blank(v) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


def _check_header(d: Mapping, party_key: str, party_label: str, problems: list[str]) -> tuple[str, str, str]:
    bill_number = _text(d, "billNumber")
    if not bill_number:
        problems.append("Please enter Bill/Invoice Number.")

    party = _text(d, party_key)
    if not non_empty(party):
        problems.append(f"Please enter {party_label} name.")

    date = _text(d, "date") or today_str()
    try:
        datetime.strptime(date, BILL_DATE_FORMAT)
    except ValueError:
        problems.append("Invalid Bill Date format. Please enter date in DD-MM-YYYY.")

    if not d.get("items"):
        problems.append("Please add at least one item to the bill.")
    return bill_number, party, date


def _check_lot_fields(item: Mapping, label: str, problems: list[str]) -> tuple[str, str]:
    batch = _text(item, "batch")
    expiry = _text(item, "expiry")
    if not batch:
        problems.append(f'Batch No is required for product "{label}".')
    if not expiry:
        problems.append(f'Expiry Date is required for product "{label}".')
    elif not is_valid_expiry(expiry):
        problems.append(f'Invalid "Expiry Date" for product "{label}". Please use MM-YYYY.')
    return batch, canonical_expiry(expiry)


def _resolve(item: Mapping, find_product: FindProduct, problems: list[str]) -> tuple[str, Optional[Product]]:
    name = _text(item, "product")
    if not name:
        problems.append("Product name is required for all items.")
        return "", None
    product = find_product(name)
    if product is None:
        problems.append(f'Product "{name}" not found in Product Master.')
    return name, product


def _positive_int(item: Mapping, key: str, label: str, field_label: str, problems: list[str]) -> int:
    ok, v = try_parse_int(item.get(key))
    if not ok or v <= 0:
        problems.append(f'Invalid "{field_label}" for product "{label}". Please enter a positive whole number.')
        return 0
    return v


def _number(item: Mapping, key: str, label: str, field_label: str, problems: list[str],
            default: float, upper: Optional[float] = None) -> float:
    raw = item.get(key)
    if _blank(raw):
        return default
    ok, v = try_parse_float(raw)
    if not ok or v < 0 or (upper is not None and v > upper):
        rng = f"between 0 and {upper:g}" if upper is not None else "0 or more"
        problems.append(f'Invalid "{field_label}" for product "{label}". Please enter a number {rng}.')
        return default
    return v


def _paid(quantity: int, ptr: float, per_pack: int, discount: float) -> float:
    if quantity <= 0 or ptr < 0 or per_pack <= 0:
        return 0.0
    return ptr * (quantity / per_pack) * (1 - discount / 100)


# ---------------------------------------------------------------------------
# Purchase bills
# ---------------------------------------------------------------------------

def validate_purchase_bill(data: Any, find_product: FindProduct) -> PurchaseBill:
    d = _as_mapping(data)
    problems: list[str] = []
    bill_number, supplier, date = _check_header(d, "supplierName", "supplier", problems)

    items: list[PurchaseItem] = []
    for raw in d.get("items") or []:
        raw = _as_mapping(raw)
        name, product = _resolve(raw, find_product, problems)
        label = name or "?"
        batch, expiry = _check_lot_fields(raw, label, problems)
        quantity = _positive_int(raw, "quantity", label, "Quantity", problems)

        catalog_mrp = product.mrp if product else 0.0
        catalog_pack = product.items_per_pack if product else 1
        catalog_discount = product.discount if product else 0.0

        if _blank(raw.get("ptr")):
            problems.append(f'"PTR" is required for product "{label}".')
            ptr = -1.0
        else:
            ptr = _number(raw, "ptr", label, "PTR", problems, default=-1.0)
        per_pack = catalog_pack
        if not _blank(raw.get("itemsPerPack")):
            per_pack = _positive_int(raw, "itemsPerPack", label, "Items per Pack", problems)
        mrp = _number(raw, "mrp", label, "MRP", problems, default=catalog_mrp)
        discount = _number(raw, "discount", label, "Discount (%)", problems,
                           default=catalog_discount, upper=100)

        costing = compute_profit_and_margin(quantity, ptr, per_pack, mrp, discount)
        items.append(PurchaseItem(
            product=product.name if product else name,
            batch=batch,
            expiry=expiry,
            quantity=quantity,
            ptr=max(ptr, 0.0),
            items_per_pack=per_pack or 1,
            mrp=mrp,
            original_mrp=catalog_mrp,
            discount=discount,
            total_item_amount=costing.total_item_amount if costing.is_valid else _paid(quantity, ptr, per_pack, discount),
            calculated_profit_per_pack=costing.profit_per_pack,
            calculated_total_profit=costing.total_profit,
            calculated_margin=costing.margin_pct,
        ))

    if problems:
        raise ValidationError(problems)

    return PurchaseBill(
        id=_text(d, "id") or new_id(),
        bill_number=bill_number,
        date=date,
        supplier_name=supplier,
        items=items,
        total_amount=sum(i.total_item_amount for i in items),
    )


# ---------------------------------------------------------------------------
# Sales bills
# ---------------------------------------------------------------------------

def validate_sales_bill(data: Any, find_product: FindProduct, ledger: StockLedger) -> SalesBill:
    d = _as_mapping(data)
    problems: list[str] = []
    bill_number, customer, date = _check_header(d, "customerName", "customer", problems)

    items: list[SalesItem] = []
    requested: dict = {}
    for raw in d.get("items") or []:
        raw = _as_mapping(raw)
        name, product = _resolve(raw, find_product, problems)
        label = name or "?"
        batch, expiry = _check_lot_fields(raw, label, problems)
        quantity = _positive_int(raw, "quantitySold", label, "Quantity Sold", problems)
        discount = _number(raw, "discount", label, "Discount (%)", problems, default=0.0, upper=100)

        if product is None:
            continue

        unit_price = price_per_item(product.mrp, product.items_per_pack)
        items.append(SalesItem(
            product=product.name,
            batch=batch,
            expiry=expiry,
            quantity_sold=quantity,
            price_per_item=unit_price,
            discount=discount,
            total_item_amount=sales_line_amount(quantity, unit_price, discount),
            product_mrp=product.mrp,
            product_items_per_pack=product.items_per_pack,
        ))

        key = normalize_key(product.name, batch, expiry)
        if key is not None and quantity > 0:
            requested.setdefault(key, [product.name, batch, expiry, 0])[3] += quantity

    for name, batch, expiry, qty in requested.values():
        available = ledger.available(name, batch, expiry)
        if qty > available:
            problems.append(
                f'Insufficient stock for "{name}" (Batch: {batch}, Expiry: {expiry}). '
                f"Available: {available} items, requested: {qty}."
            )

    if problems:
        raise ValidationError(problems)

    return SalesBill(
        id=_text(d, "id") or new_id(),
        bill_number=bill_number,
        date=date,
        customer_name=customer,
        items=items,
        total_amount=sum(i.total_item_amount for i in items),
    )
