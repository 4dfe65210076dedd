# pharmacy_stock/database/repositories/bills_repo.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from ...constants import (
    BILL_PURCHASE,
    BILL_SALES,
    KEY_LAST_PURCHASE_BILL_NUMBER,
    KEY_LAST_SALES_BILL_NUMBER,
    KEY_PURCHASE_BILLS,
    KEY_SALES_BILLS,
)
from ...utils.errors import DuplicateKeyError, NotFoundError
from ...utils.helpers import fold, new_id
from ...utils.validators import try_parse_float, try_parse_int
from ..document_store import DocumentStore


def _num(d: dict, key: str, default: Optional[float] = 0.0) -> Optional[float]:
    ok, v = try_parse_float(d.get(key))
    return v if ok else default


def _int(d: dict, key: str, default: int = 0) -> int:
    ok, v = try_parse_int(d.get(key))
    return v if ok else default


def _text(d: dict, key: str) -> str:
    v = d.get(key)
    return "" if v is None else str(v).strip()


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass
class PurchaseItem:
    product: str
    batch: str
    expiry: str
    quantity: int                 # individual items
    ptr: float                    # price to retailer, per pack
    items_per_pack: int
    mrp: float                    # entered/confirmed, per pack
    original_mrp: float = 0.0     # catalog MRP at entry time, informational
    discount: float = 0.0
    total_item_amount: float = 0.0
    calculated_profit_per_pack: Optional[float] = None
    calculated_total_profit: Optional[float] = None
    calculated_margin: Optional[float] = None

    @property
    def stock_quantity(self) -> int:
        return self.quantity

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PurchaseItem":
        return cls(
            product=_text(d, "product"),
            batch=_text(d, "batch"),
            expiry=_text(d, "expiry"),
            quantity=_int(d, "quantity"),
            ptr=_num(d, "ptr"),
            items_per_pack=_int(d, "itemsPerPack", 1) or 1,
            mrp=_num(d, "mrp"),
            original_mrp=_num(d, "originalMrp"),
            discount=_num(d, "discount"),
            total_item_amount=_num(d, "totalItemAmount"),
            calculated_profit_per_pack=_num(d, "calculatedProfitPerPack", None),
            calculated_total_profit=_num(d, "calculatedTotalProfit", None),
            calculated_margin=_num(d, "calculatedMargin", None),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "product": self.product,
            "batch": self.batch,
            "expiry": self.expiry,
            "quantity": self.quantity,
            "ptr": self.ptr,
            "itemsPerPack": self.items_per_pack,
            "mrp": self.mrp,
            "originalMrp": self.original_mrp,
            "discount": self.discount,
            "totalItemAmount": self.total_item_amount,
            "calculatedProfitPerPack": self.calculated_profit_per_pack,
            "calculatedTotalProfit": self.calculated_total_profit,
            "calculatedMargin": self.calculated_margin,
        }


@dataclass
class SalesItem:
    product: str
    batch: str
    expiry: str
    quantity_sold: int            # individual items
    price_per_item: float = 0.0   # pack MRP / items per pack
    discount: float = 0.0
    total_item_amount: float = 0.0
    product_mrp: float = 0.0
    product_items_per_pack: int = 1

    @property
    def stock_quantity(self) -> int:
        return self.quantity_sold

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SalesItem":
        return cls(
            product=_text(d, "product"),
            batch=_text(d, "batch"),
            expiry=_text(d, "expiry"),
            quantity_sold=_int(d, "quantitySold"),
            price_per_item=_num(d, "pricePerItem"),
            discount=_num(d, "discount"),
            total_item_amount=_num(d, "totalItemAmount"),
            product_mrp=_num(d, "productMrp"),
            product_items_per_pack=_int(d, "productItemsPerPack", 1) or 1,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "product": self.product,
            "batch": self.batch,
            "expiry": self.expiry,
            "quantitySold": self.quantity_sold,
            "pricePerItem": self.price_per_item,
            "discount": self.discount,
            "totalItemAmount": self.total_item_amount,
            "productMrp": self.product_mrp,
            "productItemsPerPack": self.product_items_per_pack,
        }


@dataclass
class PurchaseBill:
    bill_number: str
    date: str
    supplier_name: str
    items: list[PurchaseItem] = field(default_factory=list)
    total_amount: float = 0.0
    id: str = field(default_factory=new_id)

    kind = BILL_PURCHASE

    @property
    def party(self) -> str:
        return self.supplier_name

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PurchaseBill":
        return cls(
            id=str(d.get("id") or new_id()),
            bill_number=_text(d, "billNumber"),
            date=_text(d, "date"),
            supplier_name=_text(d, "supplierName"),
            items=[PurchaseItem.from_dict(i) for i in d.get("items") or []],
            total_amount=_num(d, "totalAmount"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "billNumber": self.bill_number,
            "date": self.date,
            "supplierName": self.supplier_name,
            "items": [i.to_dict() for i in self.items],
            "totalAmount": self.total_amount,
        }


@dataclass
class SalesBill:
    bill_number: str
    date: str
    customer_name: str
    items: list[SalesItem] = field(default_factory=list)
    total_amount: float = 0.0
    id: str = field(default_factory=new_id)

    kind = BILL_SALES

    @property
    def party(self) -> str:
        return self.customer_name

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SalesBill":
        return cls(
            id=str(d.get("id") or new_id()),
            bill_number=_text(d, "billNumber"),
            date=_text(d, "date"),
            customer_name=_text(d, "customerName"),
            items=[SalesItem.from_dict(i) for i in d.get("items") or []],
            total_amount=_num(d, "totalAmount"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "billNumber": self.bill_number,
            "date": self.date,
            "customerName": self.customer_name,
            "items": [i.to_dict() for i in self.items],
            "totalAmount": self.total_amount,
        }


Bill = Union[PurchaseBill, SalesBill]

_COLLECTIONS = {
    BILL_PURCHASE: (KEY_PURCHASE_BILLS, KEY_LAST_PURCHASE_BILL_NUMBER, PurchaseBill),
    BILL_SALES: (KEY_SALES_BILLS, KEY_LAST_SALES_BILL_NUMBER, SalesBill),
}


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class BillsRepo:
    """
    Purchase and sales bills. The two kinds are independent namespaces: the
    same bill number may exist once as a purchase and once as a sale.

    Each namespace keeps a string-encoded "last bill number" counter holding
    the number the next new bill should get.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    # ---------------------------- READ ----------------------------

    def list_bills(self, kind: str) -> list[Bill]:
        key, _, cls = self._collection(kind)
        return [cls.from_dict(d) for d in self.store.get(key, [])]

    def list_purchase_bills(self) -> list[PurchaseBill]:
        return self.list_bills(BILL_PURCHASE)  # type: ignore[return-value]

    def list_sales_bills(self) -> list[SalesBill]:
        return self.list_bills(BILL_SALES)  # type: ignore[return-value]

    def get(self, kind: str, bill_number: str) -> Bill | None:
        k = fold(bill_number)
        for b in self.list_bills(kind):
            if fold(b.bill_number) == k:
                return b
        return None

    def require(self, kind: str, bill_number: str) -> Bill:
        bill = self.get(kind, bill_number)
        if bill is None:
            raise NotFoundError(f"{kind.capitalize()} bill {bill_number!r} not found.")
        return bill

    def search(self, kind: str, query: str = "", date: str | None = None) -> list[Bill]:
        """Match on bill number or party name (case-insensitive), optional exact date."""
        q = fold(query)
        out = []
        for b in self.list_bills(kind):
            if q and q not in fold(b.bill_number) and q not in fold(b.party):
                continue
            if date and b.date != date.strip():
                continue
            out.append(b)
        return out

    # ---------------------------- WRITE ----------------------------

    def insert(self, bill: Bill) -> None:
        """Append a new bill; bill numbers are unique per kind, case-insensitively."""
        key, _, _ = self._collection(bill.kind)
        bills = self.list_bills(bill.kind)
        k = fold(bill.bill_number)
        if any(fold(b.bill_number) == k for b in bills):
            raise DuplicateKeyError(f'Bill number "{bill.bill_number}" already exists.')
        bills.append(bill)
        self._save(key, bills)

    def replace(self, bill: Bill) -> None:
        """Swap the stored bill with the same bill number, keeping its position."""
        key, _, _ = self._collection(bill.kind)
        bills = self.list_bills(bill.kind)
        k = fold(bill.bill_number)
        for i, b in enumerate(bills):
            if fold(b.bill_number) == k:
                bill.id = b.id
                bills[i] = bill
                self._save(key, bills)
                return
        raise NotFoundError(f"{bill.kind.capitalize()} bill {bill.bill_number!r} not found.")

    def remove(self, kind: str, bill_number: str) -> Bill:
        key, _, _ = self._collection(kind)
        bills = self.list_bills(kind)
        k = fold(bill_number)
        for i, b in enumerate(bills):
            if fold(b.bill_number) == k:
                del bills[i]
                self._save(key, bills)
                return b
        raise NotFoundError(f"{kind.capitalize()} bill {bill_number!r} not found.")

    def rename_product(self, old_name: str, new_name: str) -> int:
        """
        Point every purchase and sales line naming `old_name` (case-insensitive)
        at `new_name`. Returns the number of lines rewritten.
        """
        k = fold(old_name)
        renamed = 0
        for kind, (key, _, _) in _COLLECTIONS.items():
            bills = self.list_bills(kind)
            hits = 0
            for bill in bills:
                for item in bill.items:
                    if fold(item.product) == k:
                        item.product = new_name
                        hits += 1
            if hits:
                self._save(key, bills)
                renamed += hits
        return renamed

    # ---------------------------- Counters ----------------------------

    def next_bill_number(self, kind: str) -> str:
        """The number a new bill of this kind should default to ("1" initially)."""
        _, counter_key, _ = self._collection(kind)
        raw = self.store.get(counter_key)
        ok, v = try_parse_int(raw)
        return str(v) if ok and v > 0 else "1"

    def advance_counter(self, kind: str, used_number: str) -> None:
        """
        After a create: store used_number + 1 when the used number is numeric
        and not behind the counter. Free-form numbers leave the counter alone.
        """
        _, counter_key, _ = self._collection(kind)
        ok, used = try_parse_int(str(used_number).strip())
        if not ok:
            return
        current = int(self.next_bill_number(kind))
        self.store.set(counter_key, str(max(current, used + 1)))

    # ---------------------------- Helpers ----------------------------

    def _save(self, key: str, bills: Iterable[Bill]) -> None:
        self.store.set(key, [b.to_dict() for b in bills])

    @staticmethod
    def _collection(kind: str):
        try:
            return _COLLECTIONS[kind]
        except KeyError:
            raise ValueError(f"Unknown bill kind {kind!r}; expected 'purchase' or 'sales'.") from None


__all__ = [
    "PurchaseItem",
    "SalesItem",
    "PurchaseBill",
    "SalesBill",
    "Bill",
    "BillsRepo",
]
