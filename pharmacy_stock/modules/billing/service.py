"""
pharmacy_stock/modules/billing/service.py

Purpose
-------
The only writer of stock. Every bill create/edit/delete goes through here so
that the catalog's cached per-product quantity and the bill history stay in
step.

Public interface
----------------
- InventoryService(store, events=None, purchase_delete_reverses_stock=None)
- create_purchase_bill(data) / update_purchase_bill(number, data) / delete_purchase_bill(number)
- create_sales_bill(data)    / update_sales_bill(number, data)    / delete_sales_bill(number)
- add_product(name, **fields) / update_product(id, **changes) / delete_product(id)
- next_bill_number(kind), reconcile(), check_consistency(), resync_quantities()
- undo()

Mutation recipe
---------------
1. validate the input into a typed bill (nothing written on failure)
2. inside one store transaction:
   snapshot catalog -> apply per-product deltas -> write bills -> counters,
   customer list, history
3. after commit: emit catalog_changed and bills_changed

A quantity that would go negative is clamped to 0 and reported as a
ConsistencyWarning. A product missing from the catalog is skipped with a
warning; the bill is still written.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from ... import config
from ...constants import BILL_PURCHASE, BILL_SALES
from ...database.document_store import DocumentStore
from ...database.repositories.bills_repo import Bill, BillsRepo, PurchaseBill, SalesBill
from ...database.repositories.customers_repo import CustomersRepo
from ...database.repositories.history_repo import HistoryEntry
from ...database.repositories.products_repo import Product, ProductsRepo, snapshot
from ...database.repositories.suppliers_repo import SuppliersRepo
from ...utils.errors import ConsistencyWarning, DomainError, StockWarning
from ...utils.helpers import fmt_money, fold
from ...utils.loggers import get_audit_logger, log_event
from ..history.log import HistoryLog
from ..stock.reconciliation import StockLedger, reconcile
from .events import InventoryEvents
from .validators import validate_purchase_bill, validate_sales_bill

_log = logging.getLogger(__name__)


@dataclass
class MutationResult:
    bill: Bill
    warnings: list[StockWarning] = field(default_factory=list)
    history: Optional[HistoryEntry] = None


def _totals_by_product(bill: Optional[Bill]) -> dict[str, tuple[str, int]]:
    """fold(name) -> (display name, summed item quantity) over the bill's lines."""
    out: dict[str, list] = {}
    if bill is None:
        return {}
    for item in bill.items:
        k = fold(item.product)
        if not k:
            continue
        out.setdefault(k, [item.product.strip(), 0])[1] += int(item.stock_quantity or 0)
    return {k: (name, qty) for k, (name, qty) in out.items()}


def stock_deltas(before: Optional[Bill], after: Optional[Bill], sign: int) -> dict[str, tuple[str, int]]:
    """
    Per-product catalog change for replacing `before` with `after`.

    sign is +1 for purchases (stock in) and -1 for sales (stock out); a
    create has before=None, a delete has after=None. Zero deltas are dropped.
    """
    old = _totals_by_product(before)
    new = _totals_by_product(after)
    deltas: dict[str, tuple[str, int]] = {}
    for k in {*old, *new}:
        name = (new.get(k) or old.get(k))[0]
        delta = sign * (new.get(k, (name, 0))[1] - old.get(k, (name, 0))[1])
        if delta:
            deltas[k] = (name, delta)
    return deltas


class InventoryService:
    def __init__(
        self,
        store: DocumentStore,
        events: Optional[InventoryEvents] = None,
        purchase_delete_reverses_stock: Optional[bool] = None,
        audit_logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.events = events if events is not None else InventoryEvents()
        self.products = ProductsRepo(store)
        self.bills = BillsRepo(store)
        self.customers = CustomersRepo(store)
        self.suppliers = SuppliersRepo(store)
        self.history = HistoryLog(store, events=self.events)
        self.purchase_delete_reverses_stock = (
            config.PURCHASE_DELETE_REVERSES_STOCK
            if purchase_delete_reverses_stock is None
            else purchase_delete_reverses_stock
        )
        self._audit = audit_logger or get_audit_logger()

    # ---------------------------- Reads ----------------------------

    def reconcile(self, exclude: Optional[tuple[str, str]] = None) -> StockLedger:
        """
        Replay all bills into a ledger. `exclude=(kind, bill_number)` leaves
        one bill out, which is how an edited sales bill gets its own
        quantities back while it is being validated.
        """
        purchases = self.bills.list_purchase_bills()
        sales = self.bills.list_sales_bills()
        if exclude is not None:
            kind, number = exclude
            k = fold(number)
            if kind == BILL_PURCHASE:
                purchases = [b for b in purchases if fold(b.bill_number) != k]
            else:
                sales = [b for b in sales if fold(b.bill_number) != k]
        return reconcile(self.products.list_products(), purchases, sales)

    def next_bill_number(self, kind: str) -> str:
        return self.bills.next_bill_number(kind)

    def check_consistency(self) -> dict[str, tuple[int, int]]:
        """
        Products whose cached quantity differs from the positive lots replayed
        from bills: name -> (cached, derived). Empty when everything agrees.
        """
        ledger = self.reconcile()
        out = {}
        for p in self.products.list_products():
            derived = ledger.total_for_product(p.name)
            if p.quantity != derived:
                out[p.name] = (p.quantity, derived)
        return out

    def stock_value(self) -> float:
        """Sum over the catalog of quantity x MRP per item."""
        return sum(p.quantity * (p.mrp / p.items_per_pack) for p in self.products.list_products())

    # ---------------------------- Catalog ----------------------------

    def add_product(self, name: str, **fields: Any) -> Product:
        """
        Add a catalog entry. A name that still has lots in the bill history
        (deleted, then added again) starts at the ledger total instead of 0;
        this is the only quantity write that does not come from a bill.
        """
        with self.store.transaction():
            product = self.products.create(name, **fields)
            on_hand = self.reconcile().total_for_product(product.name)
            action = f"Added new product: {product.name}"
            if on_hand:
                product = replace(product, quantity=on_hand)
                self.products.save_all(
                    product if p.id == product.id else p for p in self.products.list_products()
                )
                action += f" ({on_hand} items on hand from existing bills)"
                _log.info("Product %s re-added with %d items from bill history", product.name, on_hand)
            self.history.add_history(action)
        self.events.emit_catalog_changed("product_added")
        return product

    def update_product(self, product_id: str, **changes: Any) -> Product:
        """
        Edit catalog fields. A rename rewrites the product name on every bill
        line in the same transaction, so the lots follow the product.
        """
        renamed = 0
        with self.store.transaction():
            current = self.products.get(product_id)
            product = self.products.update(product_id, **changes)
            action = f"Updated product: {product.name}"
            if current is not None and product.key != current.key:
                renamed = self.bills.rename_product(current.name, product.name)
                action = f"Renamed product: {current.name} -> {product.name}"
                if renamed:
                    action += f" ({renamed} bill lines)"
            self.history.add_history(action)
        self.events.emit_catalog_changed("product_updated")
        if renamed:
            self.events.emit_bills_changed("product_renamed")
        return product

    def delete_product(self, product_id: str) -> None:
        with self.store.transaction():
            product = self.products.get(product_id)
            self.products.delete(product_id)
            self.history.add_history(f"Deleted product: {product.name if product else product_id}")
        self.events.emit_catalog_changed("product_deleted")

    # ---------------------------- Purchase bills ----------------------------

    def create_purchase_bill(self, data: Any) -> MutationResult:
        op = "create_purchase_bill"
        bill = self._validate(op, lambda: validate_purchase_bill(data, self.products.find_by_name))

        def write():
            self.bills.insert(bill)
            self.bills.advance_counter(BILL_PURCHASE, bill.bill_number)

        action = (f"Purchase bill #{bill.bill_number} from {bill.supplier_name} "
                  f"with total ₹{fmt_money(bill.total_amount)}")
        return self._commit(op, bill, stock_deltas(None, bill, +1), write, action)

    def update_purchase_bill(self, bill_number: str, data: Any) -> MutationResult:
        op = "update_purchase_bill"
        original: PurchaseBill = self.bills.require(BILL_PURCHASE, bill_number)  # type: ignore[assignment]
        bill = self._validate(op, lambda: validate_purchase_bill(
            self._pin_number(data, original), self.products.find_by_name))
        action = f"Updated purchase bill #{original.bill_number} from {bill.supplier_name}"
        return self._commit(op, bill, stock_deltas(original, bill, +1),
                            lambda: self.bills.replace(bill), action)

    def delete_purchase_bill(self, bill_number: str) -> MutationResult:
        op = "delete_purchase_bill"
        original: PurchaseBill = self.bills.require(BILL_PURCHASE, bill_number)  # type: ignore[assignment]
        if self.purchase_delete_reverses_stock:
            deltas = stock_deltas(original, None, +1)
        else:
            _log.info("Purchase bill #%s deleted without reversing stock.", original.bill_number)
            deltas = {}
        action = f"Deleted purchase bill #{original.bill_number} from {original.supplier_name}"
        return self._commit(op, original, deltas,
                            lambda: self.bills.remove(BILL_PURCHASE, original.bill_number), action)

    # ---------------------------- Sales bills ----------------------------

    def create_sales_bill(self, data: Any) -> MutationResult:
        op = "create_sales_bill"
        ledger = self.reconcile()
        bill = self._validate(op, lambda: validate_sales_bill(data, self.products.find_by_name, ledger))

        def write():
            self.bills.insert(bill)
            self.bills.advance_counter(BILL_SALES, bill.bill_number)
            self.customers.ensure(bill.customer_name)

        action = (f"Sale made to {bill.customer_name} for Bill #{bill.bill_number} "
                  f"with total ₹{fmt_money(bill.total_amount)}")
        return self._commit(op, bill, stock_deltas(None, bill, -1), write, action)

    def update_sales_bill(self, bill_number: str, data: Any) -> MutationResult:
        op = "update_sales_bill"
        original: SalesBill = self.bills.require(BILL_SALES, bill_number)  # type: ignore[assignment]
        ledger = self.reconcile(exclude=(BILL_SALES, original.bill_number))
        bill = self._validate(op, lambda: validate_sales_bill(
            self._pin_number(data, original), self.products.find_by_name, ledger))

        def write():
            self.bills.replace(bill)
            self.customers.ensure(bill.customer_name)

        action = f"Updated sales bill #{original.bill_number} for {bill.customer_name}"
        return self._commit(op, bill, stock_deltas(original, bill, -1), write, action)

    def delete_sales_bill(self, bill_number: str) -> MutationResult:
        op = "delete_sales_bill"
        original: SalesBill = self.bills.require(BILL_SALES, bill_number)  # type: ignore[assignment]
        action = f"Deleted sales bill #{original.bill_number} for {original.customer_name}"
        return self._commit(op, original, stock_deltas(original, None, -1),
                            lambda: self.bills.remove(BILL_SALES, original.bill_number), action)

    # ---------------------------- Maintenance ----------------------------

    def resync_quantities(self) -> list[StockWarning]:
        """
        Overwrite every cached catalog quantity with the total replayed from
        bills. Undoable like any other stock adjustment.
        """
        ledger = self.reconcile()
        changed: list[StockWarning] = []
        with self.store.transaction():
            products = self.products.list_products()
            self.history.push_snapshot(products)
            for p in products:
                derived = ledger.total_for_product(p.name)
                if p.quantity != derived:
                    changed.append(StockWarning(
                        p.name, f"Quantity corrected from {p.quantity} to {derived}."))
                    p.quantity = derived
            self.products.save_all(products)
            self.history.add_history(f"Resynced stock quantities ({len(changed)} product(s) corrected)")
        log_event(self._audit, "resync_quantities", "commit", "Catalog quantities resynced",
                  extra={"corrected": [w.product for w in changed]})
        self.events.emit_catalog_changed("resync")
        return changed

    def undo(self) -> bool:
        done = self.history.undo()
        if done:
            log_event(self._audit, "undo", "commit", "Catalog restored from snapshot")
        return done

    # ---------------------------- Internals ----------------------------

    @staticmethod
    def _pin_number(data: Any, original: Bill) -> dict[str, Any]:
        """Edits keep the bill's number and id whatever the form sent."""
        d = dict(data) if isinstance(data, Mapping) else data.to_dict()
        d["billNumber"] = original.bill_number
        d["id"] = original.id
        return d

    def _validate(self, op: str, build):
        try:
            return build()
        except DomainError as e:
            log_event(self._audit, op, "validate", str(e), level=logging.WARNING,
                      extra={"problems": getattr(e, "problems", [str(e)])})
            raise

    def _apply_deltas(self, products: list[Product], deltas: dict[str, tuple[str, int]]) -> list[StockWarning]:
        found: list[StockWarning] = []
        index = {p.key: p for p in products}
        for k, (name, delta) in deltas.items():
            product = index.get(k)
            if product is None:
                msg = f'Product "{name}" not found in catalog; stock change of {delta} skipped.'
                _log.warning(msg)
                found.append(StockWarning(name, msg, kind="not_found"))
                continue
            new_qty = product.quantity + delta
            if new_qty < 0:
                msg = (f'Stock for "{product.name}" would become {new_qty}; '
                       f"clamped to 0.")
                _log.warning(msg)
                warnings.warn(msg, ConsistencyWarning, stacklevel=4)
                found.append(StockWarning(product.name, msg))
                new_qty = 0
            product.quantity = new_qty
        return found

    def _commit(self, op: str, bill: Bill, deltas: dict[str, tuple[str, int]],
                write, action: str) -> MutationResult:
        extra = {"kind": bill.kind, "bill_number": bill.bill_number,
                 "deltas": {name: d for name, d in deltas.values()}}
        try:
            with self.store.transaction():
                products = self.products.list_products()
                before = snapshot(products)
                found = self._apply_deltas(products, deltas)
                if deltas:
                    self.products.save_all(products)
                write()
                self.history.push_snapshot(before)
                entry = self.history.add_history(action)
        except DomainError as e:
            log_event(self._audit, op, "rollback", str(e), extra=extra, level=logging.WARNING)
            raise

        if found:
            extra["warnings"] = [w.message for w in found]
        log_event(self._audit, op, "commit", action, extra=extra)
        _log.info(action)
        self.events.emit_catalog_changed(op)
        self.events.emit_bills_changed(op)
        return MutationResult(bill=bill, warnings=found, history=entry)


__all__ = ["InventoryService", "MutationResult", "stock_deltas"]
