# pharmacy_stock/database/repositories/products_repo.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable

from ...constants import KEY_PRODUCTS
from ...utils.errors import DuplicateKeyError, NotFoundError, ValidationError
from ...utils.helpers import fold, new_id
from ...utils.validators import (
    is_non_negative_number,
    is_percentage,
    is_positive_integer,
    non_empty,
    try_parse_float,
    try_parse_int,
)
from ..document_store import DocumentStore


@dataclass
class Product:
    """
    Catalog entry. `quantity` is a running total of individual items; it is
    written only by the bill mutation service and undo, never by catalog edits.
    """
    id: str
    name: str
    unit: str = ""
    category: str = ""
    company: str = ""
    items_per_pack: int = 1
    mrp: float = 0.0
    min_stock: int = 0
    max_stock: int = 0
    discount: float = 0.0
    tax_rate: float = 0.0
    quantity: int = 0

    def __post_init__(self) -> None:
        problems = _product_problems(self)
        if problems:
            raise ValidationError(problems)
        self.name = self.name.strip()

    @property
    def key(self) -> str:
        return fold(self.name)

    # ---- store mapping (camelCase documents) ----

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Product":
        """
        Build from a stored/duck-typed record. Defaulting rules live here and
        only here: missing numbers become 0, a missing pack size becomes 1.
        """
        def _num(key: str, default: float = 0.0) -> float:
            ok, v = try_parse_float(d.get(key))
            return v if ok else default

        def _int(key: str, default: int = 0) -> int:
            ok, v = try_parse_int(d.get(key))
            return v if ok else default

        return cls(
            id=str(d.get("id") or new_id()),
            name=str(d.get("name") or ""),
            unit=str(d.get("unit") or ""),
            category=str(d.get("category") or ""),
            company=str(d.get("company") or ""),
            items_per_pack=_int("itemsPerPack", 1) or 1,
            mrp=_num("mrp"),
            min_stock=_int("minStock"),
            max_stock=_int("maxStock"),
            discount=_num("discount"),
            tax_rate=_num("taxRate"),
            quantity=max(0, _int("quantity")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "category": self.category,
            "company": self.company,
            "itemsPerPack": self.items_per_pack,
            "mrp": self.mrp,
            "minStock": self.min_stock,
            "maxStock": self.max_stock,
            "discount": self.discount,
            "taxRate": self.tax_rate,
            "quantity": self.quantity,
        }


def _product_problems(p: Product) -> list[str]:
    problems: list[str] = []
    if not isinstance(p.name, str) or not non_empty(p.name):
        problems.append("Product name cannot be empty.")
    if not is_positive_integer(p.items_per_pack):
        problems.append("Items per pack must be a whole number of at least 1.")
    if not is_non_negative_number(p.mrp):
        problems.append("MRP must be a number greater than or equal to 0.")
    ok_min, min_v = try_parse_int(p.min_stock)
    ok_max, max_v = try_parse_int(p.max_stock)
    if not ok_min or min_v < 0:
        problems.append("Minimum stock must be a whole number greater than or equal to 0.")
    if not ok_max or max_v < 0:
        problems.append("Maximum stock must be a whole number greater than or equal to 0.")
    if ok_min and ok_max and max_v > 0 and min_v > max_v:
        problems.append("Minimum stock cannot be greater than maximum stock.")
    if not is_percentage(p.discount):
        problems.append("Discount must be between 0 and 100.")
    if not is_percentage(p.tax_rate):
        problems.append("Tax rate must be between 0 and 100.")
    ok_q, q = try_parse_int(p.quantity)
    if not ok_q or q < 0:
        problems.append("Quantity must be a whole number greater than or equal to 0.")
    return problems


# Fields a catalog edit may change; quantity is deliberately absent.
_EDITABLE = (
    "name", "unit", "category", "company", "items_per_pack", "mrp",
    "min_stock", "max_stock", "discount", "tax_rate",
)


class ProductsRepo:
    def __init__(self, store: DocumentStore):
        self.store = store

    # ---------------------------- Queries ----------------------------

    def list_products(self) -> list[Product]:
        return [Product.from_dict(d) for d in self.store.get(KEY_PRODUCTS, [])]

    def get(self, product_id: str) -> Product | None:
        for p in self.list_products():
            if p.id == product_id:
                return p
        return None

    def find_by_name(self, name: str) -> Product | None:
        """Case-insensitive, whitespace-trimmed lookup."""
        k = fold(name)
        if not k:
            return None
        for p in self.list_products():
            if p.key == k:
                return p
        return None

    def search(self, term: str) -> list[Product]:
        """Substring match over name/category/company, case-insensitive."""
        t = fold(term)
        rows = self.list_products()
        if not t:
            return rows
        return [
            p for p in rows
            if t in fold(p.name) or t in fold(p.category) or t in fold(p.company)
        ]

    # ---------------------------- Mutations ----------------------------

    def create(self, name: str, **fields: Any) -> Product:
        """
        Insert a new product. `quantity` is always 0: stock only arrives
        through purchase bills.
        """
        fields.pop("quantity", None)
        product = Product(id=fields.pop("id", None) or new_id(), name=name, **fields)
        products = self.list_products()
        self._ensure_unique_name(products, product.name)
        products.append(product)
        self.save_all(products)
        return product

    def update(self, product_id: str, **changes: Any) -> Product:
        """
        Edit catalog fields. Any `quantity` passed in is ignored so catalog
        edits never move stock.
        """
        products = self.list_products()
        for i, current in enumerate(products):
            if current.id == product_id:
                allowed = {k: v for k, v in changes.items() if k in _EDITABLE}
                updated = replace(current, **allowed)
                if updated.key != current.key:
                    self._ensure_unique_name(products, updated.name, skip_id=product_id)
                products[i] = updated
                self.save_all(products)
                return updated
        raise NotFoundError(f"Product {product_id!r} not found.")

    def delete(self, product_id: str) -> None:
        """
        Remove from the catalog. Bill history keeps referring to the name; such
        lines simply stop showing in the stock view.
        """
        products = self.list_products()
        kept = [p for p in products if p.id != product_id]
        if len(kept) == len(products):
            raise NotFoundError(f"Product {product_id!r} not found.")
        self.save_all(kept)

    def save_all(self, products: Iterable[Product]) -> None:
        self.store.set(KEY_PRODUCTS, [p.to_dict() for p in products])

    # ---------------------------- Helpers ----------------------------

    @staticmethod
    def _ensure_unique_name(products: list[Product], name: str, skip_id: str | None = None) -> None:
        k = fold(name)
        for p in products:
            if p.key == k and p.id != skip_id:
                raise DuplicateKeyError(f'A product named "{p.name}" already exists.')


def snapshot(products: Iterable[Product]) -> list[dict[str, Any]]:
    """Plain-dict copy of a catalog, suitable for the undo slot."""
    return [p.to_dict() for p in products]


__all__ = ["Product", "ProductsRepo", "snapshot"]
