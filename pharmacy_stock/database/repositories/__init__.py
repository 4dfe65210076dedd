# pharmacy_stock/database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from pharmacy_stock.database.repositories import (
        # Catalog
        ProductsRepo, Product,
        # Bills
        BillsRepo, PurchaseBill, PurchaseItem, SalesBill, SalesItem,
        # History
        HistoryRepo, HistoryEntry,
        # Contacts
        CustomersRepo, Customer, SuppliersRepo, Supplier,
    )
"""

# ---------------- Catalog -----------------
from .products_repo import ProductsRepo, Product

# ----------------- Bills ------------------
from .bills_repo import (
    BillsRepo,
    Bill,
    PurchaseBill,
    PurchaseItem,
    SalesBill,
    SalesItem,
)

# ---------------- History -----------------
from .history_repo import HistoryRepo, HistoryEntry

# ---------------- Contacts ----------------
from .customers_repo import CustomersRepo, Customer
from .suppliers_repo import SuppliersRepo, Supplier

__all__ = [
    # products_repo
    "ProductsRepo",
    "Product",
    # bills_repo
    "BillsRepo",
    "Bill",
    "PurchaseBill",
    "PurchaseItem",
    "SalesBill",
    "SalesItem",
    # history_repo
    "HistoryRepo",
    "HistoryEntry",
    # contacts
    "CustomersRepo",
    "Customer",
    "SuppliersRepo",
    "Supplier",
]
