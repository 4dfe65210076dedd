"""
Batch-level stock reconciliation and bill bookkeeping for a pharmacy store.

Usage:
    from pharmacy_stock import open_service

    service = open_service()            # data/pharmacy.db next to the package
    service.create_purchase_bill({...})
    ledger = service.reconcile()
"""

from __future__ import annotations

from pathlib import Path

__version__ = "0.3.0"


def open_service(db_path: Path | str | None = None, **kwargs):
    """Open the default store and return an InventoryService bound to it."""
    from .database import get_connection
    from .database.document_store import DocumentStore
    from .modules.billing.service import InventoryService
    from .utils.loggers import get_logger

    get_logger()
    conn = get_connection(db_path)
    return InventoryService(DocumentStore(conn), **kwargs)


__all__ = ["open_service", "__version__"]
