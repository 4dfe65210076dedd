# pharmacy_stock/tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets its own in-memory store; nothing touches data/
# - The audit logger is a plain in-process logger, not the audit file
# - Provide a seeded catalog (ParaTab, CoughSyr) + bill builders
# ---------------------------------------------------------------------

from __future__ import annotations

import logging

import pytest

from pharmacy_stock.database import MEMORY, get_connection
from pharmacy_stock.database.document_store import DocumentStore
from pharmacy_stock.modules.billing.events import InventoryEvents
from pharmacy_stock.modules.billing.service import InventoryService


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):
    return qapp


# ---------- Store ----------
@pytest.fixture()
def store():
    con = get_connection(MEMORY)
    try:
        yield DocumentStore(con)
    finally:
        con.close()


@pytest.fixture()
def audit_logger():
    logger = logging.getLogger("pharmacy_stock.audit.tests")
    logger.propagate = False
    return logger


@pytest.fixture()
def events(app):
    return InventoryEvents()


@pytest.fixture()
def service(store, events, audit_logger):
    return InventoryService(store, events=events, audit_logger=audit_logger)


# ---------- Catalog ----------
@pytest.fixture()
def ids(service) -> dict:
    """Seed two products and return their ids."""
    para = service.products.create("ParaTab", items_per_pack=10, mrp=50, category="Tablet", company="Acme")
    syrup = service.products.create("CoughSyr", items_per_pack=1, mrp=90, min_stock=5, category="Syrup")
    return {"paratab": para.id, "coughsyr": syrup.id}


def qty(service, product_id: str) -> int:
    return service.products.get(product_id).quantity


# ---------- Bill builders ----------
def purchase(number: str, *lines, supplier: str = "Medi Distributors", date: str = "01-05-2025") -> dict:
    """lines: (product, batch, expiry, quantity[, ptr])"""
    return {
        "billNumber": number,
        "date": date,
        "supplierName": supplier,
        "items": [
            {
                "product": ln[0],
                "batch": ln[1],
                "expiry": ln[2],
                "quantity": ln[3],
                "ptr": ln[4] if len(ln) > 4 else 40,
            }
            for ln in lines
        ],
    }


def sale(number: str, *lines, customer: str = "Walk-in", date: str = "02-05-2025") -> dict:
    """lines: (product, batch, expiry, quantitySold[, discount])"""
    return {
        "billNumber": number,
        "date": date,
        "customerName": customer,
        "items": [
            {
                "product": ln[0],
                "batch": ln[1],
                "expiry": ln[2],
                "quantitySold": ln[3],
                "discount": ln[4] if len(ln) > 4 else 0,
            }
            for ln in lines
        ],
    }
