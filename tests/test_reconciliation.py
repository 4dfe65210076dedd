# tests/test_reconciliation.py
from pharmacy_stock.database.repositories.bills_repo import (
    PurchaseBill,
    PurchaseItem,
    SalesBill,
    SalesItem,
)
from pharmacy_stock.database.repositories.products_repo import Product
from pharmacy_stock.modules.stock.normalizer import LotKey
from pharmacy_stock.modules.stock.reconciliation import reconcile


def p_bill(number, *lines):
    return PurchaseBill(
        bill_number=number, date="01-05-2025", supplier_name="Medi",
        items=[PurchaseItem(product=p, batch=b, expiry=e, quantity=q, ptr=40, items_per_pack=10, mrp=50)
               for p, b, e, q in lines],
    )


def s_bill(number, *lines):
    return SalesBill(
        bill_number=number, date="02-05-2025", customer_name="Walk-in",
        items=[SalesItem(product=p, batch=b, expiry=e, quantity_sold=q) for p, b, e, q in lines],
    )


CATALOG = [
    Product(id="p1", name="ParaTab", items_per_pack=10, mrp=50),
    Product(id="p2", name="CoughSyr", mrp=90),
]


# ---------------------------------------
# R1 - purchases add, sales subtract
# ---------------------------------------
def test_r1_conservation_on_single_lot():
    purchases = [p_bill("1", ("ParaTab", "B1", "05-2025", 100)), p_bill("2", ("ParaTab", "B1", "05-2025", 40))]
    sales = [s_bill("1", ("ParaTab", "B1", "05-2025", 30)), s_bill("2", ("ParaTab", "B1", "05-2025", 25))]

    ledger = reconcile(CATALOG, purchases, sales)

    assert ledger.available("ParaTab", "B1", "05-2025") == 100 + 40 - 30 - 25
    assert ledger.total_for_product("paratab") == 85
    assert ledger.totals() == {"ParaTab": 85}


# ---------------------------------------
# R2 - replay is repeatable
# ---------------------------------------
def test_r2_reconcile_twice_gives_identical_lots():
    purchases = [p_bill("1", ("ParaTab", "B1", "05-2025", 100), ("CoughSyr", "S1", "01-2026", 12))]
    sales = [s_bill("1", ("ParaTab", "B1", "05-2025", 30))]

    first = reconcile(CATALOG, purchases, sales)
    second = reconcile(CATALOG, purchases, sales)

    assert {k: l.quantity for k, l in first.lots.items()} == {k: l.quantity for k, l in second.lots.items()}
    assert first.by_product.keys() == second.by_product.keys()


# ---------------------------------------
# R3 - case / whitespace / expiry spelling
# ---------------------------------------
def test_r3_spelling_variants_accumulate_into_one_lot():
    purchases = [
        p_bill("1", ("Paracetamol", "B1 ", "05-25", 10)),
        p_bill("2", (" paracetamol ", "b1", "05-25", 5)),
        p_bill("3", ("PARACETAMOL", "B1", "05-2025", 1)),
    ]
    catalog = [Product(id="x", name="Paracetamol")]

    ledger = reconcile(catalog, purchases, [])

    assert list(ledger.lots) == [LotKey("paracetamol", "b1", "05-2025")]
    lot = ledger.by_product["Paracetamol"][0]
    assert lot.quantity == 16
    # first occurrence decides the display strings
    assert (lot.batch, lot.expiry) == ("B1", "05-25")


# ---------------------------------------
# R4 - display view hides empty and negative lots
# ---------------------------------------
def test_r4_non_positive_lots_not_listed_but_kept_in_lots():
    purchases = [p_bill("1", ("ParaTab", "B1", "05-2025", 10), ("ParaTab", "B2", "06-2025", 10))]
    sales = [s_bill("1", ("ParaTab", "B1", "05-2025", 10), ("ParaTab", "B3", "07-2025", 4))]

    ledger = reconcile(CATALOG, purchases, sales)

    listed = ledger.by_product["ParaTab"]
    assert [l.batch for l in listed] == ["B2"]
    assert all(l.quantity > 0 for lots in ledger.by_product.values() for l in lots)
    assert ledger.lots[LotKey("paratab", "b1", "05-2025")].quantity == 0
    assert ledger.lots[LotKey("paratab", "b3", "07-2025")].quantity == -4
    assert ledger.available("ParaTab", "B3", "07-2025") == 0
    assert ledger.total_for_product("ParaTab") == 10


# ---------------------------------------
# R5 - lots sorted by expiry, unparsable last
# ---------------------------------------
def test_r5_lots_sorted_soonest_expiry_first():
    purchases = [p_bill(
        "1",
        ("ParaTab", "LATE", "12-2026", 1),
        ("ParaTab", "ODD", "someday", 1),
        ("ParaTab", "SOON", "01-2025", 1),
        ("ParaTab", "MID", "06-25", 1),
    )]

    ledger = reconcile(CATALOG, purchases, [])

    assert [l.batch for l in ledger.lots_for("paratab")] == ["SOON", "MID", "LATE", "ODD"]


# ---------------------------------------
# R6 - products outside the catalog, incomplete lines
# ---------------------------------------
def test_r6_unknown_products_omitted_from_view():
    purchases = [p_bill("1", ("Ghost", "G1", "05-2025", 9), ("ParaTab", "B1", "05-2025", 3))]

    ledger = reconcile(CATALOG, purchases, [])

    assert "Ghost" not in ledger.by_product
    assert ledger.lots[LotKey("ghost", "g1", "05-2025")].quantity == 9
    assert ledger.lots_for("Ghost") == []


def test_r6_lines_without_batch_are_skipped(caplog):
    purchases = [p_bill("1", ("ParaTab", "", "05-2025", 50), ("ParaTab", "B1", "05-2025", 3))]

    ledger = reconcile(CATALOG, purchases, [])

    assert ledger.skipped_lines == 1
    assert ledger.total_for_product("ParaTab") == 3
    assert "skipped 1 line" in caplog.text


def test_display_name_follows_catalog_spelling():
    purchases = [p_bill("1", ("paratab", "B1", "05-2025", 3))]
    ledger = reconcile(CATALOG, purchases, [])
    assert list(ledger.by_product) == ["ParaTab"]
    assert ledger.by_product["ParaTab"][0].product == "ParaTab"
