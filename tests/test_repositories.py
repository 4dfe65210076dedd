# tests/test_repositories.py
import pytest

from pharmacy_stock.constants import BILL_PURCHASE, BILL_SALES, KEY_PRODUCTS
from pharmacy_stock.database.repositories import (
    BillsRepo,
    CustomersRepo,
    Product,
    ProductsRepo,
    SalesBill,
    SalesItem,
    SuppliersRepo,
)
from pharmacy_stock.utils.errors import DuplicateKeyError, NotFoundError, ValidationError


# ---------------------------------------
# Document store
# ---------------------------------------
def test_store_roundtrip_and_rollback(store):
    store.set("k", {"a": [1, 2]})
    assert store.get("k") == {"a": [1, 2]}
    assert store.get("missing", "dflt") == "dflt"

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.set("k", "changed")
            with store.transaction():
                store.set("other", 1)
            raise RuntimeError("boom")

    assert store.get("k") == {"a": [1, 2]}
    assert "other" not in store.keys()
    assert not store.in_transaction


# ---------------------------------------
# Products
# ---------------------------------------
def test_product_defaults_from_sparse_record():
    p = Product.from_dict({"name": " ParaTab ", "mrp": "50", "itemsPerPack": None, "quantity": -3})
    assert p.name == "ParaTab"
    assert p.items_per_pack == 1
    assert p.mrp == 50.0
    assert p.quantity == 0
    assert p.id


@pytest.mark.parametrize("fields", [
    {"name": ""},
    {"name": "X", "items_per_pack": 0},
    {"name": "X", "mrp": -1},
    {"name": "X", "discount": 120},
    {"name": "X", "min_stock": 10, "max_stock": 5},
])
def test_product_validation(fields):
    with pytest.raises(ValidationError):
        Product(id="x", **fields)


def test_create_forces_zero_quantity_and_unique_name(store):
    repo = ProductsRepo(store)
    p = repo.create("ParaTab", mrp=50, quantity=999)
    assert p.quantity == 0

    with pytest.raises(DuplicateKeyError):
        repo.create("  paratab ")


def test_update_never_touches_quantity(store):
    repo = ProductsRepo(store)
    p = repo.create("ParaTab", mrp=50)
    rows = store.get(KEY_PRODUCTS)
    rows[0]["quantity"] = 40
    store.set(KEY_PRODUCTS, rows)

    updated = repo.update(p.id, mrp=60, quantity=0, name="ParaTab 500")

    assert updated.quantity == 40
    assert updated.mrp == 60
    assert repo.find_by_name("paratab 500").id == p.id


def test_rename_onto_existing_name_rejected(store):
    repo = ProductsRepo(store)
    a = repo.create("ParaTab")
    repo.create("CoughSyr")
    with pytest.raises(DuplicateKeyError):
        repo.update(a.id, name="coughsyr")


def test_product_search_and_delete(store):
    repo = ProductsRepo(store)
    a = repo.create("ParaTab", company="Acme")
    repo.create("CoughSyr", category="Syrup")

    assert [p.name for p in repo.search("acme")] == ["ParaTab"]
    assert [p.name for p in repo.search("SYR")] == ["CoughSyr"]

    repo.delete(a.id)
    assert repo.get(a.id) is None
    with pytest.raises(NotFoundError):
        repo.delete(a.id)


# ---------------------------------------
# Bills
# ---------------------------------------
def _bill(number, customer="Walk-in", date="01-05-2025"):
    return SalesBill(bill_number=number, date=date, customer_name=customer,
                     items=[SalesItem(product="ParaTab", batch="B1", expiry="05-2025", quantity_sold=1)])


def test_bills_insert_get_replace_remove(store):
    repo = BillsRepo(store)
    repo.insert(_bill("10"))
    repo.insert(_bill("11", customer="Ravi"))

    assert repo.get(BILL_SALES, " 10 ").bill_number == "10"
    assert repo.get(BILL_PURCHASE, "10") is None

    original_id = repo.get(BILL_SALES, "11").id
    repo.replace(_bill("11", customer="Ravi K"))
    assert [b.bill_number for b in repo.list_sales_bills()] == ["10", "11"]
    assert repo.get(BILL_SALES, "11").id == original_id
    assert repo.get(BILL_SALES, "11").customer_name == "Ravi K"

    removed = repo.remove(BILL_SALES, "10")
    assert removed.bill_number == "10"
    with pytest.raises(NotFoundError):
        repo.remove(BILL_SALES, "10")


def test_bill_search(store):
    repo = BillsRepo(store)
    repo.insert(_bill("10", customer="Ravi"))
    repo.insert(_bill("11", customer="Meena", date="02-05-2025"))

    assert [b.bill_number for b in repo.search(BILL_SALES, "meena")] == ["11"]
    assert [b.bill_number for b in repo.search(BILL_SALES, date="01-05-2025")] == ["10"]


def test_rename_product_rewrites_matching_lines(store):
    repo = BillsRepo(store)
    repo.insert(_bill("10"))
    repo.insert(_bill("11"))

    assert repo.rename_product(" PARATAB ", "Paracetamol 500") == 2
    assert [b.items[0].product for b in repo.list_sales_bills()] == ["Paracetamol 500"] * 2
    assert repo.rename_product("ParaTab", "Other") == 0


def test_unknown_bill_kind(store):
    with pytest.raises(ValueError):
        BillsRepo(store).list_bills("returns")


def test_counter_never_moves_backwards(store):
    repo = BillsRepo(store)
    repo.advance_counter(BILL_SALES, "20")
    repo.advance_counter(BILL_SALES, "5")
    assert repo.next_bill_number(BILL_SALES) == "21"


def test_bill_record_roundtrip_keeps_camel_case_keys():
    d = _bill("10").to_dict()
    assert set(d) == {"id", "billNumber", "date", "customerName", "items", "totalAmount"}
    assert d["items"][0]["quantitySold"] == 1
    assert SalesBill.from_dict(d).to_dict() == d


# ---------------------------------------
# Customers & suppliers
# ---------------------------------------
def test_customers_crud(store):
    repo = CustomersRepo(store)
    c = repo.create("Ravi", phone="123")
    with pytest.raises(DuplicateKeyError):
        repo.create(" ravi ")
    assert repo.ensure("RAVI").id == c.id
    assert repo.ensure("  ") is None

    repo.update(c.id, "Ravi Kumar", phone="456")
    assert repo.search("456")[0].name == "Ravi Kumar"
    with pytest.raises(ValidationError):
        repo.update(c.id, "")


def test_customers_accept_legacy_name_list(store):
    store.set("customers", ["Ravi", "Meena"])
    assert [c.name for c in CustomersRepo(store).list_customers()] == ["Ravi", "Meena"]


def test_suppliers_carry_gstin(store):
    repo = SuppliersRepo(store)
    s = repo.create("Medi Distributors", gstin=" 27abcde1234f1z5 ")
    assert s.gstin == "27ABCDE1234F1Z5"
    assert repo.search("27abcde")[0].id == s.id

    updated = repo.update(s.id, phone="999")
    assert updated.phone == "999"
    with pytest.raises(ValidationError):
        repo.update(s.id, name="  ")
    with pytest.raises(NotFoundError):
        repo.update("missing", phone="1")
