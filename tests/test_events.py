# tests/test_events.py
import pytest

from conftest import purchase, sale
from pharmacy_stock.utils.errors import ValidationError

LOT = ("ParaTab", "B1", "05-2025")


def test_create_emits_both_signals(qtbot, service, ids):
    with qtbot.waitSignal(service.events.catalog_changed, timeout=1000) as cat, \
         qtbot.waitSignal(service.events.bills_changed, timeout=1000) as bills:
        service.create_purchase_bill(purchase("P1", (*LOT, 10)))

    assert cat.args == ["create_purchase_bill"]
    assert bills.args == ["create_purchase_bill"]


def test_subscribers_see_committed_state(qtbot, service, ids):
    service.create_purchase_bill(purchase("P1", (*LOT, 10)))
    seen = []

    def reload(reason):
        # receivers reload everything from the store
        seen.append((reason, service.products.get(ids["paratab"]).quantity))

    service.events.on_catalog_changed(reload)
    service.create_sales_bill(sale("S1", (*LOT, 4)))

    assert seen == [("create_sales_bill", 6)]


def test_rejected_mutation_emits_nothing(qtbot, service, ids):
    with qtbot.assertNotEmitted(service.events.bills_changed):
        with pytest.raises(ValidationError):
            service.create_sales_bill(sale("S1", (*LOT, 4)))


def test_undo_emits_catalog_changed(qtbot, service, ids):
    service.create_purchase_bill(purchase("P1", (*LOT, 10)))
    with qtbot.waitSignal(service.events.catalog_changed, timeout=1000) as blocker:
        service.undo()
    assert blocker.args == ["undo"]


def test_catalog_edits_emit_catalog_changed(qtbot, service, ids):
    got = []
    service.events.on_catalog_changed(got.append)
    service.events.on_bills_changed(lambda reason: got.append("bills:" + reason))

    p = service.add_product("Zinc", mrp=30)
    service.update_product(p.id, mrp=35)
    service.delete_product(p.id)

    assert got == ["product_added", "product_updated", "product_deleted"]


def test_rename_with_bill_lines_also_emits_bills_changed(qtbot, service, ids):
    service.create_purchase_bill(purchase("P1", (*LOT, 10)))

    with qtbot.waitSignal(service.events.bills_changed, timeout=1000) as blocker:
        service.update_product(ids["paratab"], name="Paracetamol 500")

    assert blocker.args == ["product_renamed"]
