# tests/test_costing.py
import pytest

from pharmacy_stock.modules.billing.costing import (
    INVALID,
    compute_profit_and_margin,
    price_per_item,
    sales_line_amount,
    simple_margin,
)


def close(a, b):
    return a is not None and abs(a - b) < 1e-9


# ---------------------------------------
# C1 - worked example: 20 items of a 10-pack, PTR 80, MRP 100, 10% off
# ---------------------------------------
def test_c1_profit_and_margin_example():
    r = compute_profit_and_margin(20, 80, 10, 100, 10)
    assert r.is_valid
    assert close(r.total_item_amount, 144.0)
    assert close(r.total_profit, 56.0)
    assert close(r.profit_per_pack, 28.0)
    assert close(r.margin_pct, 28.0)


def test_c2_fractional_packs_and_string_inputs():
    r = compute_profit_and_margin("15", "80", "10", "100", "0")
    # 1.5 packs: paid 120, revenue 150
    assert close(r.total_item_amount, 120.0)
    assert close(r.total_profit, 30.0)
    assert close(r.profit_per_pack, 20.0)
    assert close(r.margin_pct, 20.0)


def test_c3_loss_gives_negative_margin():
    r = compute_profit_and_margin(10, 120, 10, 100, 0)
    assert close(r.total_profit, -20.0)
    assert close(r.margin_pct, -20.0)


@pytest.mark.parametrize("args", [
    (0, 80, 10, 100, 10),
    (-5, 80, 10, 100, 10),
    (20, -1, 10, 100, 10),
    (20, 80, 0, 100, 10),
    (20, 80, 10, 0, 10),
    (20, 80, 10, 100, -1),
    ("abc", 80, 10, 100, 10),
    (20, None, 10, 100, 10),
    (20, 80, 10, float("nan"), 10),
])
def test_c4_invalid_inputs_give_all_none(args):
    r = compute_profit_and_margin(*args)
    assert r == INVALID
    assert not r.is_valid
    assert (r.profit_per_pack, r.total_profit, r.margin_pct, r.total_item_amount) == (None, None, None, None)


def test_c5_zero_ptr_is_allowed():
    r = compute_profit_and_margin(10, 0, 10, 100, 0)
    assert close(r.total_item_amount, 0.0)
    assert close(r.margin_pct, 100.0)


# ---------------------------------------
# Sales pricing
# ---------------------------------------
def test_price_per_item():
    assert close(price_per_item(50, 10), 5.0)
    assert close(price_per_item(90, 0), 90.0)
    assert price_per_item("x", 10) == 0.0


def test_sales_line_amount():
    assert close(sales_line_amount(30, 5.0, 0), 150.0)
    assert close(sales_line_amount(30, 5.0, 10), 135.0)
    assert close(sales_line_amount(3, 5.0, None), 15.0)
    assert sales_line_amount(3, 5.0, 101) == 0.0
    assert sales_line_amount(-1, 5.0, 0) == 0.0


def test_simple_margin():
    profit, margin = simple_margin(80, 100)
    assert close(profit, 20.0) and close(margin, 20.0)
    assert simple_margin(80, 0) == (None, None)
