# pharmacy_stock/utils/validators.py
import math


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed (or the value is NaN/inf) and value is None.
    Booleans are rejected even though Python treats them as ints.
    """
    if isinstance(x, bool) or x is None:
        return False, None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return False, None
    if math.isnan(v) or math.isinf(v):
        return False, None
    return True, v


def try_parse_int(x):
    """
    Parse to int only when the value is integral ("10", 10, 10.0).
    Returns (ok, value|None).
    """
    ok, val = try_parse_float(x)
    if not ok or val is None or not float(val).is_integer():
        return False, None
    return True, int(val)


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)


def is_positive_integer(x) -> bool:
    ok, val = try_parse_int(x)
    return bool(ok and val is not None and val > 0)


def is_percentage(x) -> bool:
    """True iff x parses to a number within 0..100 inclusive."""
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and 0 <= val <= 100)
