import sqlite3

from ..constants import TABLE_DOCUMENTS

SQL = rf"""
/* ======================== DOCUMENT STORE ======================== */

/* One row per logical collection (products, purchaseBills, salesBills,
   history, counters, ...). The value is a JSON document. */
CREATE TABLE IF NOT EXISTS {TABLE_DOCUMENTS} (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Idempotent: only CREATE ... IF NOT EXISTS statements."""
    conn.executescript(SQL)

