# pharmacy_stock/database/__init__.py
from __future__ import annotations

from pathlib import Path
import sqlite3

from ..constants import TABLE_SCHEMA_VERSION, SCHEMA_VERSION
from . import schema as schema_module

MEMORY = ":memory:"


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id INTEGER PRIMARY KEY CHECK (id=1),
            version TEXT NOT NULL
        );
    """)
    row = conn.execute(
        f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;"
    ).fetchone()
    if row is None:
        conn.execute(
            f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?);",
            (SCHEMA_VERSION,),
        )


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode (file databases only)
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures the schema is applied idempotently.

    Pass ":memory:" for a throwaway store (tests).
    """
    if db_path is None:
        from ..config import DB_PATH
        db_path = DB_PATH

    in_memory = str(db_path) == MEMORY
    if not in_memory:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    # isolation_level=None: the store opens its own BEGIN IMMEDIATE transactions.
    conn = sqlite3.connect(str(db_path), isolation_level=None)
    conn.row_factory = sqlite3.Row
    if not in_memory:
        conn.execute("PRAGMA journal_mode = WAL;")

    schema_module.apply_schema(conn)
    _ensure_version_table(conn)
    return conn


__all__ = [
    "get_connection",
    "MEMORY",
]
