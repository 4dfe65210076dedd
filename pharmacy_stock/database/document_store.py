"""
Key-value document store over a single sqlite table.

Each logical collection (products, purchaseBills, salesBills, history, the
bill number counters, ...) is one JSON document. Callers load a collection
wholesale, change it in memory and write it back; there are no partial
updates and no diffs.

Conventions:
- Values are anything json.dumps accepts.
- Outside transaction() every set()/delete() is its own committed write.
- Inside transaction() writes are held until the block exits cleanly and are
  rolled back if it raises.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator

from ..constants import TABLE_DOCUMENTS


class DocumentStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        self._depth = 0

    # ---------------------------- TX helper ----------------------------

    @contextmanager
    def transaction(self) -> Iterator["DocumentStore"]:
        """
        Start an IMMEDIATE transaction, commit on success, rollback on error.
        Nested calls join the outer transaction.
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self.conn.execute("BEGIN IMMEDIATE")
        self._depth = 1
        try:
            yield self
        except BaseException:
            self.conn.rollback()
            raise
        else:
            self.conn.commit()
        finally:
            self._depth = 0

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    # ---------------------------- Documents ----------------------------

    def get(self, key: str, default: Any = None) -> Any:
        row = self.conn.execute(
            f"SELECT value FROM {TABLE_DOCUMENTS} WHERE key=?", (key,)
        ).fetchone()
        if row is None:
            return default
        return json.loads(row["value"])

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        self.conn.execute(
            f"""
            INSERT INTO {TABLE_DOCUMENTS}(key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value,
                                           updated_at=excluded.updated_at
            """,
            (key, payload),
        )
        self._autocommit()

    def delete(self, key: str) -> None:
        self.conn.execute(f"DELETE FROM {TABLE_DOCUMENTS} WHERE key=?", (key,))
        self._autocommit()

    def keys(self) -> list[str]:
        rows = self.conn.execute(
            f"SELECT key FROM {TABLE_DOCUMENTS} ORDER BY key"
        ).fetchall()
        return [r["key"] for r in rows]

    def _autocommit(self) -> None:
        if self._depth == 0 and self.conn.in_transaction:
            self.conn.commit()
