"""
Action history and catalog undo.

History is a newest-first list of human-readable entries. Undo keeps the
catalog as it was before the most recent stock mutation (one slot; a new
snapshot replaces the previous one).

Undo restores catalog quantities only. Bills written by the undone
operation stay as they are, so after an undo the cached quantities and the
bill history can disagree until the next mutation or an explicit resync.

The snapshot is the whole catalog, and undo writes it back as is. Catalog
edits made after the snapshot are lost: a product added since then
disappears, and a rename goes back to the old name while the bill lines
keep the new one.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ...constants import UNDO_DEPTH, UNDO_HISTORY_ACTION
from ...database.document_store import DocumentStore
from ...database.repositories.history_repo import HistoryEntry, HistoryRepo
from ...database.repositories.products_repo import Product, ProductsRepo
from ...utils.errors import ValidationError

_log = logging.getLogger(__name__)


class HistoryLog:
    """
    History entries plus the single undo slot. `undo()` replaces the whole
    catalog with the snapshot: bills are not reverted, and products added
    after the snapshot are dropped.
    """

    def __init__(self, store: DocumentStore, events=None):
        self.store = store
        self.repo = HistoryRepo(store)
        self.events = events

    # ---------------------------- History ----------------------------

    def add_history(self, action: str) -> HistoryEntry:
        if not action or not action.strip():
            raise ValidationError("History action cannot be empty.")
        return self.repo.prepend(action.strip())

    def entries(self) -> list[HistoryEntry]:
        return self.repo.list_entries()

    def search(self, term: str) -> list[HistoryEntry]:
        return self.repo.search(term)

    # ---------------------------- Undo ----------------------------

    def push_snapshot(self, products: Iterable[Product] | list[dict[str, Any]]) -> None:
        """Remember the catalog as it is right now, before it is changed."""
        rows = [p if isinstance(p, dict) else p.to_dict() for p in products]
        stack = [rows, *self.repo.load_undo_stack()]
        self.repo.save_undo_stack(stack[:UNDO_DEPTH])

    def can_undo(self) -> bool:
        return bool(self.repo.load_undo_stack())

    def peek(self) -> Optional[list[dict[str, Any]]]:
        stack = self.repo.load_undo_stack()
        return stack[0] if stack else None

    def undo(self) -> bool:
        """
        Restore the catalog from the newest snapshot and record it in history.
        Returns False when there is nothing to undo.
        """
        stack = self.repo.load_undo_stack()
        if not stack:
            _log.info("Undo requested with no snapshot available.")
            return False

        rows, rest = stack[0], stack[1:]
        with self.store.transaction():
            ProductsRepo(self.store).save_all(Product.from_dict(d) for d in rows)
            self.repo.save_undo_stack(rest)
            self.add_history(UNDO_HISTORY_ACTION)

        _log.info("Catalog restored from snapshot (%d product(s)).", len(rows))
        if self.events is not None:
            self.events.emit_catalog_changed("undo")
        return True


__all__ = ["HistoryLog"]
