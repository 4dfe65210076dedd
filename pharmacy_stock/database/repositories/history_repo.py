# pharmacy_stock/database/repositories/history_repo.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ...constants import KEY_HISTORY, KEY_UNDO_STACK
from ...utils.helpers import fold, new_id, now_iso
from ..document_store import DocumentStore


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    action: str
    date: str   # ISO timestamp

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "HistoryEntry":
        return cls(id=str(d.get("id") or ""), action=str(d.get("action") or ""), date=str(d.get("date") or ""))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "action": self.action, "date": self.date}


class HistoryRepo:
    """Newest-first action log plus the raw undo stack document."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_entries(self) -> list[HistoryEntry]:
        return [HistoryEntry.from_dict(d) for d in self.store.get(KEY_HISTORY, [])]

    def prepend(self, action: str) -> HistoryEntry:
        entry = HistoryEntry(id=new_id(), action=action, date=now_iso())
        rows = self.store.get(KEY_HISTORY, [])
        self.store.set(KEY_HISTORY, [entry.to_dict(), *rows])
        return entry

    def search(self, term: str) -> list[HistoryEntry]:
        t = fold(term)
        return [e for e in self.list_entries() if t in fold(e.action)]

    # ---- undo stack (list of catalog snapshots, newest first) ----

    def load_undo_stack(self) -> list[list[dict[str, Any]]]:
        return list(self.store.get(KEY_UNDO_STACK, []))

    def save_undo_stack(self, stack: list[list[dict[str, Any]]]) -> None:
        self.store.set(KEY_UNDO_STACK, stack)
