"""
Change notifications for viewers of the catalog and bill collections.

Signals carry a short reason string ("sales_bill_created", "undo", ...).
Receivers must treat every emission as "reload everything"; no diff is sent.
"""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal


class InventoryEvents(QObject):
    catalog_changed = Signal(str)
    bills_changed = Signal(str)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)

    # ---- subscription helpers ----

    def on_catalog_changed(self, callback: Callable[[str], None]) -> None:
        self.catalog_changed.connect(callback)

    def on_bills_changed(self, callback: Callable[[str], None]) -> None:
        self.bills_changed.connect(callback)

    # ---- emitters (called by the service after a commit) ----

    def emit_catalog_changed(self, reason: str) -> None:
        self.catalog_changed.emit(reason)

    def emit_bills_changed(self, reason: str) -> None:
        self.bills_changed.emit(reason)
