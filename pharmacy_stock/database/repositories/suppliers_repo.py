from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ...constants import KEY_SUPPLIERS
from ...utils.errors import NotFoundError, ValidationError
from ...utils.helpers import fold, new_id
from ..document_store import DocumentStore


@dataclass
class Supplier:
    id: str
    name: str
    phone: str = ""
    email: str = ""
    address: str = ""
    gstin: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Supplier":
        return cls(
            id=str(d.get("id") or new_id()),
            name=str(d.get("name") or "").strip(),
            phone=str(d.get("phone") or ""),
            email=str(d.get("email") or ""),
            address=str(d.get("address") or ""),
            gstin=str(d.get("gstin") or "").strip().upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "phone": self.phone,
                "email": self.email, "address": self.address, "gstin": self.gstin}


class SuppliersRepo:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list_suppliers(self) -> list[Supplier]:
        return [Supplier.from_dict(d) for d in self.store.get(KEY_SUPPLIERS, [])]

    def get(self, supplier_id: str) -> Supplier | None:
        return next((s for s in self.list_suppliers() if s.id == supplier_id), None)

    def search(self, term: str) -> list[Supplier]:
        t = fold(term)
        return [s for s in self.list_suppliers() if t in fold(s.name) or t in fold(s.gstin)]

    def create(self, name: str, phone: str = "", email: str = "", address: str = "", gstin: str = "") -> Supplier:
        if not name or not name.strip():
            raise ValidationError("Name cannot be empty.")
        supplier = Supplier(id=new_id(), name=name.strip(), phone=phone.strip(),
                            email=email.strip(), address=address.strip(), gstin=gstin.strip().upper())
        rows = self.list_suppliers()
        rows.append(supplier)
        self.store.set(KEY_SUPPLIERS, [s.to_dict() for s in rows])
        return supplier

    def update(self, supplier_id: str, **changes: Any) -> Supplier:
        rows = self.list_suppliers()
        for i, s in enumerate(rows):
            if s.id == supplier_id:
                data = s.to_dict()
                data.update({k: v for k, v in changes.items() if k in data and k != "id"})
                updated = Supplier.from_dict(data)
                if not updated.name:
                    raise ValidationError("Name cannot be empty.")
                rows[i] = updated
                self.store.set(KEY_SUPPLIERS, [r.to_dict() for r in rows])
                return updated
        raise NotFoundError(f"Supplier {supplier_id!r} not found.")

    # def delete(self, supplier_id: str):
    #     suppliers stay referenced by purchase bills; no hard delete
