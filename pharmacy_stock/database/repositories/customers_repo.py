from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ...constants import KEY_CUSTOMERS
from ...utils.errors import DuplicateKeyError, NotFoundError, ValidationError
from ...utils.helpers import fold, new_id
from ..document_store import DocumentStore


@dataclass
class Customer:
    id: str
    name: str
    phone: str = ""
    email: str = ""
    address: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any] | str) -> "Customer":
        # Older stores kept customers as a bare list of names.
        if isinstance(d, str):
            return cls(id=new_id(), name=d.strip())
        return cls(
            id=str(d.get("id") or new_id()),
            name=str(d.get("name") or "").strip(),
            phone=str(d.get("phone") or ""),
            email=str(d.get("email") or ""),
            address=str(d.get("address") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "phone": self.phone,
                "email": self.email, "address": self.address}


class CustomersRepo:
    def __init__(self, store: DocumentStore):
        self.store = store

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _normalize_text(s: str | None) -> str:
        if s is None:
            return ""
        return s.strip()

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or value.strip() == "":
            raise ValidationError(f"{field_label} cannot be empty.")

    def _save(self, rows: list[Customer]) -> None:
        self.store.set(KEY_CUSTOMERS, [c.to_dict() for c in rows])

    # ---- Queries ----------------------------------------------------------

    def list_customers(self) -> list[Customer]:
        return [Customer.from_dict(d) for d in self.store.get(KEY_CUSTOMERS, [])]

    def get(self, customer_id: str) -> Customer | None:
        return next((c for c in self.list_customers() if c.id == customer_id), None)

    def find_by_name(self, name: str) -> Customer | None:
        k = fold(name)
        return next((c for c in self.list_customers() if fold(c.name) == k), None)

    def search(self, term: str) -> list[Customer]:
        t = fold(term)
        return [
            c for c in self.list_customers()
            if t in fold(c.name) or t in fold(c.phone) or t in fold(c.email) or t in fold(c.address)
        ]

    # ---- Mutations --------------------------------------------------------

    def create(self, name: str, phone: str = "", email: str = "", address: str = "") -> Customer:
        self._ensure_non_empty(name, "Name")
        rows = self.list_customers()
        if any(fold(c.name) == fold(name) for c in rows):
            raise DuplicateKeyError(f'Customer "{name.strip()}" already exists.')
        customer = Customer(
            id=new_id(),
            name=self._normalize_text(name),
            phone=self._normalize_text(phone),
            email=self._normalize_text(email),
            address=self._normalize_text(address),
        )
        rows.append(customer)
        self._save(rows)
        return customer

    def ensure(self, name: str) -> Customer | None:
        """Add a bare customer record for a name seen on a sales bill, if new."""
        if not name or not name.strip():
            return None
        existing = self.find_by_name(name)
        return existing if existing is not None else self.create(name)

    def update(self, customer_id: str, name: str, phone: str = "", email: str = "", address: str = "") -> None:
        self._ensure_non_empty(name, "Name")
        rows = self.list_customers()
        for i, c in enumerate(rows):
            if c.id == customer_id:
                rows[i] = Customer(
                    id=c.id,
                    name=self._normalize_text(name),
                    phone=self._normalize_text(phone),
                    email=self._normalize_text(email),
                    address=self._normalize_text(address),
                )
                self._save(rows)
                return
        raise NotFoundError(f"Customer {customer_id!r} not found.")

    def delete(self, customer_id: str) -> None:
        rows = self.list_customers()
        kept = [c for c in rows if c.id != customer_id]
        if len(kept) == len(rows):
            raise NotFoundError(f"Customer {customer_id!r} not found.")
        self._save(kept)
