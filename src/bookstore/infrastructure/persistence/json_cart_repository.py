"""JSON-file-backed implementation of CartRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from bookstore.domain.model.cart import Cart, CartLine
from bookstore.domain.model.value_objects import Money, Quantity
from bookstore.domain.repository.cart_repository import CartRepository
from bookstore.infrastructure.persistence.file_lock import ensure_json_list, file_lock, write_atomic


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        ensure_json_list(file_path)

    # --- CartRepository interface ---------------------------------------------

    def get_by_user(self, user_id: str) -> Cart | None:
        for raw in self._load_raw():
            if raw["user_id"] == user_id:
                return self._to_domain(raw)
        return None

    def save(self, cart: Cart) -> None:
        with file_lock(self._file_path):
            records = self._load_raw()
            replaced = False
            for i, raw in enumerate(records):
                if raw["user_id"] == cart.user_id:
                    records[i] = self._to_raw(cart)
                    replaced = True
                    break
            if not replaced:
                records.append(self._to_raw(cart))
            self._persist_raw(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(cart: Cart) -> dict:
        return {
            "user_id": cart.user_id,
            "updated_at": cart.updated_at.isoformat(),
            # total is derived; stored for readers of the raw file only
            "total": str(cart.total.amount),
            "items": [
                {
                    "book_id": line.book_id,
                    "title": line.title,
                    "author": line.author,
                    "quantity": line.quantity.value,
                    "price": str(line.price.amount),
                    "currency": line.price.currency,
                }
                for line in cart.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Cart:
        return Cart(
            user_id=raw["user_id"],
            items=[
                CartLine(
                    book_id=i["book_id"],
                    title=i["title"],
                    author=i["author"],
                    quantity=Quantity(i["quantity"]),
                    price=Money(Decimal(i["price"]), i.get("currency", "NPR")),
                )
                for i in raw["items"]
            ],
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, records: list[dict]) -> None:
        write_atomic(self._file_path, json.dumps(records, indent=2) + "\n")
