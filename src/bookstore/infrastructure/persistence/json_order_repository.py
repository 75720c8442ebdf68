"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from bookstore.domain.model.order import (
    Order,
    OrderCosts,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from bookstore.domain.model.value_objects import Money, Quantity, ShippingAddress
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.infrastructure.persistence.file_lock import ensure_json_list, file_lock, write_atomic


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        ensure_json_list(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._load_raw()
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_order_number(self, order_number: str) -> Order | None:
        for raw in self._load_raw():
            if raw["order_number"] == order_number:
                return self._to_domain(raw)
        return None

    def list_for_user(
        self,
        user_id: str,
        status: OrderStatus | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Order]:
        orders = [
            self._to_domain(raw)
            for raw in self._load_raw()
            if raw["user_id"] == user_id
            and (status is None or raw["status"] == status.value)
        ]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        end = None if limit is None else offset + limit
        return orders[offset:end]

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        orders = [
            self._to_domain(raw)
            for raw in self._load_raw()
            if raw["status"] == status.value
        ]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders

    def count_for_user(self, user_id: str, status: OrderStatus | None = None) -> int:
        return sum(
            1
            for raw in self._load_raw()
            if raw["user_id"] == user_id
            and (status is None or raw["status"] == status.value)
        )

    def save(self, order: Order) -> None:
        with file_lock(self._file_path):
            orders = self._load_raw()

            if order.id is None:
                order.id = self.next_id()

            # Upsert: replace if exists, otherwise append
            replaced = False
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._to_raw(order)
                    replaced = True
                    break
            if not replaced:
                orders.append(self._to_raw(order))

            self._persist_raw(orders)

    def delete(self, order_id: int) -> None:
        with file_lock(self._file_path):
            orders = [raw for raw in self._load_raw() if raw["id"] != order_id]
            self._persist_raw(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "payment_method": order.payment_method.value,
            "payment_reference": order.payment_reference,
            "stock_debited": order.stock_debited,
            "notes": order.notes,
            "shipping_address": order.shipping_address.to_dict(),
            "costs": {
                "subtotal": str(order.costs.subtotal.amount),
                "tax": str(order.costs.tax.amount),
                "shipping_cost": str(order.costs.shipping_cost.amount),
                "total": str(order.costs.total.amount),
                "currency": order.costs.total.currency,
            },
            "created_at": order.created_at.isoformat(),
            "cancelled_at": order.cancelled_at.isoformat() if order.cancelled_at else None,
            "delivered_at": order.delivered_at.isoformat() if order.delivered_at else None,
            "items": [
                {
                    "book_id": item.book_id,
                    "title": item.title,
                    "author": item.author,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "subtotal": str(item.subtotal.amount),
                    "currency": item.unit_price.currency,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = tuple(
            OrderLineItem(
                book_id=i["book_id"],
                title=i["title"],
                author=i["author"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", "NPR")),
            )
            for i in raw["items"]
        )
        costs_raw = raw["costs"]
        currency = costs_raw.get("currency", "NPR")
        costs = OrderCosts(
            subtotal=Money(Decimal(costs_raw["subtotal"]), currency),
            tax=Money(Decimal(costs_raw["tax"]), currency),
            shipping_cost=Money(Decimal(costs_raw["shipping_cost"]), currency),
            total=Money(Decimal(costs_raw["total"]), currency),
        )
        return Order(
            id=raw["id"],
            user_id=raw["user_id"],
            order_number=raw["order_number"],
            items=items,
            shipping_address=ShippingAddress.from_dict(raw["shipping_address"]),
            payment_method=PaymentMethod(raw["payment_method"]),
            costs=costs,
            status=OrderStatus(raw["status"]),
            payment_status=PaymentStatus(raw["payment_status"]),
            notes=raw.get("notes"),
            payment_reference=raw.get("payment_reference"),
            stock_debited=raw.get("stock_debited", False),
            created_at=datetime.fromisoformat(raw["created_at"]),
            cancelled_at=_parse_dt(raw.get("cancelled_at")),
            delivered_at=_parse_dt(raw.get("delivered_at")),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        write_atomic(self._file_path, json.dumps(orders, indent=2) + "\n")


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
