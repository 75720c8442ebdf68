"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookstore.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_order_number(self, order_number: str) -> Order | None:
        """Return an order by its human-readable number, or None."""

    @abstractmethod
    def list_for_user(
        self,
        user_id: str,
        status: OrderStatus | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Order]:
        """Return a user's orders, newest first."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return every order in *status*, across all users, newest first."""

    @abstractmethod
    def count_for_user(self, user_id: str, status: OrderStatus | None = None) -> int:
        """Count a user's orders, optionally filtered by status."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order."""

    @abstractmethod
    def delete(self, order_id: int) -> None:
        """Remove an order (only used to undo a half-finished checkout)."""
