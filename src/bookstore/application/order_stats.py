"""Application service: per-user order statistics (query)."""

from __future__ import annotations

from bookstore.application.dto import UserOrderStatsDTO
from bookstore.domain.model.value_objects import Money
from bookstore.domain.repository.order_repository import OrderRepository


class UserOrderStatsHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, user_id: str) -> UserOrderStatsDTO:
        orders = self._order_repo.list_for_user(user_id)
        if not orders:
            zero = Money.zero()
            return UserOrderStatsDTO(total_orders=0, total_spent=str(zero), average_order_value=str(zero))

        spent = Money.zero()
        for order in orders:
            spent = spent + order.total
        average = Money(spent.amount / len(orders), spent.currency).rounded()
        return UserOrderStatsDTO(
            total_orders=len(orders),
            total_spent=str(spent),
            average_order_value=str(average),
        )
