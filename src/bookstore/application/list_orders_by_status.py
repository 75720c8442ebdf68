"""Application service: List Orders By Status use case (admin query)."""

from __future__ import annotations

from bookstore.application.dto import OrderPageDTO, order_to_dto
from bookstore.application.pagination import pagination_metadata
from bookstore.domain.model.order import OrderStatus
from bookstore.domain.repository.order_repository import OrderRepository


class ListOrdersByStatusHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, status: str, page: int = 1, limit: int = 10) -> OrderPageDTO:
        """Every user's orders in one status, newest first."""
        orders = self._order_repo.list_by_status(OrderStatus.parse(status))
        pagination = pagination_metadata(page, limit, len(orders))

        start = (page - 1) * limit
        return OrderPageDTO(
            orders=[order_to_dto(o) for o in orders[start:start + limit]],
            pagination=pagination,
        )
