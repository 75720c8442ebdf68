"""Application service: List Orders use case (query, newest first)."""

from __future__ import annotations

from bookstore.application.dto import OrderPageDTO, order_to_dto
from bookstore.application.pagination import pagination_metadata
from bookstore.domain.model.order import OrderStatus
from bookstore.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        user_id: str,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPageDTO:
        status_filter = OrderStatus.parse(status) if status else None
        total = self._order_repo.count_for_user(user_id, status_filter)
        pagination = pagination_metadata(page, limit, total)

        orders = self._order_repo.list_for_user(
            user_id,
            status=status_filter,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return OrderPageDTO(
            orders=[order_to_dto(o) for o in orders],
            pagination=pagination,
        )
