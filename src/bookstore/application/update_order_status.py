"""Application service: Update Order Status use case (admin).

Moves the order along the status table. No stock side effect: use the
cancel use case to return stock to the shelf.
"""

from __future__ import annotations

import structlog

from bookstore.application.dto import OrderDTO, order_to_dto
from bookstore.domain.exceptions import OrderNotFoundError
from bookstore.domain.model.order import OrderStatus
from bookstore.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, new_status: str) -> OrderDTO:
        status = OrderStatus.parse(new_status)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order #{order_id} not found")

        previous = order.status
        order.transition_to(status)
        self._order_repo.save(order)

        logger.info(
            "Order status updated",
            order_number=order.order_number,
            previous=previous.value,
            status=status.value,
        )
        return order_to_dto(order)
