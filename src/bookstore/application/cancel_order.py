"""Application service: Cancel Order use case.

Cancellation is the compensating action for checkout: if stock was taken
off the shelf for the order, every line is credited back. Gateway orders
that were never paid never took stock, so nothing is returned for them.

Stock is credited before the cancelled order is saved; if the save fails,
the credit is undone and the stored order is left as it was.
"""

from __future__ import annotations

import copy

import structlog

from bookstore.application.dto import OrderDTO, order_to_dto
from bookstore.domain.exceptions import OrderNotFoundError
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.saga import Saga
from bookstore.domain.service.stock_service import StockService

logger = structlog.get_logger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        book_repo: BookRepository,
    ) -> None:
        self._order_repo = order_repo
        self._book_repo = book_repo

    def handle(self, order_id: int, user_id: str) -> OrderDTO:
        stored = self._order_repo.get_by_id(order_id)
        if stored is None or stored.user_id != user_id:
            raise OrderNotFoundError(f"Order #{order_id} not found")

        order = copy.deepcopy(stored)
        order.cancel()

        restock = order.stock_debited
        saga = Saga("cancel-order")
        if restock:
            order.mark_stock_credited()
            stock = StockService(self._book_repo)
            saga.step(
                "credit-stock",
                lambda: stock.credit(order.items),
                lambda: stock.debit(order.items),
            )
        saga.step("save-order", lambda: self._order_repo.save(order))
        saga.run()

        logger.info("Order cancelled", order_number=order.order_number, restocked=restock)
        return order_to_dto(order)
