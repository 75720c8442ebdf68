"""Application service: Create Order use case.

Turns the user's cart into an order. This is the only place that
coordinates the Book, Cart and Order aggregates during checkout.
"""

from __future__ import annotations

from typing import Callable

import structlog

from bookstore.application.dto import OrderDTO, order_to_dto
from bookstore.domain.exceptions import EmptyCartError
from bookstore.domain.model.order import (
    Order,
    OrderLineItem,
    PaymentMethod,
    generate_order_number,
)
from bookstore.domain.model.value_objects import ShippingAddress
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.cart_repository import CartRepository
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.order_cost_calculator import CostPolicy, calculate_order_costs
from bookstore.domain.service.saga import Saga
from bookstore.domain.service.stock_service import StockService

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        book_repo: BookRepository,
        cost_policy: CostPolicy | None = None,
        order_number_factory: Callable[[], str] = generate_order_number,
    ) -> None:
        self._order_repo = order_repo
        self._cart_repo = cart_repo
        self._book_repo = book_repo
        self._cost_policy = cost_policy or CostPolicy()
        self._order_number_factory = order_number_factory

    def handle(
        self,
        user_id: str,
        shipping_address: ShippingAddress,
        payment_method: str,
        notes: str | None = None,
    ) -> OrderDTO:
        """Create a new order from the user's cart.

        Steps:
        1. Re-check every cart line against *live* stock (time may have
           passed since the book was added).
        2. Snapshot cart lines into OrderLineItems and compute costs once.
        3. Direct payment: debit stock, persist order, clear cart as one
           saga. Gateway payment: persist the pending order only; stock and
           cart are settled when the gateway confirms.
        """
        method = PaymentMethod.parse(payment_method)

        cart = self._cart_repo.get_by_user(user_id)
        if cart is None or cart.is_empty:
            raise EmptyCartError("Cart is empty")

        stock = StockService(self._book_repo)
        checked = stock.check_available(cart.items)

        line_items = [
            OrderLineItem(
                book_id=book.id,
                title=book.title,
                author=book.author,
                quantity=line.quantity,
                unit_price=line.price,  # <-- price captured in the cart
            )
            for line, (book, _) in zip(cart.items, checked)
        ]

        order = Order.create(
            user_id=user_id,
            order_number=self._order_number_factory(),
            items=line_items,
            shipping_address=shipping_address,
            payment_method=method,
            costs=calculate_order_costs(line_items, self._cost_policy),
            notes=notes,
        )

        if method.uses_gateway:
            self._order_repo.save(order)
        else:
            order.mark_stock_debited()
            saga = Saga("checkout")
            saga.step(
                "debit-stock",
                lambda: stock.debit(order.items),
                lambda: stock.credit(order.items),
            )
            saga.step("save-order", lambda: self._order_repo.save(order), lambda: self._discard(order))
            saga.step("clear-cart", lambda: self._clear_cart(cart))
            saga.run()

        logger.info(
            "Order created",
            order_number=order.order_number,
            user_id=user_id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            total=str(order.total.amount),
        )
        return order_to_dto(order)

    def _discard(self, order: Order) -> None:
        if order.id is not None:
            self._order_repo.delete(order.id)

    def _clear_cart(self, cart) -> None:
        cart.clear()
        self._cart_repo.save(cart)
