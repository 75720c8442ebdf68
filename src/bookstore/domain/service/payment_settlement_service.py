"""Domain service: apply a gateway verdict to an order.

Shared by the callback verification and the out-of-band status check so
both paths map gateway statuses onto the order in exactly the same way:

- COMPLETE          -> payment completed, order confirmed, stock debited
                       once, cart cleared; on a cancelled order the
                       payment is only recorded, for a refund
- PENDING/AMBIGUOUS -> nothing changes
- FAILED/CANCELED   -> payment failed, order cancelled, stock untouched
- anything else     -> nothing changes
"""

from __future__ import annotations

import copy
from dataclasses import fields

import structlog

from bookstore.domain.exceptions import ValidationError
from bookstore.domain.gateway.payment_gateway import GatewayStatus
from bookstore.domain.model.order import Order, OrderStatus, PaymentStatus
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.cart_repository import CartRepository
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.saga import Saga
from bookstore.domain.service.stock_service import StockService

logger = structlog.get_logger(__name__)


class PaymentSettlementService:

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        book_repo: BookRepository,
    ) -> None:
        self._order_repo = order_repo
        self._cart_repo = cart_repo
        self._stock = StockService(book_repo)

    def settle(self, order: Order, status: GatewayStatus, reference: str | None = None) -> bool:
        """Apply *status* to *order*. Returns True if the order changed."""
        if not order.payment_method.uses_gateway:
            raise ValidationError(
                f"Order {order.order_number} is not paid through the payment gateway"
            )

        log = logger.bind(order_number=order.order_number, gateway_status=status.value)

        if status is GatewayStatus.COMPLETE:
            if order.payment_status is PaymentStatus.COMPLETED:
                log.info("Payment already settled")
                return False
            if order.status is OrderStatus.CANCELLED:
                # Paid after cancellation: keep the payment on record for a
                # refund, stock and cart stay as they are.
                order.record_payment(PaymentStatus.COMPLETED, reference)
                self._order_repo.save(order)
                log.warning("Payment completed for cancelled order, refund required", reference=reference)
                return True
            self._complete(order, reference)
            log.info("Payment completed", reference=reference)
            return True

        if status in (GatewayStatus.FAILED, GatewayStatus.CANCELED):
            if order.payment_status is PaymentStatus.FAILED:
                log.info("Payment failure already recorded")
                return False
            order.record_payment(PaymentStatus.FAILED, reference)
            if order.can_be_cancelled:
                order.cancel()
            self._order_repo.save(order)
            log.info("Payment failed, order cancelled")
            return True

        if status is GatewayStatus.UNKNOWN:
            log.warning("Unrecognised gateway status, order left untouched")
        return False

    def _complete(self, order: Order, reference: str | None) -> None:
        before = copy.deepcopy(order)
        debit_needed = not order.stock_debited

        if debit_needed:
            order.mark_stock_debited()
        order.record_payment(PaymentStatus.COMPLETED, reference)
        if order.status is OrderStatus.PENDING:
            order.transition_to(OrderStatus.CONFIRMED)

        saga = Saga("payment-completion")
        if debit_needed:
            saga.step(
                "debit-stock",
                lambda: self._stock.debit(order.items),
                lambda: self._stock.credit(order.items),
            )
        saga.step(
            "save-order",
            lambda: self._order_repo.save(order),
            lambda: self._order_repo.save(before),
        )
        saga.step("clear-cart", lambda: self._clear_cart(order.user_id))
        try:
            saga.run()
        except Exception:
            _restore(order, before)
            raise

    def _clear_cart(self, user_id: str) -> None:
        cart = self._cart_repo.get_by_user(user_id)
        if cart is None or cart.is_empty:
            return
        cart.clear()
        self._cart_repo.save(cart)


def _restore(order: Order, snapshot: Order) -> None:
    """Put the aggregate back to the state captured before the attempt."""
    for f in fields(Order):
        setattr(order, f.name, getattr(snapshot, f.name))
