"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items.
Order status and payment status are two independent axes, each guarded by
an explicit transition table. Costs are computed outside the aggregate by
the cost calculator and handed in once, at creation.
"""

from __future__ import annotations

import math
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from bookstore.domain.exceptions import (
    EmptyCartError,
    InvalidStateError,
    InvalidStatusError,
    ValidationError,
)
from bookstore.domain.model.value_objects import Money, Quantity, ShippingAddress


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str) -> OrderStatus:
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as exc:
            raise InvalidStatusError(f"Invalid order status: {value!r}") from exc


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    CASH_ON_DELIVERY = "cash_on_delivery"
    ESEWA = "esewa"

    @classmethod
    def parse(cls, value: str) -> PaymentMethod:
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as exc:
            raise ValidationError(f"Invalid payment method: {value!r}") from exc

    @property
    def is_prepaid(self) -> bool:
        return self in (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD, PaymentMethod.PAYPAL)

    @property
    def uses_gateway(self) -> bool:
        """Paid through the external gateway; stock waits for its callback."""
        return self is PaymentMethod.ESEWA


# ---------------------------------------------------------------------------
# Transition tables
# ---------------------------------------------------------------------------
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.CONFIRMED: frozenset({
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.PROCESSING: frozenset({
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}

REFUND_WINDOW = timedelta(days=30)
MAX_NOTES_LENGTH = 500

_BASE36 = string.digits + string.ascii_uppercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_order_number(now_ms: int | None = None, rng: random.Random | None = None) -> str:
    """Return ``ORD-<base36 ms timestamp>-<5 random base36 chars>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(_BASE36) for _ in range(5))
    return f"ORD-{_to_base36(now_ms)}-{suffix}"


@dataclass(frozen=True)
class OrderLineItem:
    """Snapshot of a cart line taken at order-creation time.

    Holds its own copy of title, author and price so later catalog edits
    never touch historical orders.
    """

    book_id: str
    title: str
    author: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class OrderCosts:
    subtotal: Money
    tax: Money
    shipping_cost: Money
    total: Money

    @staticmethod
    def zero() -> OrderCosts:
        return OrderCosts(Money.zero(), Money.zero(), Money.zero(), Money.zero())


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    user_id: str
    order_number: str
    items: tuple[OrderLineItem, ...]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    costs: OrderCosts
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: str | None = None
    payment_reference: str | None = None
    stock_debited: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cancelled_at: datetime | None = None
    delivered_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: str,
        order_number: str,
        items: list[OrderLineItem],
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
        costs: OrderCosts,
        notes: str | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants.

        Orders paid directly start ``confirmed``; prepaid methods are
        ``completed`` straight away, cash on delivery stays ``pending``.
        Gateway orders start ``pending`` on both axes until the gateway
        reports back.
        """
        if not user_id:
            raise ValidationError("User id is required")
        if not items:
            raise EmptyCartError("Cart is empty")
        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")

        if payment_method.uses_gateway:
            status = OrderStatus.PENDING
            payment_status = PaymentStatus.PENDING
        else:
            status = OrderStatus.CONFIRMED
            payment_status = (
                PaymentStatus.COMPLETED if payment_method.is_prepaid else PaymentStatus.PENDING
            )

        return Order(
            id=None,
            user_id=user_id,
            order_number=order_number,
            items=tuple(items),
            shipping_address=shipping_address,
            payment_method=payment_method,
            costs=costs,
            status=status,
            payment_status=payment_status,
            notes=notes or None,
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(self, new_status: OrderStatus, now: datetime | None = None) -> None:
        """Move the order along the status table."""
        if new_status not in ORDER_TRANSITIONS[self.status]:
            raise InvalidStateError(
                f"Cannot move order from {self.status.value} to {new_status.value}"
            )
        now = now or datetime.now(timezone.utc)
        self.status = new_status
        if new_status is OrderStatus.DELIVERED:
            self.delivered_at = now
        elif new_status is OrderStatus.CANCELLED:
            self.cancelled_at = now

    def cancel(self, now: datetime | None = None) -> None:
        """Transition any non-terminal status -> CANCELLED.

        Returning stock to the shelf is coordinated by the application
        handler via the stock service.
        """
        if not self.can_be_cancelled:
            raise InvalidStateError(f"Cannot cancel {self.status.value} order")
        self.transition_to(OrderStatus.CANCELLED, now)

    def record_payment(self, new_status: PaymentStatus, reference: str | None = None) -> None:
        if new_status not in PAYMENT_TRANSITIONS[self.payment_status]:
            raise InvalidStateError(
                f"Cannot move payment from {self.payment_status.value} to {new_status.value}"
            )
        self.payment_status = new_status
        if reference:
            self.payment_reference = reference

    def mark_stock_debited(self) -> None:
        if self.stock_debited:
            raise InvalidStateError(f"Stock already debited for order {self.order_number}")
        self.stock_debited = True

    def mark_stock_credited(self) -> None:
        self.stock_debited = False

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        return self.costs.total

    @property
    def total_items(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def is_completed(self) -> bool:
        return self.status is OrderStatus.DELIVERED

    @property
    def is_active(self) -> bool:
        return self.status not in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @property
    def can_be_cancelled(self) -> bool:
        return self.is_active

    def days_since_order(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        elapsed = abs((now - self.created_at).total_seconds())
        return math.ceil(elapsed / 86400)

    def can_be_refunded(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return (
            self.status is OrderStatus.DELIVERED
            and self.payment_status is PaymentStatus.COMPLETED
            and now - self.created_at <= REFUND_WINDOW
        )

    def summary(self) -> dict:
        return {
            "order_number": self.order_number,
            "status": self.status.value,
            "item_count": len(self.items),
            "total_items": self.total_items,
            "subtotal": self.costs.subtotal,
            "tax": self.costs.tax,
            "shipping_cost": self.costs.shipping_cost,
            "total": self.costs.total,
            "created_at": self.created_at,
        }
