"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from bookstore.domain.model.book import Book
from bookstore.domain.model.cart import Cart
from bookstore.domain.model.order import Order, OrderStatus, PaymentStatus

_DATE_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class BookDTO:
    id: str
    title: str
    author: str
    price: str  # formatted, e.g. "Rs. 15.00"
    stock: int
    category: str


@dataclass(frozen=True)
class CartLineDTO:
    book_id: str
    title: str
    quantity: int
    price: str
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    user_id: str
    items: list[CartLineDTO]
    item_count: int
    total: str


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    book_id: str
    title: str
    author: str
    quantity: int
    unit_price: str
    subtotal: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    user_id: str
    status: str
    payment_status: str
    payment_method: str
    items: list[OrderLineItemDTO]
    subtotal: str
    tax: str
    shipping_cost: str
    total: str
    created_at: str
    notes: str | None = None
    cancelled_at: str | None = None
    delivered_at: str | None = None
    can_be_cancelled: bool = False
    can_be_refunded: bool = False


@dataclass(frozen=True)
class PaginationDTO:
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_previous_page: bool


@dataclass(frozen=True)
class OrderPageDTO:
    orders: list[OrderDTO]
    pagination: PaginationDTO


@dataclass(frozen=True)
class UserOrderStatsDTO:
    total_orders: int
    total_spent: str
    average_order_value: str


@dataclass(frozen=True)
class PaymentFormDTO:
    """Fields the client posts to the gateway's hosted payment form."""

    form_url: str
    fields: dict[str, str]


@dataclass(frozen=True)
class PaymentVerificationDTO:
    order_number: str
    gateway_status: str
    order_status: str
    payment_status: str
    changed: bool
    verified: bool  # payment completed and applied to a live order


# --- Mapping -----------------------------------------------------------------


def book_to_dto(book: Book) -> BookDTO:
    return BookDTO(
        id=book.id,
        title=book.title,
        author=book.author,
        price=str(book.price),
        stock=book.stock,
        category=book.category,
    )


def cart_to_dto(cart: Cart) -> CartDTO:
    return CartDTO(
        user_id=cart.user_id,
        items=[
            CartLineDTO(
                book_id=line.book_id,
                title=line.title,
                quantity=line.quantity.value,
                price=str(line.price),
                line_total=str(line.line_total),
            )
            for line in cart.items
        ],
        item_count=cart.item_count,
        total=str(cart.total),
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status.value,
        payment_status=order.payment_status.value,
        payment_method=order.payment_method.value,
        items=[
            OrderLineItemDTO(
                book_id=item.book_id,
                title=item.title,
                author=item.author,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                subtotal=str(item.subtotal),
            )
            for item in order.items
        ],
        subtotal=str(order.costs.subtotal),
        tax=str(order.costs.tax),
        shipping_cost=str(order.costs.shipping_cost),
        total=str(order.costs.total),
        created_at=order.created_at.strftime(_DATE_FORMAT),
        notes=order.notes,
        cancelled_at=order.cancelled_at.strftime(_DATE_FORMAT) if order.cancelled_at else None,
        delivered_at=order.delivered_at.strftime(_DATE_FORMAT) if order.delivered_at else None,
        can_be_cancelled=order.can_be_cancelled,
        can_be_refunded=order.can_be_refunded(),
    )


def verification_to_dto(order: Order, gateway_status: str, changed: bool) -> PaymentVerificationDTO:
    # A payment landing on a cancelled order is owed back, not applied.
    applied = (
        order.payment_status is PaymentStatus.COMPLETED
        and order.status is not OrderStatus.CANCELLED
    )
    return PaymentVerificationDTO(
        order_number=order.order_number,
        gateway_status=gateway_status,
        order_status=order.status.value,
        payment_status=order.payment_status.value,
        changed=changed,
        verified=applied,
    )
