"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each class carries a machine-readable ``code`` that the outer layer shows
next to the message.
"""

from __future__ import annotations

from decimal import Decimal


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "VALIDATION_ERROR"


class EmptyCartError(ValidationError):
    """An order was requested from a cart with no lines."""

    code = "EMPTY_CART"


class InvalidStatusError(ValidationError):
    """A status value is not one of the known statuses."""

    code = "INVALID_STATUS"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "NOT_FOUND"


class BookNotFoundError(EntityNotFoundError):
    code = "BOOK_NOT_FOUND"


class CartItemNotFoundError(EntityNotFoundError):
    code = "CART_ITEM_NOT_FOUND"


class OrderNotFoundError(EntityNotFoundError):
    code = "ORDER_NOT_FOUND"


class InsufficientStockError(DomainException):
    """Requested quantity exceeds what is on the shelf."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, title: str, requested: int, available: int) -> None:
        self.title = title
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {title}. Only {available} available "
            f"(requested {requested})"
        )


class InvalidStateError(DomainException):
    """The order lifecycle does not allow the requested transition."""

    code = "INVALID_ORDER_STATUS"


class PaymentError(DomainException):
    """Base class for payment integrity failures."""

    code = "PAYMENT_ERROR"


class SignatureMismatchError(PaymentError):
    code = "SIGNATURE_MISMATCH"


class AmountMismatchError(PaymentError):
    code = "AMOUNT_MISMATCH"

    def __init__(self, expected: Decimal, received: Decimal) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Payment amount {received:.2f} does not match order total {expected:.2f}"
        )


class InternalError(DomainException):
    """Unexpected failure; the message never exposes storage details."""

    code = "INTERNAL_SERVER_ERROR"


class GatewayError(InternalError):
    """The payment gateway could not be reached or answered nonsense."""

    code = "GATEWAY_ERROR"
