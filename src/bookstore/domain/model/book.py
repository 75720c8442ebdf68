"""Book aggregate.

Books live independently of carts and orders. They have their own lifecycle:
prices change, stock is replenished by the catalog admin and consumed by
orders.
"""

from __future__ import annotations

from dataclasses import dataclass

from bookstore.domain.exceptions import InsufficientStockError, ValidationError
from bookstore.domain.model.value_objects import Money


@dataclass
class Book:
    """A book in the catalog together with its shelf stock.

    Invariants:
    - ``stock`` is never negative
    - ``price`` is never negative (Money enforces this)
    """

    id: str
    title: str
    author: str
    price: Money
    stock: int = 0
    category: str = "general"

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Book title is required")
        if not self.author or not self.author.strip():
            raise ValidationError("Book author is required")
        self._assert_valid_stock(self.stock)

    def update_price(self, new_price: Money) -> None:
        """Change the catalog price.

        Cart lines and order line items keep the price they captured.
        """
        self.price = new_price

    def set_stock(self, stock: int) -> None:
        self._assert_valid_stock(stock)
        self.stock = stock

    def decrement_stock(self, quantity: int) -> None:
        """Take *quantity* copies off the shelf, refusing to go negative."""
        if quantity <= 0:
            raise ValidationError("Stock decrement must be positive")
        if quantity > self.stock:
            raise InsufficientStockError(self.title, quantity, self.stock)
        self.stock -= quantity

    def increment_stock(self, quantity: int) -> None:
        """Put *quantity* copies back on the shelf (e.g. order cancellation)."""
        if quantity <= 0:
            raise ValidationError("Stock increment must be positive")
        self.stock += quantity

    @staticmethod
    def _assert_valid_stock(stock: int) -> None:
        if isinstance(stock, bool) or not isinstance(stock, int):
            raise ValidationError("Stock must be an integer")
        if stock < 0:
            raise ValidationError("Stock cannot be negative")
