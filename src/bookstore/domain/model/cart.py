"""Cart aggregate. One per user, it holds the books they intend to buy.

A cart line captures the book price at the moment the book was first added.
Adding the same book again only bumps the quantity; the captured price is
refreshed only when the caller explicitly asks for it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from bookstore.domain.exceptions import CartItemNotFoundError, InsufficientStockError
from bookstore.domain.model.book import Book
from bookstore.domain.model.value_objects import Money, Quantity


@dataclass
class CartLine:
    book_id: str
    title: str
    author: str
    quantity: Quantity
    price: Money  # captured when the line was created

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity.value


@dataclass
class Cart:
    """Aggregate root for a user's cart.

    Invariants:
    - at most one line per book
    - no line asks for more copies than the book had in stock when the line
      was last changed
    """

    user_id: str
    items: list[CartLine] = field(default_factory=list)
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Mutations ------------------------------------------------------------

    def add_item(self, book: Book, quantity: int) -> CartLine:
        """Add *quantity* copies of *book*, merging into an existing line."""
        requested = Quantity(quantity)
        line = self._find_line(book.id)
        in_cart = line.quantity.value if line else 0

        if in_cart + requested.value > book.stock:
            raise InsufficientStockError(
                book.title, requested.value, max(book.stock - in_cart, 0)
            )

        if line is not None:
            line.quantity = Quantity(in_cart + requested.value)
        else:
            line = CartLine(
                book_id=book.id,
                title=book.title,
                author=book.author,
                quantity=requested,
                price=book.price,
            )
            self.items.append(line)

        self._touch()
        return line

    def update_item(self, book: Book, quantity: int, refresh_price: bool = False) -> CartLine:
        """Set the quantity of an existing line.

        The captured price stays as it was unless *refresh_price* is set, in
        which case the line picks up the book's current catalog price.
        """
        line = self.line_for(book.id)
        new_quantity = Quantity(quantity)

        if new_quantity.value > book.stock:
            raise InsufficientStockError(book.title, new_quantity.value, book.stock)

        line.quantity = new_quantity
        if refresh_price:
            line.price = book.price
        self._touch()
        return line

    def remove_item(self, book_id: str) -> None:
        line = self.line_for(book_id)
        self.items.remove(line)
        self._touch()

    def clear(self) -> None:
        self.items = []
        self._touch()

    # --- Queries --------------------------------------------------------------

    def line_for(self, book_id: str) -> CartLine:
        line = self._find_line(book_id)
        if line is None:
            raise CartItemNotFoundError(f"Book '{book_id}' is not in the cart")
        return line

    @property
    def total(self) -> Money:
        result = Money.zero()
        for line in self.items:
            result = result + line.line_total
        return result

    @property
    def item_count(self) -> int:
        return sum(line.quantity.value for line in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    # --- Internal helpers -----------------------------------------------------

    def _find_line(self, book_id: str) -> CartLine | None:
        for line in self.items:
            if line.book_id == book_id:
                return line
        return None

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
